"""
Structured logging for the poller and its clients.

Logs are event names with keyword context, e.g.
``log.info("creating_transaction", rule="hdfc_upi")``. The message id of
the mail being processed is bound per message with bind_context(), so every
line emitted while handling it carries ``message_id``.
"""

import logging
import sys

import structlog

# Third-party loggers that are chatty at INFO on every poll tick
QUIET_LOGGERS = (
    "googleapiclient.discovery",
    "googleapiclient.discovery_cache",
    "httpx",
    "apscheduler.executors.default",
)


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level: {name}")
    return level


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure structlog on top of stdlib logging.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
        json_output: JSON lines when True, colored console output otherwise

    Raises:
        ValueError: If log_level is not a logging level name
    """
    level = _level(log_level)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    # Library chatter stays at WARNING unless we are debugging
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_output:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs) -> None:
    """Bind key/values to every log line emitted from the current context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop all context bound with bind_context()."""
    structlog.contextvars.clear_contextvars()
