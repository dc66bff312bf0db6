"""
APScheduler job runner for periodic mailbox polling.
"""

from datetime import datetime

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from mail2ledger.config import settings
from mail2ledger.core.logging import get_logger
from mail2ledger.processors.poller import Poller

log = get_logger(__name__)

# Global scheduler instance
_scheduler: BackgroundScheduler | None = None


def poll_job(poller: Poller):
    """Scheduled job running one poll cycle. Never raises."""
    log.info("scheduled_job_starting", job="poll_mailbox")
    try:
        stats = poller.process()
        log.info("scheduled_job_complete", job="poll_mailbox", **stats)
    except Exception as e:
        log.error("scheduled_job_error", job="poll_mailbox", error=str(e))


def start_scheduler(poller: Poller, interval_seconds: int | None = None) -> BackgroundScheduler:
    """
    Start the background polling scheduler.

    The first cycle runs immediately. max_instances=1 keeps cycles from
    overlapping; a cycle that overruns the interval delays the next one.

    Args:
        poller: Poller owning the cursor and health state
        interval_seconds: Poll interval (default: settings.poll_interval_seconds)

    Returns:
        The scheduler instance
    """
    global _scheduler

    if _scheduler is not None:
        log.warning("scheduler_already_running")
        return _scheduler

    interval = interval_seconds or settings.poll_interval_seconds
    _scheduler = BackgroundScheduler()
    _scheduler.add_job(
        poll_job,
        trigger=IntervalTrigger(seconds=interval),
        args=[poller],
        id="poll_mailbox",
        name="Poll mailbox for bank alerts",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        next_run_time=datetime.now(),
    )

    _scheduler.start()
    log.info("scheduler_started", interval_seconds=interval)

    return _scheduler


def stop_scheduler():
    """Stop the background scheduler."""
    global _scheduler

    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        log.info("scheduler_stopped")


def get_scheduler() -> BackgroundScheduler | None:
    """Get the current scheduler instance."""
    return _scheduler
