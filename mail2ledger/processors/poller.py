"""
Mailbox poller.

Each cycle:
1) Refresh mailbox credentials
2) List the most recent page of message ids (newest first)
3) Select the window of ids newer than the cursor
4) Process the window oldest to newest, advancing the cursor per disposition
5) Persist the cursor once, at the end of the cycle

A message that cannot be resolved (parse error, fetch or ledger failure)
pins the cursor just before it for the rest of the cycle, so it is retried
next cycle. Newer messages are still processed; their ids are kept in the
cursor's disposed-ahead set so the retry does not resubmit them.
"""

import threading
from datetime import datetime, timezone
from typing import Sequence

from mail2ledger.config import settings
from mail2ledger.core.cursor import CursorStore
from mail2ledger.core.errors import (
    CredentialRefreshError,
    CursorOutOfWindowError,
    Mail2LedgerError,
    StateError,
    TransportError,
)
from mail2ledger.core.logging import bind_context, clear_context, get_logger
from mail2ledger.core.models import (
    CycleResult,
    Disposition,
    ExtractionKind,
    HealthStatus,
    IngestionCursor,
    MessageOutcome,
)
from mail2ledger.extractors import ExtractionRule, classify_and_extract
from mail2ledger.processors.base import BaseProcessor, Ledger, Mailbox

log = get_logger(__name__)


def select_window(message_ids: Sequence[str], cursor: IngestionCursor) -> list[str]:
    """
    Ids strictly newer than the cursor, in the mailbox's newest-first order.

    Raises:
        CursorOutOfWindowError: If the cursor id is set but not in message_ids
    """
    if cursor.is_empty:
        return list(message_ids)
    ids = list(message_ids)
    try:
        index = ids.index(cursor.last_processed_id)
    except ValueError:
        raise CursorOutOfWindowError(cursor.last_processed_id) from None
    return ids[:index]


def _dispose(
    mailbox: Mailbox,
    ledger: Ledger,
    message_id: str,
    rules: Sequence[ExtractionRule] | None,
) -> MessageOutcome:
    """Fetch, extract and forward one message."""
    try:
        message = mailbox.get_message(message_id)
    except TransportError as e:
        log.error("message_fetch_failed", error=str(e))
        return MessageOutcome(message_id, Disposition.UNRESOLVED, error=str(e))

    extraction = classify_and_extract(message, rules)

    if extraction.kind == ExtractionKind.NOT_A_TRANSACTION:
        log.debug("message_skipped", subject=message.subject)
        return MessageOutcome(message_id, Disposition.SKIPPED)

    if extraction.kind == ExtractionKind.PARSE_ERROR:
        log.error("failed_to_parse_transaction", rule=extraction.rule_name, error=extraction.error)
        return MessageOutcome(
            message_id,
            Disposition.UNRESOLVED,
            rule_name=extraction.rule_name,
            error=extraction.error,
        )

    txn = extraction.transaction
    log.info("creating_transaction", rule=extraction.rule_name, transaction=str(txn))
    try:
        ledger.submit(txn)
    except TransportError as e:
        log.error("failed_to_create_transaction", error=str(e))
        return MessageOutcome(
            message_id,
            Disposition.UNRESOLVED,
            rule_name=extraction.rule_name,
            transaction=txn,
            error=str(e),
        )

    return MessageOutcome(
        message_id,
        Disposition.FORWARDED,
        rule_name=extraction.rule_name,
        transaction=txn,
    )


def run_cycle(
    mailbox: Mailbox,
    cursor: IngestionCursor,
    ledger: Ledger,
    page_size: int = 100,
    rules: Sequence[ExtractionRule] | None = None,
) -> CycleResult:
    """
    Run one poll cycle against an in-memory cursor.

    Args:
        mailbox: Mailbox client
        cursor: Cursor loaded at the start of the cycle
        ledger: Ledger client
        page_size: How many recent messages to list
        rules: Extraction rules to use instead of the registry

    Returns:
        CycleResult holding the advanced cursor and one outcome per window message

    Raises:
        CredentialRefreshError: If mailbox access could not be refreshed
        TransportError: If the message list could not be fetched
        CursorOutOfWindowError: If the cursor is not in the fetched page
    """
    mailbox.refresh_credentials()

    message_ids = mailbox.list_recent_message_ids(page_size)
    window = select_window(message_ids, cursor)

    result = CycleResult(cursor=cursor)
    if not window:
        return result

    log.info("processing_window", count=len(window), cursor=cursor.last_processed_id)

    blocked = False
    for message_id in reversed(window):
        bind_context(message_id=message_id)
        try:
            if message_id in cursor.disposed_ahead:
                outcome = MessageOutcome(message_id, Disposition.ALREADY_DISPOSED)
            else:
                outcome = _dispose(mailbox, ledger, message_id, rules)
        except Exception as e:
            log.error("process_message_error", error=str(e), exc_info=True)
            outcome = MessageOutcome(message_id, Disposition.UNRESOLVED, error=str(e))
        finally:
            clear_context()

        result.outcomes.append(outcome)

        if outcome.disposition == Disposition.UNRESOLVED:
            blocked = True
        elif blocked:
            cursor = cursor.mark_disposed(message_id)
        else:
            cursor = cursor.advance_to(message_id)

    result.cursor = cursor.retain(window)
    return result


class Poller(BaseProcessor):
    """
    Timer-driven owner of the cursor and the health signal.

    process() never raises; every failure is logged and reflected in
    ``health`` and the next tick retries.
    """

    def __init__(
        self,
        mailbox: Mailbox | None = None,
        ledger: Ledger | None = None,
        store: CursorStore | None = None,
        page_size: int | None = None,
    ):
        if mailbox is None:
            from mail2ledger.services.gmail import GmailClient
            mailbox = GmailClient()
        if ledger is None:
            from mail2ledger.services.ledger import LedgerClient
            ledger = LedgerClient()

        self.mailbox = mailbox
        self.ledger = ledger
        self.store = store or CursorStore(settings.state_file)
        self.page_size = page_size or settings.page_size
        self.health = HealthStatus()
        self._lock = threading.Lock()

    def _abort(self, event: str, error: Exception) -> dict:
        log.error(event, error=str(error))
        self.health.last_error = str(error)
        self.health.last_cycle_at = datetime.now(timezone.utc)
        return {"status": "aborted", "error": str(error)}

    def process(self) -> dict:
        """
        Run one cycle: load cursor, process, persist cursor.

        Returns immediately with status "busy" when another cycle is running.

        Returns:
            Statistics dict
        """
        if not self._lock.acquire(blocking=False):
            log.warning("poll_cycle_busy")
            return {"status": "busy"}
        try:
            return self._process()
        finally:
            self._lock.release()

    def _process(self) -> dict:
        try:
            cursor = self.store.load()
        except StateError as e:
            self.health.refresh_failed = False
            return self._abort("cursor_load_failed", e)

        try:
            result = run_cycle(self.mailbox, cursor, self.ledger, self.page_size)
        except CredentialRefreshError as e:
            self.health.refresh_failed = True
            return self._abort("token_refresh_failed", e)
        except CursorOutOfWindowError as e:
            self.health.refresh_failed = False
            return self._abort("cursor_out_of_window", e)
        except Mail2LedgerError as e:
            self.health.refresh_failed = False
            return self._abort("poll_cycle_failed", e)
        except Exception as e:
            self.health.refresh_failed = False
            return self._abort("poll_cycle_error", e)

        try:
            self.store.save(result.cursor)
        except StateError as e:
            log.error("cursor_save_failed", error=str(e))

        stats = {"status": "ok", **result.stats}
        self.health.refresh_failed = False
        self.health.last_error = None
        self.health.last_cycle_at = datetime.now(timezone.utc)
        self.health.last_stats = result.stats
        log.info("poll_cycle_complete", cursor=result.cursor.last_processed_id, **result.stats)
        return stats


def run():
    """Entry point for running a single poll cycle."""
    from mail2ledger.core.logging import configure_logging
    configure_logging(settings.log_level, settings.log_json)

    poller = Poller()
    try:
        stats = poller.process()
    finally:
        poller.ledger.close()
    print(f"Poll cycle complete: {stats}")


if __name__ == "__main__":
    run()
