"""
Error types for the ingestion pipeline.

Per-message errors (ParseError, TransportError while fetching or forwarding
one message) are contained by the poller. StateError, CursorOutOfWindowError
and CredentialRefreshError abort the whole cycle, which is retried on the
next tick.
"""


class Mail2LedgerError(Exception):
    """Base class for all pipeline errors."""


class TransportError(Mail2LedgerError):
    """Mailbox or ledger unreachable, or the request was rejected."""


class CredentialRefreshError(TransportError):
    """The mailbox access token could not be refreshed."""


class LedgerError(TransportError):
    """The ledger service did not accept a transaction."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(Mail2LedgerError):
    """A rule matched the subject but the body or date had an unexpected shape."""


class StateError(Mail2LedgerError):
    """The cursor store could not be read, parsed or written."""


class CursorOutOfWindowError(Mail2LedgerError):
    """The stored cursor id is not in the most recently fetched page."""

    def __init__(self, cursor_id: str):
        super().__init__(f"last message id not found: {cursor_id}")
        self.cursor_id = cursor_id
