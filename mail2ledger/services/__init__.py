"""External service clients."""

from .gmail import GmailClient
from .ledger import LedgerClient

__all__ = ["GmailClient", "LedgerClient"]
