"""
Data models for mail ingestion.

Uses dataclasses for clean, typed data structures. Messages, transactions and
cursors are immutable values passed between components.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable


@dataclass(frozen=True)
class Message:
    """A mailbox message reduced to the fields the extractor needs."""

    subject: str = ""
    sender: str = ""
    date: str = ""  # raw Date header, e.g. "Fri, 14 Nov 2025 20:59:28 +0530 (IST)"
    body: str = ""


@dataclass(frozen=True)
class Transaction:
    """A transaction ready to be forwarded to the ledger."""

    amount: Decimal
    description: str
    transaction_date: str  # YYYY-MM-DD

    def __post_init__(self):
        if self.amount <= 0:
            raise ValueError(f"amount must be positive, got {self.amount}")
        if not self.description or self.description != self.description.strip():
            raise ValueError(f"description must be non-empty and trimmed, got {self.description!r}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to the ledger's JSON payload."""
        return {
            "amount": float(self.amount),
            "description": self.description,
            "transaction_date": self.transaction_date,
        }

    def __str__(self) -> str:
        return f"Amount: {self.amount}, Description: {self.description}, Date: {self.transaction_date}"


class ExtractionKind(str, Enum):
    """Outcome of running the extractor over one message."""

    TRANSACTION = "transaction"
    NOT_A_TRANSACTION = "not_a_transaction"
    PARSE_ERROR = "parse_error"


@dataclass(frozen=True)
class ExtractionResult:
    """Result from classify_and_extract()."""

    kind: ExtractionKind
    rule_name: str | None = None
    transaction: Transaction | None = None
    error: str | None = None


@dataclass(frozen=True)
class IngestionCursor:
    """
    Pointer to the last fully disposed mailbox message.

    ``disposed_ahead`` holds ids newer than ``last_processed_id`` that were
    already forwarded or skipped while an older message is still unresolved.
    They are not processed again, and are folded into ``last_processed_id``
    once the older message is resolved.
    """

    last_processed_id: str = ""
    disposed_ahead: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        return not self.last_processed_id

    def advance_to(self, message_id: str) -> "IngestionCursor":
        """Move the cursor forward to message_id."""
        return IngestionCursor(
            last_processed_id=message_id,
            disposed_ahead=self.disposed_ahead - {message_id},
        )

    def mark_disposed(self, message_id: str) -> "IngestionCursor":
        """Record message_id as disposed without moving the cursor."""
        return replace(self, disposed_ahead=self.disposed_ahead | {message_id})

    def retain(self, message_ids: Iterable[str]) -> "IngestionCursor":
        """Forget disposed ids that are no longer in the mailbox window."""
        return replace(self, disposed_ahead=self.disposed_ahead & frozenset(message_ids))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IngestionCursor":
        """Create a cursor from its persisted form. Raises ValueError on bad types."""
        last_id = data.get("last_message_id")
        if last_id is None:
            last_id = ""
        if not isinstance(last_id, str):
            raise ValueError("last_message_id must be a string")
        ahead = data.get("disposed_ahead")
        if ahead is None:
            ahead = []
        if not isinstance(ahead, list) or not all(isinstance(i, str) for i in ahead):
            raise ValueError("disposed_ahead must be a list of strings")
        return cls(last_processed_id=last_id, disposed_ahead=frozenset(ahead))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON storage."""
        data: dict[str, Any] = {"last_message_id": self.last_processed_id}
        if self.disposed_ahead:
            data["disposed_ahead"] = sorted(self.disposed_ahead)
        return data


class Disposition(str, Enum):
    """Terminal outcome of one message within a cycle."""

    FORWARDED = "forwarded"
    SKIPPED = "skipped"  # not a transaction
    ALREADY_DISPOSED = "already_disposed"
    UNRESOLVED = "unresolved"  # left for retry next cycle


@dataclass(frozen=True)
class MessageOutcome:
    """What happened to one message in a cycle."""

    message_id: str
    disposition: Disposition
    rule_name: str | None = None
    transaction: Transaction | None = None
    error: str | None = None


@dataclass
class CycleResult:
    """Result from one poll cycle."""

    cursor: IngestionCursor
    outcomes: list[MessageOutcome] = field(default_factory=list)

    def count(self, disposition: Disposition) -> int:
        return sum(1 for o in self.outcomes if o.disposition == disposition)

    @property
    def stats(self) -> dict[str, int]:
        """Per-disposition counts for logging."""
        stats = {d.value: self.count(d) for d in Disposition}
        stats["window"] = len(self.outcomes)
        return stats


@dataclass
class HealthStatus:
    """Health signal exposed on the status endpoint."""

    refresh_failed: bool = False
    last_error: str | None = None
    last_cycle_at: datetime | None = None
    last_stats: dict[str, int] = field(default_factory=dict)

    @property
    def healthy(self) -> bool:
        return not self.refresh_failed and self.last_error is None

    @property
    def reason(self) -> str:
        if self.refresh_failed:
            return "Failed to refresh token"
        return self.last_error or "ok"
