"""Core modules for mail ingestion."""

from .logging import configure_logging, get_logger
from .models import (
    Message,
    Transaction,
    ExtractionKind,
    ExtractionResult,
    IngestionCursor,
    Disposition,
    CycleResult,
    HealthStatus,
)
from .cursor import CursorStore

__all__ = [
    "configure_logging",
    "get_logger",
    "Message",
    "Transaction",
    "ExtractionKind",
    "ExtractionResult",
    "IngestionCursor",
    "Disposition",
    "CycleResult",
    "HealthStatus",
    "CursorStore",
]
