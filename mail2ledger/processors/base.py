"""
Abstract base class and collaborator interfaces for processors.
"""

from abc import ABC, abstractmethod
from typing import Protocol

from mail2ledger.core.models import Message, Transaction


class Mailbox(Protocol):
    """Mailbox operations required by the poller."""

    def refresh_credentials(self) -> None:
        ...

    def list_recent_message_ids(self, page_size: int) -> list[str]:
        ...

    def get_message(self, message_id: str) -> Message:
        ...


class Ledger(Protocol):
    """Ledger operations required by the poller."""

    def submit(self, txn: Transaction) -> None:
        ...

    def close(self) -> None:
        ...


class BaseProcessor(ABC):
    """Abstract processor interface for ingestion pipelines."""

    @abstractmethod
    def process(self) -> dict:
        """
        Run one processing pass.

        Returns:
            Processing statistics dict
        """
        pass
