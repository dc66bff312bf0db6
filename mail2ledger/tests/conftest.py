"""
Shared pytest fixtures for mail2ledger tests.
"""

import base64

import pytest
from unittest.mock import MagicMock

from mail2ledger.core.cursor import CursorStore
from mail2ledger.core.errors import CredentialRefreshError, TransportError
from mail2ledger.core.models import Message


def b64url(text: str) -> str:
    """Encode text the way Gmail does (URL-safe, no padding)."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


UPI_BODY = (
    "Dear Customer,\n\n"
    "Rs.250.00 has been debited from account **1234 to VPA foo@bank John Doe on 01-01-24. "
    "Your UPI transaction reference number is 400112345678.\n"
)


@pytest.fixture
def upi_message() -> Message:
    """HDFC UPI debit alert."""
    return Message(
        subject="You have done a UPI txn. Check details!",
        sender="HDFC Bank InstaAlerts <alerts@hdfcbank.net>",
        date="Fri, 14 Nov 2025 20:59:28 +0530 (IST)",
        body=UPI_BODY,
    )


@pytest.fixture
def credit_card_message() -> Message:
    """HDFC credit card debit alert."""
    return Message(
        subject="Rs.1,499.00 debited via Credit Card **5678",
        sender="HDFC Bank InstaAlerts <alerts@hdfcbank.net>",
        date="Tue, 2 Jan 2024 09:15:00 +0530",
        body=(
            "Dear Card Member, Thank you for using your HDFC Bank Credit Card ending 5678. "
            "Rs.1,499.00 is debited from your HDFC Bank Credit Card ending 5678 "
            "towards AMAZON PAY INDIA on 02 Jan, 2024 at 09:14:10."
        ),
    )


@pytest.fixture
def newsletter_message() -> Message:
    """Email that no rule classifies as a transaction."""
    return Message(
        subject="Your weekly newsletter",
        sender="news@example.com",
        date="Mon, 1 Jan 2024 08:00:00 +0000",
        body="Nothing to see here. Rs.100.00 has been debited from nobody.",
    )


@pytest.fixture
def drifted_message() -> Message:
    """Subject matches the UPI rule but the body template changed."""
    return Message(
        subject="You have done a UPI txn. Check details!",
        sender="HDFC Bank InstaAlerts <alerts@hdfcbank.net>",
        date="Fri, 14 Nov 2025 20:59:28 +0530 (IST)",
        body="Amount of INR 250 was sent to John Doe.",
    )


class FakeMailbox:
    """In-memory mailbox. ``messages`` is ordered newest first."""

    def __init__(self, messages: list[tuple[str, Message]] | None = None):
        self.messages = list(messages or [])
        self.refresh_error: Exception | None = None
        self.list_error: Exception | None = None
        self.fetch_errors: set[str] = set()
        self.fetched: list[str] = []

    def receive(self, message_id: str, message: Message) -> None:
        self.messages.insert(0, (message_id, message))

    def refresh_credentials(self) -> None:
        if self.refresh_error:
            raise self.refresh_error

    def list_recent_message_ids(self, page_size: int) -> list[str]:
        if self.list_error:
            raise self.list_error
        return [message_id for message_id, _ in self.messages[:page_size]]

    def get_message(self, message_id: str) -> Message:
        self.fetched.append(message_id)
        if message_id in self.fetch_errors:
            raise TransportError(f"could not get message: {message_id}")
        return dict(self.messages)[message_id]


@pytest.fixture
def encode():
    """Gmail-style base64url encoder."""
    return b64url


@pytest.fixture
def mailbox() -> FakeMailbox:
    return FakeMailbox()


@pytest.fixture
def failing_mailbox() -> FakeMailbox:
    """Mailbox whose token cannot be refreshed."""
    box = FakeMailbox()
    box.refresh_error = CredentialRefreshError("failed to refresh token: invalid_grant")
    return box


@pytest.fixture
def mock_ledger():
    """Mock ledger client that accepts every transaction."""
    ledger = MagicMock()
    ledger.submit.return_value = None
    return ledger


@pytest.fixture
def cursor_store(tmp_path) -> CursorStore:
    return CursorStore(tmp_path / "state" / ".last_read_state.json")
