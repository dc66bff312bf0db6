"""
HTTP client for the ledger service.
"""

import httpx

from mail2ledger.config import settings
from mail2ledger.core.errors import LedgerError
from mail2ledger.core.logging import get_logger
from mail2ledger.core.models import Transaction

log = get_logger(__name__)


class LedgerClient:
    """Client for the ledger's transactions API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.ledger_url).rstrip("/")
        self.timeout = timeout or settings.ledger_timeout_seconds
        self._client = httpx.Client(timeout=self.timeout, transport=transport)

    def submit(self, txn: Transaction) -> None:
        """
        Create a transaction in the ledger.

        Args:
            txn: Transaction to create

        Raises:
            LedgerError: If the ledger is unreachable or rejects the request
        """
        try:
            response = self._client.post(
                f"{self.base_url}/api/transactions",
                json=txn.to_dict(),
            )
            response.raise_for_status()

        except httpx.HTTPStatusError as e:
            log.error(
                "ledger_http_error",
                status=e.response.status_code,
                body=e.response.text[:500],
            )
            raise LedgerError(
                f"failed with status code: {e.response.status_code}: {e.response.text}",
                status_code=e.response.status_code,
            ) from e

        except httpx.RequestError as e:
            log.error("ledger_request_error", error=str(e))
            raise LedgerError(f"failed to make request: {e}") from e

    def close(self) -> None:
        self._client.close()
