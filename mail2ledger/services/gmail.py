"""
Gmail API client for reading bank notification emails.

Only reads an existing OAuth token file; the login flow that creates it is
handled outside this service.
"""

from pathlib import Path

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from mail2ledger.config import settings
from mail2ledger.core.decoder import MessagePart, decode_body
from mail2ledger.core.errors import CredentialRefreshError, TransportError
from mail2ledger.core.logging import get_logger
from mail2ledger.core.models import Message

log = get_logger(__name__)

SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]

_TRANSPORT_ERRORS = (HttpError, httplib2.HttpLib2Error, OSError)


class GmailClient:
    """Read-only Gmail client."""

    def __init__(
        self,
        token_file: str | Path | None = None,
        user_id: str | None = None,
        credentials: Credentials | None = None,
        service=None,
    ):
        self.token_file = Path(token_file or settings.gmail_token_file)
        self.user_id = user_id or settings.gmail_user_id
        self._credentials = credentials
        self._service = service
        self.refresh_failed = False

    @property
    def needs_refresh(self) -> bool:
        """True when no valid access token is loaded."""
        return self._credentials is None or not self._credentials.valid

    @property
    def service(self):
        if self._service is None:
            self._service = build(
                "gmail", "v1", credentials=self._load_credentials(), cache_discovery=False
            )
        return self._service

    def _load_credentials(self) -> Credentials:
        if self._credentials is None:
            try:
                self._credentials = Credentials.from_authorized_user_file(
                    str(self.token_file), SCOPES
                )
            except (OSError, ValueError) as e:
                self.refresh_failed = True
                raise CredentialRefreshError(f"could not read token: {e}") from e
        return self._credentials

    def _save_token(self, credentials: Credentials) -> None:
        try:
            self.token_file.write_text(credentials.to_json(), encoding="utf-8")
        except OSError as e:
            log.warning("token_save_failed", path=str(self.token_file), error=str(e))

    def _refresh_error(self, error: GoogleAuthError) -> CredentialRefreshError:
        self.refresh_failed = True
        return CredentialRefreshError(f"failed to refresh token: {error}")

    def refresh_credentials(self) -> None:
        """
        Make sure the access token is valid, refreshing it when expired.

        Raises:
            CredentialRefreshError: If the token is missing or cannot be refreshed
        """
        credentials = self._load_credentials()
        if credentials.valid:
            return

        log.info("token_expired_refreshing")
        try:
            credentials.refresh(Request())
        except GoogleAuthError as e:
            raise self._refresh_error(e) from e

        self._save_token(credentials)
        self._service = None  # rebuilt with the new token
        self.refresh_failed = False
        log.info("token_refreshed")

    def list_recent_message_ids(self, page_size: int) -> list[str]:
        """
        Ids of the most recent messages, newest first.

        Raises:
            CredentialRefreshError: If the token expires and cannot be refreshed
            TransportError: If the API call fails
        """
        try:
            response = (
                self.service.users()
                .messages()
                .list(userId=self.user_id, maxResults=page_size)
                .execute()
            )
        except GoogleAuthError as e:
            raise self._refresh_error(e) from e
        except _TRANSPORT_ERRORS as e:
            raise TransportError(f"could not retrieve messages: {e}") from e
        return [m["id"] for m in response.get("messages", [])]

    def get_message(self, message_id: str) -> Message:
        """
        Fetch one message and decode it.

        Raises:
            CredentialRefreshError: If the token expires and cannot be refreshed
            TransportError: If the API call fails
        """
        try:
            raw = (
                self.service.users()
                .messages()
                .get(userId=self.user_id, id=message_id, format="full")
                .execute()
            )
        except GoogleAuthError as e:
            raise self._refresh_error(e) from e
        except _TRANSPORT_ERRORS as e:
            raise TransportError(f"could not get message: {message_id}: {e}") from e

        payload = MessagePart.from_api(raw.get("payload") or {})
        return Message(
            subject=payload.header("Subject"),
            sender=payload.header("From"),
            date=payload.header("Date"),
            body=decode_body(payload),
        )
