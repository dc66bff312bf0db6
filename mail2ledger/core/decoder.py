"""
Plain-text body reconstruction for Gmail message payloads.

Gmail returns a tree of parts; each part has a MIME type and either inline
base64url data or nested sub-parts. decode_body() never raises: a part that
fails to decode contributes no text and the rest of the message still
yields whatever it can.
"""

import base64
import binascii
from dataclasses import dataclass, field
from typing import Any

from mail2ledger.core.logging import get_logger

log = get_logger(__name__)

PLAIN_TEXT = "text/plain"


@dataclass(frozen=True)
class MessagePart:
    """One node of a message payload tree."""

    mime_type: str = ""
    data: str = ""
    parts: tuple["MessagePart", ...] = ()
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "MessagePart":
        """Build a part tree from a Gmail API ``payload`` dict."""
        headers = {}
        for header in payload.get("headers") or []:
            name = header.get("name")
            if name and name not in headers:
                headers[name] = header.get("value", "")
        return cls(
            mime_type=payload.get("mimeType", ""),
            data=(payload.get("body") or {}).get("data", ""),
            parts=tuple(cls.from_api(p) for p in payload.get("parts") or []),
            headers=headers,
        )

    def header(self, name: str) -> str:
        """Header value by case-insensitive name, empty if missing."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return ""


def decode_base64url(data: str) -> bytes:
    """Decode Gmail's URL-safe, unpadded base64. Raises ValueError on bad input."""
    padded = data + "=" * (-len(data) % 4)
    standard = padded.replace("-", "+").replace("_", "/")
    try:
        return base64.b64decode(standard, validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64url data: {e}") from e


def _decode_text(data: str) -> str | None:
    try:
        return decode_base64url(data).decode("utf-8", errors="replace")
    except ValueError as e:
        log.debug("part_decode_failed", error=str(e))
        return None


def decode_body(part: MessagePart) -> str:
    """
    Reconstruct a best-effort plain-text body from a payload tree.

    Inline data on the part starts the body and other sub-parts are decoded
    recursively and appended. A text/plain sub-part replaces everything
    accumulated at its level; the last one wins, and no sibling HTML or
    binary alternative is appended after it.
    """
    body = ""
    if part.data:
        body = _decode_text(part.data) or ""

    plain_text = None
    for sub in part.parts:
        if sub.mime_type == PLAIN_TEXT and sub.data:
            text = _decode_text(sub.data)
            if text is not None:
                plain_text = text
            continue
        if plain_text is None:
            body += decode_body(sub)

    return plain_text if plain_text is not None else body
