"""
JSON file storage for the ingestion cursor.
"""

import json
from pathlib import Path

from mail2ledger.core.errors import StateError
from mail2ledger.core.logging import get_logger
from mail2ledger.core.models import IngestionCursor

log = get_logger(__name__)


class CursorStore:
    """Durable slot holding the ingestion cursor."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> IngestionCursor:
        """
        Load the persisted cursor.

        A missing file is a fresh start and yields an empty cursor.

        Raises:
            StateError: If the file exists but cannot be read or parsed
        """
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            log.info("cursor_missing", path=str(self.path))
            return IngestionCursor()
        except OSError as e:
            raise StateError(f"could not read state: {e}") from e

        try:
            data = json.loads(raw.decode("utf-8"))
            if not isinstance(data, dict):
                raise ValueError("state must be a JSON object")
            return IngestionCursor.from_dict(data)
        except ValueError as e:
            raise StateError(f"could not unmarshal state: {e}") from e

    def save(self, cursor: IngestionCursor) -> None:
        """
        Persist the cursor atomically (temp file, then rename).

        Raises:
            StateError: If the file cannot be written
        """
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(cursor.to_dict()) + "\n", encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            raise StateError(f"failed writing state: {e}") from e
        log.debug("cursor_saved", last_message_id=cursor.last_processed_id)
