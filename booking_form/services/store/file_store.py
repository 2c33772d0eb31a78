# booking_form/services/store/file_store.py
"""
Local JSON file storage.

Format: one JSON array of booking records, indent=2, trailing newline.
The directory and an empty "[]" file are created on first access.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from ...errors import StorageError
from ...schemas.bookings import BookingRecord
from .base import BookingStore, backfill_dates, normalize_email, parse_records

logger = logging.getLogger(__name__)


class FileStore(BookingStore):

    name = "file"

    def __init__(self, path: Path):
        self.path = Path(path)

    def _ensure_file(self) -> None:
        if self.path.exists():
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("[]", encoding="utf-8")
        logger.info(f"Created bookings file: {self.path}")

    # ── Read ─────────────────────────────────────────────────────────────

    def _read_raw(self) -> list:
        """Decoded file entries as stored, including ones that don't parse."""
        try:
            self._ensure_file()
            data = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read bookings file: {e}") from e

        if not data.strip():
            return []

        try:
            raw = json.loads(data)
        except json.JSONDecodeError:
            logger.exception("Failed to parse bookings file, resetting to empty list")
            return []

        if not isinstance(raw, list):
            logger.error("Bookings file does not hold a JSON array, resetting to empty list")
            return []

        raw, changed = backfill_dates(raw)
        if changed:
            logger.info("Backfilled missing booking dates from timestamps")
            self._write(raw)
        return raw

    def load_all(self) -> list[BookingRecord]:
        return parse_records(self._read_raw())

    # ── Write ────────────────────────────────────────────────────────────

    def _write(self, payload: list) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                f"{json.dumps(payload, indent=2, ensure_ascii=False)}\n",
                encoding="utf-8",
            )
        except OSError as e:
            raise StorageError(f"Failed to write bookings file: {e}") from e

    def save_all(self, records: list[BookingRecord]) -> None:
        self._write([r.to_json() for r in records])

    def commit(
        self,
        existing: list[BookingRecord],
        record: BookingRecord,
        replaced: Optional[BookingRecord] = None,
    ) -> None:
        # Rewritten from the raw entries so unreadable ones stay on disk
        email = normalize_email(record.email)
        kept = [
            entry for entry in self._read_raw()
            if not isinstance(entry, dict) or normalize_email(entry.get("email")) != email
        ]
        self._write([*kept, record.to_json()])
