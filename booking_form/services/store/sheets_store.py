# booking_form/services/store/sheets_store.py
"""
Google Sheets storage through an Apps Script web app.

The script exposes:
- GET  {url}            → {"success": true, "bookings": [...]}
- POST {url} + record   → upserts the row keyed by email,
                          {"success": true, "isUpdate": bool, "bookingId": ...}

Replacement by email happens inside the script, so commit() is one POST.
"""

import logging
import re
from typing import Optional

import httpx

from ...errors import StorageError
from ...schemas.bookings import BookingRecord
from .base import BookingStore, backfill_dates, parse_records

logger = logging.getLogger(__name__)

_SHORT_TIME = re.compile(r"^(\d{1,2}):(\d{2})$")


def normalize_time_slot(value) -> str:
    """Sheet cells lose the leading zero: "9:00" → "09:00"."""
    text = str(value or "").strip()
    match = _SHORT_TIME.match(text)
    if match:
        return f"{int(match.group(1)):02d}:{match.group(2)}"
    return text


class SpreadsheetStore(BookingStore):

    name = "sheets"

    def __init__(self, url: str, client: httpx.Client | None = None, timeout: float = 15.0):
        self.url = url
        self.client = client or httpx.Client(follow_redirects=True, timeout=timeout)

    def _post(self, payload: dict) -> dict:
        try:
            response = self.client.post(self.url, json=payload)
            response.raise_for_status()
            result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise StorageError(f"Spreadsheet write failed: {e}") from e

        if not isinstance(result, dict) or not result.get("success"):
            error = result.get("error") if isinstance(result, dict) else None
            raise StorageError(f"Spreadsheet rejected booking: {error or 'unknown error'}")
        return result

    # ── Read ─────────────────────────────────────────────────────────────

    def load_all(self) -> list[BookingRecord]:
        try:
            response = self.client.get(self.url)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError):
            logger.exception("Error loading bookings from spreadsheet")
            return []

        if not isinstance(data, dict) or not data.get("success"):
            logger.error(f"Spreadsheet returned an error: {data!r:.200}")
            return []

        raw = data.get("bookings") or []
        if not isinstance(raw, list):
            return []

        raw, changed = backfill_dates(raw)
        for row in raw:
            if isinstance(row, dict):
                row["timeSlot"] = normalize_time_slot(row.get("timeSlot"))
        records = parse_records(raw)

        if changed:
            logger.info("Backfilled missing booking dates from timestamps")
            for record in records:
                self._post(record.to_json())

        return records

    # ── Write ────────────────────────────────────────────────────────────

    def commit(
        self,
        existing: list[BookingRecord],
        record: BookingRecord,
        replaced: Optional[BookingRecord] = None,
    ) -> None:
        result = self._post(record.to_json())
        logger.info(
            f"Spreadsheet booking saved: {result.get('bookingId', record.id)} "
            f"(update={bool(result.get('isUpdate'))})"
        )

    def close(self) -> None:
        self.client.close()
