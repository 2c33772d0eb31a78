# booking_form/services/store/base.py
"""
Booking store interface and shared record helpers.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from ...schemas.bookings import BookingRecord

logger = logging.getLogger(__name__)


def normalize_email(value) -> str:
    return value.strip().lower() if isinstance(value, str) else ""


def date_from_timestamp(timestamp) -> Optional[str]:
    """ISO timestamp → UTC calendar date "YYYY-MM-DD", or None if unparseable."""
    if not isinstance(timestamp, str) or not timestamp:
        return None
    try:
        parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date().isoformat()


def backfill_dates(raw_records: list) -> tuple[list, bool]:
    """
    Fill missing `date` from legacy `timestamp`.

    Returns (records, changed). Non-dict entries pass through untouched.
    """
    changed = False
    result = []
    for raw in raw_records:
        if isinstance(raw, dict) and not raw.get("date"):
            derived = date_from_timestamp(raw.get("timestamp"))
            if derived:
                raw = {**raw, "date": derived}
                changed = True
        result.append(raw)
    return result, changed


def parse_records(raw_records: list) -> list[BookingRecord]:
    """Validate decoded dicts into records, skipping ones that don't fit."""
    records = []
    for raw in raw_records:
        if not isinstance(raw, dict):
            logger.warning(f"Skipping non-object booking entry: {raw!r:.80}")
            continue
        try:
            records.append(BookingRecord.model_validate(raw))
        except PydanticValidationError as e:
            logger.warning(f"Skipping unreadable booking {raw.get('id')!r}: {e.error_count()} errors")
    return records


class BookingStore(ABC):
    """
    Persistent collection of booking records.

    The store exclusively owns persistence. Route handlers pass it the
    validator's decision through commit().
    """

    name = "abstract"

    @abstractmethod
    def load_all(self) -> list[BookingRecord]:
        """All active bookings. Corrupted backing data yields an empty list."""

    @abstractmethod
    def commit(
        self,
        existing: list[BookingRecord],
        record: BookingRecord,
        replaced: Optional[BookingRecord] = None,
    ) -> None:
        """
        Persist an accepted booking.

        Every record in `existing` sharing the new record's normalized
        email is retired; `replaced` is the first of them.

        Raises:
            StorageError: backing store write failed
        """

    def close(self) -> None:
        pass
