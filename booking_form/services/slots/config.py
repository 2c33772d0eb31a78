# booking_form/services/slots/config.py
"""
Per-day hours configuration for the slot catalog.

File format (JSON), either a bare list or wrapped in {"days": [...]}:

    [
        {"date": "2025-11-25", "startHour": 9, "endHour": 17},
        {"date": "2025-11-26", "startHour": 10, "endHour": 14}
    ]
"""

import json
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_START_HOUR = 9
DEFAULT_END_HOUR = 17


@dataclass(frozen=True)
class DayHours:
    """
    Bookable hours of one configured day.

    Attributes:
        date: Calendar day
        start_hour: First slot hour (inclusive)
        end_hour: Last slot hour (inclusive)
    """
    date: date
    start_hour: int = DEFAULT_START_HOUR
    end_hour: int = DEFAULT_END_HOUR

    @property
    def slots(self) -> list[str]:
        """One "HH:00" slot per whole hour, both ends included."""
        return [f"{hour:02d}:00" for hour in range(self.start_hour, self.end_hour + 1)]


def _coerce_hour(value, default: int) -> int:
    """Hours that are missing, non-numeric or outside 0..23 fall back to the default."""
    if isinstance(value, bool):
        return default
    try:
        hour = int(value)
    except (TypeError, ValueError):
        return default
    if not 0 <= hour <= 23:
        return default
    return hour


def parse_days(raw) -> list[DayHours]:
    """
    Build DayHours entries from decoded JSON.

    Entries without a valid ISO date are skipped. Duplicate dates keep the
    first entry. Result is sorted by date.
    """
    if isinstance(raw, dict):
        raw = raw.get("days", [])
    if not isinstance(raw, list):
        return []

    days: dict[date, DayHours] = {}
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        try:
            day = date.fromisoformat(str(entry.get("date", "")))
        except ValueError:
            logger.warning(f"Skipping catalog entry with invalid date: {entry!r}")
            continue
        if day in days:
            continue

        start = _coerce_hour(entry.get("startHour"), DEFAULT_START_HOUR)
        end = _coerce_hour(entry.get("endHour"), DEFAULT_END_HOUR)
        if end < start:
            start, end = DEFAULT_START_HOUR, DEFAULT_END_HOUR
        days[day] = DayHours(date=day, start_hour=start, end_hour=end)

    return [days[d] for d in sorted(days)]


def load_days_file(path: Path) -> list[DayHours]:
    """Read a days file. Missing or unreadable files yield an empty list."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning(f"Catalog file not found: {path}")
        return []
    except OSError as e:
        logger.error(f"Failed to read catalog file {path}: {e}")
        return []

    if not text.strip():
        return []

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse catalog file {path}: {e}")
        return []

    return parse_days(raw)
