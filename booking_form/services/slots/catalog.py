# booking_form/services/slots/catalog.py
"""
Slot catalog: the universe of bookable (date, time slot) pairs.

Policies:
- PerDayHoursCatalog: each configured day has its own hour range
- WindowCatalog: one fixed slot list for every day in [min_date, max_date]
- LiveFileCatalog: per-day hours re-read from disk on every call
"""

import logging
import re
from abc import ABC, abstractmethod
from datetime import date, timedelta
from pathlib import Path
from typing import Callable, Optional

from ...config import DEFAULT_TIME_SLOTS, Settings
from .config import DayHours, load_days_file

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30
ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


def parse_date(value) -> Optional[date]:
    """Strict YYYY-MM-DD parse. Anything else → None."""
    if not isinstance(value, str) or not ISO_DATE.fullmatch(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


class SlotCatalog(ABC):

    @abstractmethod
    def days_configured(self) -> list[date]:
        """Ordered configured days."""

    @abstractmethod
    def slots_for(self, day: date) -> list[str]:
        """Ordered "HH:MM" slots of a day; empty for unknown days."""

    @abstractmethod
    def bounds(self) -> tuple[date, date]:
        """(min_date, max_date), both inclusive."""

    def is_configured_date(self, day: date) -> bool:
        return day in self.days_configured()


class PerDayHoursCatalog(SlotCatalog):

    def __init__(self, days: list[DayHours]):
        if not days:
            raise ValueError("PerDayHoursCatalog needs at least one day")
        self._days = {d.date: d for d in days}
        self._order = sorted(self._days)

    def days_configured(self) -> list[date]:
        return list(self._order)

    def slots_for(self, day: date) -> list[str]:
        entry = self._days.get(day)
        return entry.slots if entry else []

    def is_configured_date(self, day: date) -> bool:
        return day in self._days

    def bounds(self) -> tuple[date, date]:
        return self._order[0], self._order[-1]


class WindowCatalog(SlotCatalog):
    """
    Fixed slot list over a date window.

    With static bounds the window never moves. Without them it is
    [today, today + window_days], recomputed on each call.
    """

    def __init__(
        self,
        time_slots: list[str] | None = None,
        window_days: int = DEFAULT_WINDOW_DAYS,
        min_date: date | None = None,
        max_date: date | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.time_slots = sorted(time_slots or DEFAULT_TIME_SLOTS)
        self.window_days = window_days
        self.min_date = min_date
        self.max_date = max_date
        self._today = today

    def bounds(self) -> tuple[date, date]:
        if self.min_date and self.max_date:
            return self.min_date, self.max_date
        start = self.min_date or self._today()
        end = self.max_date or start + timedelta(days=self.window_days)
        if end < start:
            end = start
        return start, end

    def days_configured(self) -> list[date]:
        start, end = self.bounds()
        return [start + timedelta(days=i) for i in range((end - start).days + 1)]

    def slots_for(self, day: date) -> list[str]:
        if not self.is_configured_date(day):
            return []
        return list(self.time_slots)

    def is_configured_date(self, day: date) -> bool:
        start, end = self.bounds()
        return start <= day <= end


class LiveFileCatalog(SlotCatalog):
    """Per-day catalog that re-reads its file on every call, bypassing any cache."""

    def __init__(self, path: Path, fallback: SlotCatalog):
        self.path = path
        self.fallback = fallback

    def _current(self) -> SlotCatalog:
        days = load_days_file(self.path)
        if not days:
            return self.fallback
        return PerDayHoursCatalog(days)

    def days_configured(self) -> list[date]:
        return self._current().days_configured()

    def slots_for(self, day: date) -> list[str]:
        return self._current().slots_for(day)

    def is_configured_date(self, day: date) -> bool:
        return self._current().is_configured_date(day)

    def bounds(self) -> tuple[date, date]:
        return self._current().bounds()


def build_catalog(settings: Settings, today: Callable[[], date] = date.today) -> SlotCatalog:
    """
    Select the catalog policy from settings.

    A per-day file with no usable days falls back to the rolling window
    instead of failing startup.
    """
    window = WindowCatalog(
        time_slots=settings.time_slots,
        window_days=settings.booking_window_days,
        min_date=settings.min_date,
        max_date=settings.max_date,
        today=today,
    )

    if settings.catalog_file is None:
        return window

    if settings.catalog_live_reload:
        logger.info(f"Slot catalog: live per-day hours from {settings.catalog_file}")
        return LiveFileCatalog(settings.catalog_file, fallback=window)

    days = load_days_file(settings.catalog_file)
    if not days:
        logger.warning("No days configured in catalog file, using default booking window")
        return window

    logger.info(f"Slot catalog: {len(days)} configured days from {settings.catalog_file}")
    return PerDayHoursCatalog(days)
