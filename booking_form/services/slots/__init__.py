# booking_form/services/slots/__init__.py
"""
Slot catalog module.

Per-day hours (from a JSON file) or a fixed slot list over a date window.
"""

from .config import DayHours, load_days_file, parse_days
from .catalog import (
    SlotCatalog,
    PerDayHoursCatalog,
    WindowCatalog,
    LiveFileCatalog,
    build_catalog,
    parse_date,
)

__all__ = [
    "DayHours",
    "load_days_file",
    "parse_days",
    "SlotCatalog",
    "PerDayHoursCatalog",
    "WindowCatalog",
    "LiveFileCatalog",
    "build_catalog",
    "parse_date",
]
