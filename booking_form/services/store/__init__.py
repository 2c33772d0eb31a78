# booking_form/services/store/__init__.py
"""
Booking storage backends.

Selected once at startup from STORAGE_BACKEND:
- file: local JSON file (development default)
- kv: Redis-compatible key-value service
- sheets: Google Sheets via Apps Script web app
"""

import logging

from ...config import Settings
from .base import BookingStore, normalize_email
from .file_store import FileStore
from .kv_store import KeyValueStore, create_redis_client
from .sheets_store import SpreadsheetStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> BookingStore:
    backend = settings.storage_backend

    if backend == "kv":
        if not settings.kv_url:
            raise RuntimeError("KV_URL not set for STORAGE_BACKEND=kv")
        logger.info("Using key-value store for bookings")
        return KeyValueStore(create_redis_client(settings.kv_url, settings.kv_socket_timeout))

    if backend == "sheets":
        if not settings.apps_script_url:
            raise RuntimeError("APPS_SCRIPT_URL not set for STORAGE_BACKEND=sheets")
        logger.info("Using spreadsheet store for bookings")
        return SpreadsheetStore(settings.apps_script_url, timeout=settings.apps_script_timeout)

    logger.info(f"Using file store for bookings: {settings.bookings_file}")
    return FileStore(settings.bookings_file)


__all__ = [
    "BookingStore",
    "FileStore",
    "KeyValueStore",
    "SpreadsheetStore",
    "build_store",
    "create_redis_client",
    "normalize_email",
]
