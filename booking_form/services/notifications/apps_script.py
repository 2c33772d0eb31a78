# booking_form/services/notifications/apps_script.py
"""
Hands the booking to an Apps Script web app, which writes the sheet row,
creates the calendar event and sends the emails on its side.
"""

import logging
from typing import Optional

import httpx

from ...errors import NotificationError
from ...schemas.bookings import BookingRecord
from .base import Notifier

logger = logging.getLogger(__name__)


class AppsScriptNotifier(Notifier):

    name = "apps_script"

    def __init__(self, url: str, client: httpx.Client | None = None, timeout: float = 15.0):
        self.url = url
        self.client = client or httpx.Client(follow_redirects=True, timeout=timeout)

    def notify(self, record: BookingRecord, replaced: Optional[BookingRecord] = None) -> None:
        try:
            response = self.client.post(self.url, json=record.to_json())
            response.raise_for_status()
            result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise NotificationError(f"Apps Script call failed: {e}") from e

        if not isinstance(result, dict) or not result.get("success"):
            error = result.get("error") if isinstance(result, dict) else None
            raise NotificationError(f"Apps Script returned an error: {error or 'unknown'}")

        logger.info(
            f"Apps Script processed booking {record.id} "
            f"(update={bool(result.get('isUpdate'))}, event={result.get('calendarEventId')})"
        )

    def close(self) -> None:
        self.client.close()
