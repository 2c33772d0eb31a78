"""
booking_form/services/notifications/google_calendar.py

Google Calendar integration.

Handles:
- Access through a stored OAuth refresh token
- One-hour event per booking
- Removal of the replaced booking's event

Event ids are derived from booking ids, so the replaced booking's event can
be deleted without keeping the Google id anywhere.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ...errors import NotificationError
from ...schemas.bookings import BookingRecord
from .base import Notifier
from .messages import EDUCATION_LABELS, GENDER_LABELS

logger = logging.getLogger(__name__)

TOKEN_URI = "https://oauth2.googleapis.com/token"
SCOPES = ["https://www.googleapis.com/auth/calendar.events"]
EVENT_DURATION = timedelta(hours=1)


def event_id_for(booking_id: str) -> str:
    """
    Calendar event id for a booking.

    Google accepts 5-1024 chars from base32hex (a-v, 0-9); booking ids
    are digit strings, other characters are dropped.
    """
    digits = "".join(ch for ch in booking_id.lower() if ch.isdigit() or "a" <= ch <= "v")
    return f"bk{digits:0>5}"


def build_event(record: BookingRecord, timezone: str, location: str = "", site_name: str = "") -> dict:
    start = datetime.fromisoformat(f"{record.date}T{record.time_slot}")
    end = start + EVENT_DURATION

    description_parts = [
        f"Name: {record.name}",
        f"Email: {record.email}",
        f"Gender: {GENDER_LABELS.get(record.gender, record.gender)}",
        f"Age: {record.age}",
    ]
    if record.education:
        description_parts.append(
            f"Education: {EDUCATION_LABELS.get(record.education, record.education)}"
        )
    description_parts.extend(["", f"ID: {record.id}"])

    event = {
        "id": event_id_for(record.id),
        "summary": f"{site_name} - {record.name}" if site_name else record.name,
        "description": "\n".join(description_parts),
        "start": {
            "dateTime": start.isoformat(),
            "timeZone": timezone,
        },
        "end": {
            "dateTime": end.isoformat(),
            "timeZone": timezone,
        },
        "reminders": {
            "useDefault": False,
            "overrides": [
                {"method": "popup", "minutes": 30},
            ],
        },
    }
    if location:
        event["location"] = location
    return event


def _get_calendar_service(client_id: str, client_secret: str, refresh_token: str):
    """Build Google Calendar API service client."""
    credentials = Credentials(
        token=None,
        refresh_token=refresh_token,
        token_uri=TOKEN_URI,
        client_id=client_id,
        client_secret=client_secret,
        scopes=SCOPES,
    )
    return build("calendar", "v3", credentials=credentials, cache_discovery=False)


class GoogleCalendarNotifier(Notifier):

    name = "google_calendar"

    def __init__(
        self,
        calendar_id: str,
        timezone: str,
        client_id: str = "",
        client_secret: str = "",
        refresh_token: str = "",
        location: str = "",
        site_name: str = "",
        service=None,
    ):
        self.calendar_id = calendar_id
        self.timezone = timezone
        self.location = location
        self.site_name = site_name
        self._credentials = (client_id, client_secret, refresh_token)
        self._service = service

    @property
    def service(self):
        if self._service is None:
            self._service = _get_calendar_service(*self._credentials)
        return self._service

    def delete_event(self, booking_id: str) -> None:
        event_id = event_id_for(booking_id)
        try:
            self.service.events().delete(
                calendarId=self.calendar_id,
                eventId=event_id,
            ).execute()
            logger.info(f"Deleted Google Calendar event: {event_id}")
        except HttpError as e:
            if e.resp.status in (404, 410):
                # Event may already be deleted
                logger.info(f"Google Calendar event already gone: {event_id}")
                return
            raise

    def notify(self, record: BookingRecord, replaced: Optional[BookingRecord] = None) -> None:
        try:
            if replaced is not None:
                self.delete_event(replaced.id)

            created_event = self.service.events().insert(
                calendarId=self.calendar_id,
                body=build_event(record, self.timezone, self.location, self.site_name),
            ).execute()
        except HttpError as e:
            raise NotificationError(f"Google Calendar call failed: {e}") from e

        logger.info(f"Created Google Calendar event: {created_event.get('id')}")
