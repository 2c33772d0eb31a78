# booking_form/services/notifications/resend.py
"""
Email notifications through the Resend HTTP API.

Sends a confirmation to the booker and a notification to staff addresses.
"""

import logging
from typing import Optional

import httpx

from ...errors import NotificationError
from ...schemas.bookings import BookingRecord
from .base import Notifier
from .messages import EmailMessage, booker_confirmation, staff_notification

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class ResendNotifier(Notifier):

    name = "resend"

    def __init__(
        self,
        api_key: str,
        sender: str,
        notify_emails: list[str],
        site_name: str,
        location: str = "",
        client: httpx.Client | None = None,
    ):
        self.api_key = api_key
        self.sender = sender
        self.notify_emails = notify_emails
        self.site_name = site_name
        self.location = location
        self.client = client or httpx.Client(timeout=10.0)

    def _send(self, message: EmailMessage) -> str | None:
        payload = {
            "from": self.sender,
            "to": message.to,
            "subject": message.subject,
            "text": message.text,
            "html": message.html,
        }
        if message.reply_to:
            payload["reply_to"] = message.reply_to

        try:
            response = self.client.post(
                RESEND_API_URL,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise NotificationError(f"Resend delivery to {message.to} failed: {e}") from e

        email_id = response.json().get("id")
        logger.info(f"Email sent to {message.to}: {email_id}")
        return email_id

    def notify(self, record: BookingRecord, replaced: Optional[BookingRecord] = None) -> None:
        errors = []

        if self.notify_emails:
            try:
                self._send(staff_notification(record, replaced, self.notify_emails))
            except NotificationError as e:
                errors.append(e)

        try:
            self._send(booker_confirmation(
                record,
                replaced,
                site_name=self.site_name,
                location=self.location,
                reply_to=self.notify_emails[0] if self.notify_emails else None,
            ))
        except NotificationError as e:
            errors.append(e)

        if errors:
            raise NotificationError("; ".join(e.message for e in errors))

    def close(self) -> None:
        self.client.close()
