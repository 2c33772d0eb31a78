# booking_form/services/notifications/__init__.py
"""
Booking notifications: Resend email, Apps Script webhook, Google Calendar.
All run off the request path through NotificationDispatcher.
"""

import logging

from ...config import Settings
from .base import Notifier
from .apps_script import AppsScriptNotifier
from .dispatcher import NotificationDispatcher, NotificationFailure, NotificationJob
from .google_calendar import GoogleCalendarNotifier
from .resend import ResendNotifier

logger = logging.getLogger(__name__)


def build_notifiers(settings: Settings) -> list[Notifier]:
    notifiers: list[Notifier] = []

    for name in settings.notifiers:
        if name == "resend":
            if not settings.resend_api_key:
                raise RuntimeError("RESEND_API_KEY not set for resend notifier")
            notifiers.append(ResendNotifier(
                api_key=settings.resend_api_key,
                sender=settings.resend_from,
                notify_emails=settings.notify_emails,
                site_name=settings.site_name,
                location=settings.event_location,
            ))
        elif name == "apps_script":
            if not settings.apps_script_url:
                raise RuntimeError("APPS_SCRIPT_URL not set for apps_script notifier")
            notifiers.append(AppsScriptNotifier(
                settings.apps_script_url,
                timeout=settings.apps_script_timeout,
            ))
        elif name == "google_calendar":
            if not settings.google_refresh_token:
                raise RuntimeError("GOOGLE_REFRESH_TOKEN not set for google_calendar notifier")
            notifiers.append(GoogleCalendarNotifier(
                calendar_id=settings.google_calendar_id,
                timezone=settings.timezone,
                client_id=settings.google_client_id,
                client_secret=settings.google_client_secret,
                refresh_token=settings.google_refresh_token,
                location=settings.event_location,
                site_name=settings.site_name,
            ))

    if notifiers:
        logger.info(f"Notifiers enabled: {', '.join(n.name for n in notifiers)}")
    return notifiers


__all__ = [
    "Notifier",
    "AppsScriptNotifier",
    "GoogleCalendarNotifier",
    "ResendNotifier",
    "NotificationDispatcher",
    "NotificationFailure",
    "NotificationJob",
    "build_notifiers",
]
