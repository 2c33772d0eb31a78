# booking_form/services/ics.py
"""
ICS (iCalendar) export of active bookings.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from ..schemas.bookings import BookingRecord

EVENT_DURATION = timedelta(hours=1)
PRODID = "-//booking-form//Bookings//EN"


def escape_text(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def fold_line(line: str) -> str:
    """Split content lines longer than 75 octets (RFC 5545 §3.1)."""
    encoded = line.encode("utf-8")
    if len(encoded) <= 75:
        return line

    parts = []
    current = b""
    limit = 75
    for ch in line:
        chunk = ch.encode("utf-8")
        if len(current) + len(chunk) > limit:
            parts.append(current.decode("utf-8"))
            current = b""
            limit = 74  # continuation lines start with a space
        current += chunk
    parts.append(current.decode("utf-8"))
    return "\r\n ".join(parts)


def _local_stamp(dt: datetime) -> str:
    return dt.strftime("%Y%m%dT%H%M%S")


def render_calendar(
    records: list[BookingRecord],
    tz_name: str,
    site_name: str = "",
    location: str = "",
    now: Optional[datetime] = None,
) -> str:
    """
    Render bookings as a VCALENDAR string.

    Raises:
        ValueError: a record has an unparseable date or time slot
    """
    now = now or datetime.now(timezone.utc)
    dtstamp = now.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        f"X-WR-TIMEZONE:{tz_name}",
    ]

    for record in sorted(records, key=lambda r: (r.date or "", r.time_slot)):
        start = datetime.fromisoformat(f"{record.date}T{record.time_slot}")
        end = start + EVENT_DURATION
        summary = f"{site_name} - {record.name}" if site_name else record.name
        description = f"Email: {record.email}\nAge: {record.age}\nID: {record.id}"

        lines.extend([
            "BEGIN:VEVENT",
            f"UID:booking-{record.id}@booking-form",
            f"DTSTAMP:{dtstamp}",
            f"DTSTART;TZID={tz_name}:{_local_stamp(start)}",
            f"DTEND;TZID={tz_name}:{_local_stamp(end)}",
            f"SUMMARY:{escape_text(summary)}",
            f"DESCRIPTION:{escape_text(description)}",
        ])
        if location:
            lines.append(f"LOCATION:{escape_text(location)}")
        lines.append("END:VEVENT")

    lines.append("END:VCALENDAR")
    return "\r\n".join(fold_line(line) for line in lines) + "\r\n"
