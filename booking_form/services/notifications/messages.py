# booking_form/services/notifications/messages.py
"""
Email texts for booking notifications.
"""

from dataclasses import dataclass
from datetime import date
from html import escape
from typing import Optional

from ...schemas.bookings import BookingRecord

EDUCATION_LABELS = {
    "higher": "Higher education",
    "studies": "Currently studying",
    "other": "Other",
}

GENDER_LABELS = {
    "male": "Male",
    "female": "Female",
    "non-binary": "Non-binary",
    "prefer-not-to-say": "Prefer not to say",
}


@dataclass(frozen=True)
class EmailMessage:
    to: list[str]
    subject: str
    text: str
    html: str
    reply_to: Optional[str] = None


def format_day(value: Optional[str]) -> str:
    """"2025-11-25" → "Tuesday, 25 November 2025"."""
    try:
        return date.fromisoformat(value or "").strftime("%A, %d %B %Y")
    except ValueError:
        return value or ""


def status_line(record: BookingRecord, replaced: Optional[BookingRecord]) -> str:
    if replaced is None:
        return "A new booking has been made."
    if (replaced.date, replaced.time_slot) != (record.date, record.time_slot):
        return (
            f"The booking was moved from {format_day(replaced.date)} "
            f"{replaced.time_slot} to a new slot."
        )
    return "The booking details were updated."


def _detail_rows(record: BookingRecord) -> list[tuple[str, str]]:
    rows = [
        ("Date", format_day(record.date)),
        ("Time", record.time_slot),
        ("Name", record.name),
        ("Email", record.email),
        ("Gender", GENDER_LABELS.get(record.gender, record.gender)),
        ("Age", str(record.age)),
    ]
    if record.education:
        rows.append(("Education", EDUCATION_LABELS.get(record.education, record.education)))
    return rows


def staff_notification(
    record: BookingRecord,
    replaced: Optional[BookingRecord],
    recipients: list[str],
) -> EmailMessage:
    heading = "Booking updated" if replaced else "New booking"
    subject = f"{heading}: {format_day(record.date)} {record.time_slot}"
    line = status_line(record, replaced)
    rows = _detail_rows(record)

    text = "\n".join(
        [line, ""]
        + [f"{label}: {value}" for label, value in rows]
        + ["", f"Booking ID: {record.id}"]
    )
    html = "\n".join(
        [
            '<div style="font-family: Arial, sans-serif; line-height: 1.6;">',
            f"<h2>{heading}</h2>",
            f"<p>{escape(line)}</p>",
            '<table cellpadding="8" style="border-collapse: collapse;">',
        ]
        + [
            f"<tr><td><strong>{label}:</strong></td><td>{escape(value)}</td></tr>"
            for label, value in rows
        ]
        + [
            "</table>",
            f'<p style="color: #666;">ID: {escape(record.id)}</p>',
            "</div>",
        ]
    )
    return EmailMessage(to=list(recipients), subject=subject, text=text, html=html)


def booker_confirmation(
    record: BookingRecord,
    replaced: Optional[BookingRecord],
    site_name: str,
    location: str = "",
    reply_to: Optional[str] = None,
) -> EmailMessage:
    subject = (
        f"Booking change confirmed - {site_name}"
        if replaced
        else f"Booking confirmed - {site_name}"
    )
    first_name = record.name.split(" ")[0] if record.name else ""
    greeting = f"Hi {first_name}!" if first_name else "Hi!"
    intro = "Your booking has been updated." if replaced else f"Thank you for booking with {site_name}!"

    details = [
        f"Date: {format_day(record.date)}",
        f"Time: {record.time_slot}",
    ]
    if location:
        details.append(f"Place: {location}")

    text = "\n".join(
        [greeting, "", intro, "", "Appointment details:"]
        + details
        + [
            "",
            "To change the slot, book again on the registration page with the same email address.",
            "",
            "See you soon!",
            site_name,
            "",
            "---",
            f"Booking ID: {record.id}",
        ]
    )
    html = "\n".join(
        [
            '<div style="font-family: Arial, sans-serif; line-height: 1.6; max-width: 600px; margin: 0 auto;">',
            f"<h2>{escape(greeting)}</h2>",
            f"<p>{escape(intro)}</p>",
        ]
        + [f"<p>{escape(item)}</p>" for item in details]
        + [
            "<p>To change the slot, book again on the registration page with the same email address.</p>",
            f"<p>See you soon!<br><strong>{escape(site_name)}</strong></p>",
            f'<p style="color: #999; font-size: 12px;">Booking ID: {escape(record.id)}</p>',
            "</div>",
        ]
    )
    return EmailMessage(to=[record.email], subject=subject, text=text, html=html, reply_to=reply_to)
