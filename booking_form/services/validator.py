# booking_form/services/validator.py
"""
Booking validator and conflict resolver.

evaluate() never touches the store and never raises for bad input:
it returns Accept (new record + the record it replaces, if any) or
Reject (a ValidationError / ConflictError instance to render as 400).
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from ..config import Settings
from ..errors import ConflictError, ValidationError
from ..schemas.bookings import BookingRecord
from .slots import SlotCatalog, parse_date
from .store import normalize_email

EDUCATION_LEVELS = ("higher", "studies", "other")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
AGE_PATTERN = re.compile(r"^[+-]?\d+$")

MSG_REQUIRED = "All fields are required"
MSG_DATE = "Invalid booking date"
MSG_TIME_SLOT = "Invalid time slot"
MSG_EMAIL = "Invalid email address"
MSG_AGE = "Invalid age provided"
MSG_EDUCATION = "Invalid education level"
MSG_NATIVE = "Native Polish speaker confirmation is required"
MSG_SLOT_TAKEN = "This time slot has already been booked for the selected date"
MSG_CAP = "Maximum number of bookings reached"


@dataclass(frozen=True)
class BookingRules:
    """
    Per-deployment booking constraints.

    Attributes:
        min_age: Lowest accepted age (inclusive)
        max_age: Highest accepted age (inclusive)
        require_education: Education level must be given and known
        require_native_speaker: Native-language attestation must be true
        max_total_bookings: Cap on active bookings, None = unlimited
    """
    min_age: int = 18
    max_age: int = 120
    require_education: bool = False
    require_native_speaker: bool = False
    max_total_bookings: Optional[int] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "BookingRules":
        return cls(
            min_age=settings.min_age,
            max_age=settings.max_age,
            require_education=settings.require_education,
            require_native_speaker=settings.require_native_speaker,
            max_total_bookings=settings.max_total_bookings,
        )


@dataclass(frozen=True)
class Accept:
    record: BookingRecord
    replaced: Optional[BookingRecord] = None


@dataclass(frozen=True)
class Reject:
    error: Union[ValidationError, ConflictError]

    @property
    def reason(self) -> str:
        return self.error.message


Decision = Union[Accept, Reject]


# ──────────────────────────────────────────────────────────────────────────────
# Field helpers
# ──────────────────────────────────────────────────────────────────────────────

def _present(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def parse_age(value) -> Optional[int]:
    """Integer age from int, integral float or digit string; None otherwise."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str) and AGE_PATTERN.match(value.strip()):
        return int(value.strip())
    return None


def parse_flag(value) -> bool:
    """Form checkboxes arrive as bools, "true"/"on"/"yes"/"1" strings or numbers."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "on", "yes", "1")
    return bool(value)


def new_booking_id(existing: list[BookingRecord], now: datetime) -> str:
    """Millisecond timestamp, bumped until unique among existing ids."""
    taken = {r.id for r in existing}
    candidate = int(now.timestamp() * 1000)
    while str(candidate) in taken:
        candidate += 1
    return str(candidate)


def format_timestamp(now: datetime) -> str:
    now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


# ──────────────────────────────────────────────────────────────────────────────
# Evaluation
# ──────────────────────────────────────────────────────────────────────────────

def _validate(submission: dict, catalog: SlotCatalog, rules: BookingRules) -> Optional[ValidationError]:
    required = ["date", "timeSlot", "name", "email", "gender", "age"]
    if rules.require_education:
        required.append("education")
    if rules.require_native_speaker:
        required.append("nativePolishSpeaker")

    if not all(_present(submission.get(field)) for field in required):
        return ValidationError(MSG_REQUIRED)

    day = parse_date(submission["date"])
    if day is None or not catalog.is_configured_date(day):
        return ValidationError(MSG_DATE)

    if submission["timeSlot"] not in catalog.slots_for(day):
        return ValidationError(MSG_TIME_SLOT)

    email = submission["email"]
    if not isinstance(email, str) or not EMAIL_PATTERN.match(email.strip()):
        return ValidationError(MSG_EMAIL)

    age = parse_age(submission["age"])
    if age is None or not rules.min_age <= age <= rules.max_age:
        return ValidationError(MSG_AGE)

    if rules.require_education and submission["education"] not in EDUCATION_LEVELS:
        return ValidationError(MSG_EDUCATION)

    if rules.require_native_speaker and not parse_flag(submission["nativePolishSpeaker"]):
        return ValidationError(MSG_NATIVE)

    return None


def evaluate(
    submission: dict,
    existing: list[BookingRecord],
    catalog: SlotCatalog,
    rules: BookingRules,
    now: datetime | None = None,
) -> Decision:
    """
    Decide what to do with a booking submission.

    Validation runs first (first failure wins). Then the existing record
    with the same normalized email, if any, is set aside as replaced and
    the remaining records are checked for a slot clash and the cap.
    """
    error = _validate(submission, catalog, rules)
    if error is not None:
        return Reject(error)

    day = parse_date(submission["date"]).isoformat()
    email = normalize_email(submission["email"])
    replaced: Optional[BookingRecord] = None
    others: list[BookingRecord] = []
    for record in existing:
        if normalize_email(record.email) == email:
            if replaced is None:
                replaced = record
            continue
        others.append(record)

    if any(r.date == day and r.time_slot == submission["timeSlot"] for r in others):
        return Reject(ConflictError(MSG_SLOT_TAKEN))

    if rules.max_total_bookings is not None and len(others) + 1 > rules.max_total_bookings:
        return Reject(ConflictError(MSG_CAP))

    education = submission.get("education")
    if not isinstance(education, str) or not education.strip():
        education = None

    now = now or datetime.now(timezone.utc)
    record = BookingRecord(
        id=new_booking_id(existing, now),
        date=day,
        time_slot=submission["timeSlot"],
        name=str(submission["name"]).strip(),
        email=email,
        gender=str(submission["gender"]),
        age=parse_age(submission["age"]),
        education=education,
        native_polish_speaker=(
            parse_flag(submission["nativePolishSpeaker"])
            if submission.get("nativePolishSpeaker") is not None
            else None
        ),
        timestamp=format_timestamp(now),
    )
    return Accept(record=record, replaced=replaced)
