from datetime import date
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from booking_form.config import Settings
from booking_form.main import create_app
from booking_form.schemas.bookings import BookingRecord
from booking_form.services.notifications import Notifier
from booking_form.services.store import FileStore

TODAY = date(2025, 11, 20)


class RecordingNotifier(Notifier):
    name = "recording"

    def __init__(self, fail: bool = False):
        self.calls: list[tuple[BookingRecord, Optional[BookingRecord]]] = []
        self.fail = fail

    def notify(self, record, replaced=None):
        self.calls.append((record, replaced))
        if self.fail:
            raise RuntimeError("smtp down")


def make_record(
    id="1",
    day="2025-11-21",
    slot="10:00",
    email="someone@example.com",
    **extra,
) -> BookingRecord:
    return BookingRecord(
        id=id,
        date=day,
        time_slot=slot,
        name=extra.pop("name", "Some One"),
        email=email,
        gender=extra.pop("gender", "female"),
        age=extra.pop("age", 30),
        timestamp=extra.pop("timestamp", "2025-11-20T08:00:00.000Z"),
        **extra,
    )


def submission(**overrides) -> dict:
    body = {
        "date": "2025-11-21",
        "timeSlot": "10:00",
        "name": "Jane Doe",
        "email": "jane.doe@example.com",
        "gender": "female",
        "age": 28,
    }
    body.update(overrides)
    return body


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        bookings_file=tmp_path / "bookings" / "all-bookings.json",
        admin_token="secret",
        site_name="Test Lab",
    )


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def store(settings):
    return FileStore(settings.bookings_file)


@pytest.fixture
def app(settings, store, notifier):
    return create_app(settings, store=store, notifiers=[notifier], today=lambda: TODAY)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
