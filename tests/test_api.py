"""End-to-end tests of the HTTP surface over a file store."""
import json
import logging

from fastapi.testclient import TestClient

from booking_form.config import Settings
from booking_form.main import create_app
from booking_form.services.store import FileStore

from conftest import TODAY, RecordingNotifier, make_record, submission


def test_available_slots_defaults_to_min_date(client):
    response = client.get("/available-slots")
    assert response.status_code == 200
    data = response.json()
    assert data["date"] == "2025-11-20"
    assert data["minDate"] == "2025-11-20"
    assert data["maxDate"] == "2025-12-20"
    assert data["allSlots"] == data["availableSlots"]
    assert data["bookedSlots"] == []
    assert len(data["configuredDates"]) == 31


def test_malformed_date_falls_back_to_min_date(client):
    assert client.get("/available-slots", params={"date": "soon"}).json()["date"] == "2025-11-20"


def test_dates_outside_catalog_rejected_by_both_endpoints(client):
    slots = client.get("/available-slots", params={"date": "2026-01-15"})
    book = client.post("/book", json=submission(date="2026-01-15"))
    assert slots.status_code == book.status_code == 400
    assert slots.json() == book.json() == {"error": "Invalid booking date"}


def test_book_into_empty_store(app, store, notifier):
    with TestClient(app) as client:
        response = client.post("/book", json=submission(email="  Jane.Doe@Example.com "))
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Booking confirmed"
    assert data["replacedExistingBooking"] is False

    records = store.load_all()
    assert len(records) == 1
    assert records[0].to_json() == data["booking"]
    assert records[0].email == "jane.doe@example.com"
    assert records[0].date == "2025-11-21"
    assert records[0].time_slot == "10:00"

    # dispatcher drained on shutdown
    assert [r.id for r, _ in notifier.calls] == [records[0].id]


def test_booked_slot_disappears_from_available(client):
    client.post("/book", json=submission())
    data = client.get("/available-slots", params={"date": "2025-11-21"}).json()
    assert data["bookedSlots"] == ["10:00"]
    assert "10:00" not in data["availableSlots"]
    assert len(data["availableSlots"]) == 8


def test_second_email_same_slot_conflicts(client, store):
    first = client.post("/book", json=submission(email="first@example.com"))
    second = client.post("/book", json=submission(email="second@example.com"))
    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json() == {"error": "This time slot has already been booked for the selected date"}
    assert [r.email for r in store.load_all()] == ["first@example.com"]


def test_alternate_date_spelling_cannot_double_book(client, store):
    assert client.post("/book", json=submission(email="a@example.com")).status_code == 200

    second = client.post("/book", json=submission(date="2025-W47-5", email="b@example.com"))
    assert second.status_code == 400
    assert second.json() == {"error": "Invalid booking date"}

    assert client.get("/available-slots", params={"date": "2025-W47-5"}).json()["date"] == "2025-11-20"
    assert [r.date for r in store.load_all()] == ["2025-11-21"]


def test_rebooking_same_email_moves_slot(client, store):
    client.post("/book", json=submission(email="other@example.com", timeSlot="09:00"))
    client.post("/book", json=submission(date="2025-11-21", timeSlot="10:00"))

    response = client.post("/book", json=submission(date="2025-11-22", timeSlot="15:00", email="JANE.DOE@example.com"))
    assert response.status_code == 200
    assert response.json()["message"] == "Booking updated"
    assert response.json()["replacedExistingBooking"] is True

    old_day = client.get("/available-slots", params={"date": "2025-11-21"}).json()
    new_day = client.get("/available-slots", params={"date": "2025-11-22"}).json()
    assert old_day["bookedSlots"] == ["09:00"]
    assert new_day["bookedSlots"] == ["15:00"]
    assert len(store.load_all()) == 2


def test_validation_errors_are_400(client):
    response = client.post("/book", json=submission(age="abc"))
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid age provided"}

    response = client.post("/book", json={"date": "2025-11-21"})
    assert response.json() == {"error": "All fields are required"}


def test_invalid_body(client):
    response = client.post("/book", content=b"not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}

    assert client.post("/book", json=["a", "list"]).status_code == 400


def test_cap_enforced(tmp_path):
    settings = Settings(_env_file=None, bookings_file=tmp_path / "b.json", max_total_bookings=30)
    store = FileStore(settings.bookings_file)
    store.save_all([
        make_record(id=str(i), day="2025-11-25", slot="09:00", email=f"user{i}@example.com")
        if i < 10 else
        make_record(id=str(i), day=f"2025-12-{i - 9:02d}", slot="09:00", email=f"user{i}@example.com")
        for i in range(30)
    ])
    app = create_app(settings, store=store, notifiers=[], today=lambda: TODAY)

    with TestClient(app) as client:
        rejected = client.post("/book", json=submission(email="new@example.com"))
        assert rejected.status_code == 400
        assert rejected.json() == {"error": "Maximum number of bookings reached"}

        accepted = client.post("/book", json=submission(email="user29@example.com"))
        assert accepted.status_code == 200
        assert accepted.json()["replacedExistingBooking"] is True

    assert len(store.load_all()) == 30


def test_storage_failure_is_500(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    settings = Settings(_env_file=None, bookings_file=blocker / "b.json")
    app = create_app(settings, notifiers=[], today=lambda: TODAY)

    with TestClient(app) as client:
        response = client.post("/book", json=submission())
    assert response.status_code == 500
    assert "error" in response.json()


def test_notification_failure_does_not_affect_response(tmp_path):
    settings = Settings(_env_file=None, bookings_file=tmp_path / "b.json")
    failing = RecordingNotifier(fail=True)
    app = create_app(settings, notifiers=[failing], today=lambda: TODAY)

    with TestClient(app) as client:
        response = client.post("/book", json=submission())
        assert response.status_code == 200

    service = app.state.booking_service
    assert len(failing.calls) == 1
    assert service.dispatcher.failures[0].error == "smtp down"


def test_calendar_export(client):
    assert client.get("/calendar.ics").status_code == 404

    client.post("/book", json=submission())
    response = client.get("/calendar.ics")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/calendar")
    assert "DTSTART;TZID=Europe/Warsaw:20251121T100000" in response.text


def test_calendar_export_fails_on_unrenderable_record(client, store):
    store.save_all([make_record(day=None, timestamp=None)])

    response = client.get("/calendar.ics")
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate calendar"}


def test_per_day_catalog_and_reload(tmp_path):
    days = tmp_path / "days.json"
    days.write_text(json.dumps([{"date": "2025-11-25", "startHour": 9, "endHour": 17}]))
    settings = Settings(
        _env_file=None,
        bookings_file=tmp_path / "b.json",
        catalog_file=days,
        admin_token="secret",
    )
    app = create_app(settings, notifiers=[], today=lambda: TODAY)

    with TestClient(app) as client:
        data = client.get("/available-slots").json()
        assert data["date"] == "2025-11-25"
        assert data["configuredDates"] == ["2025-11-25"]
        assert data["allSlots"][0] == "09:00" and len(data["allSlots"]) == 9

        assert client.post("/book", json=submission(date="2025-11-25", timeSlot="18:00")).json() == {
            "error": "Invalid time slot"
        }

        days.write_text(json.dumps([{"date": "2025-11-26", "startHour": 12, "endHour": 13}]))
        assert client.get("/available-slots").json()["date"] == "2025-11-25"

        assert client.post("/catalog/reload").status_code == 403
        reloaded = client.post("/catalog/reload", headers={"X-Admin-Token": "secret"})
        assert reloaded.status_code == 200
        assert reloaded.json()["minDate"] == "2025-11-26"

        assert client.get("/available-slots").json()["allSlots"] == ["12:00", "13:00"]


def test_admin_endpoints_hidden_without_token(tmp_path):
    settings = Settings(_env_file=None, bookings_file=tmp_path / "b.json")
    app = create_app(settings, notifiers=[], today=lambda: TODAY)
    with TestClient(app) as client:
        assert client.post("/catalog/reload", headers={"X-Admin-Token": "x"}).status_code == 404
        assert client.get("/health").json() == {"status": "ok", "storage": "file"}


def test_notification_failures_endpoint(client):
    response = client.get("/notifications/failures", headers={"X-Admin-Token": "secret"})
    assert response.status_code == 200
    assert response.json() == []


def test_audit_line_carries_booking_outcome(client, caplog):
    caplog.set_level(logging.INFO, logger="booking_form.audit")

    booked = client.post("/book", json=submission(email="a@example.com")).json()["booking"]
    client.post("/book", json=submission(email="a@example.com", timeSlot="11:00"))
    client.post("/book", json=submission(email="b@example.com", timeSlot="11:00"))
    client.get("/available-slots", params={"date": "2025-11-21"})

    lines = [json.loads(r.getMessage()) for r in caplog.records if r.name == "booking_form.audit"]
    first, moved, clash, slots = lines
    assert first["path"] == "/book" and first["status"] == 200
    assert first["booking_id"] == booked["id"]
    assert moved["replaced_booking_id"] == booked["id"]
    assert clash["status"] == 400
    assert clash["booking_error"] == "This time slot has already been booked for the selected date"
    assert "booking_id" not in clash
    assert slots["date"] == "2025-11-21"
