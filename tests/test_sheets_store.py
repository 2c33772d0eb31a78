import json

import httpx
import pytest

from booking_form.errors import StorageError
from booking_form.services.store import SpreadsheetStore
from booking_form.services.store.sheets_store import normalize_time_slot

from conftest import make_record

URL = "https://script.example.com/macros/s/abc/exec"


def make_store(handler):
    return SpreadsheetStore(URL, client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_normalize_time_slot():
    assert normalize_time_slot("9:00") == "09:00"
    assert normalize_time_slot("14:30") == "14:30"
    assert normalize_time_slot(None) == ""


def test_load_all_reads_rows():
    def handler(request):
        assert request.method == "GET"
        return httpx.Response(200, json={"success": True, "bookings": [
            {"id": 1732000000000, "date": "2025-11-25", "timeSlot": "9:00", "name": "A",
             "email": "a@example.com", "gender": "male", "age": "30", "education": "higher",
             "timestamp": "2025-11-20T10:00:00.000Z"},
        ]})

    records = make_store(handler).load_all()
    assert len(records) == 1
    assert records[0].id == "1732000000000"
    assert records[0].time_slot == "09:00"
    assert records[0].age == 30


def test_load_failure_returns_empty():
    store = make_store(lambda request: httpx.Response(500, text="boom"))
    assert store.load_all() == []


def test_script_error_returns_empty():
    store = make_store(lambda request: httpx.Response(200, json={"success": False, "error": "Sheet not found"}))
    assert store.load_all() == []


def test_commit_posts_record():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"success": True, "isUpdate": False, "bookingId": "7"})

    record = make_record(id="7")
    make_store(handler).commit([], record)
    assert seen == [record.to_json()]


def test_commit_rejected_by_script_raises():
    store = make_store(lambda request: httpx.Response(200, json={"success": False, "error": "Email is required"}))
    with pytest.raises(StorageError, match="Email is required"):
        store.commit([], make_record())


def test_commit_network_error_raises():
    def handler(request):
        raise httpx.ConnectError("unreachable")

    with pytest.raises(StorageError):
        make_store(handler).commit([], make_record())
