import json

import pytest

from booking_form.services.store import FileStore

from conftest import make_record


def test_first_access_creates_directory_and_empty_file(tmp_path):
    path = tmp_path / "nested" / "bookings" / "all-bookings.json"
    store = FileStore(path)
    assert store.load_all() == []
    assert path.read_text() == "[]"


def test_empty_file_reads_as_empty(tmp_path):
    path = tmp_path / "b.json"
    path.write_text("   \n")
    assert FileStore(path).load_all() == []


def test_corrupted_file_resets_to_empty(tmp_path):
    path = tmp_path / "b.json"
    path.write_text("[{broken")
    assert FileStore(path).load_all() == []


def test_non_array_resets_to_empty(tmp_path):
    path = tmp_path / "b.json"
    path.write_text('{"id": "1"}')
    assert FileStore(path).load_all() == []


def test_save_all_pretty_prints_with_trailing_newline(tmp_path):
    path = tmp_path / "b.json"
    store = FileStore(path)
    record = make_record(id="1")
    store.save_all([record])

    text = path.read_text()
    assert text.endswith("]\n")
    assert text == json.dumps([record.to_json()], indent=2) + "\n"
    assert json.loads(text)[0]["timeSlot"] == "10:00"


def test_legacy_timestamp_backfills_date_and_persists(tmp_path):
    path = tmp_path / "b.json"
    legacy = {
        "id": "1700000000000",
        "timeSlot": "09:00",
        "name": "Old Timer",
        "email": "old@example.com",
        "gender": "male",
        "age": 40,
        "timestamp": "2025-11-21T08:30:00.000Z",
    }
    path.write_text(json.dumps([legacy]))

    records = FileStore(path).load_all()
    assert records[0].date == "2025-11-21"
    assert json.loads(path.read_text())[0]["date"] == "2025-11-21"


def test_unreadable_record_is_skipped(tmp_path):
    path = tmp_path / "b.json"
    good = make_record(id="1").to_json()
    path.write_text(json.dumps([good, {"id": "2", "age": "old"}]))
    records = FileStore(path).load_all()
    assert [r.id for r in records] == ["1"]


def test_unreadable_entries_survive_backfill_and_commit(tmp_path):
    path = tmp_path / "b.json"
    legacy = make_record(id="1", day=None, email="old@example.com").to_json()
    broken = {"id": "2", "age": "old"}
    path.write_text(json.dumps([legacy, broken, "stray"]))
    store = FileStore(path)

    assert [r.date for r in store.load_all()] == ["2025-11-20"]
    on_disk = json.loads(path.read_text())
    assert on_disk[0]["date"] == "2025-11-20"
    assert on_disk[1:] == [broken, "stray"]

    store.commit(store.load_all(), make_record(id="3", email="new@example.com"))
    assert json.loads(path.read_text())[1:] == [broken, "stray", make_record(id="3", email="new@example.com").to_json()]
    assert [r.id for r in store.load_all()] == ["1", "3"]


def test_commit_replaces_every_record_with_same_email(tmp_path):
    store = FileStore(tmp_path / "b.json")
    keep = make_record(id="1", email="other@example.com", slot="09:00")
    old_a = make_record(id="2", email="me@example.com", slot="10:00")
    old_b = make_record(id="3", email="ME@example.com", slot="11:00")
    store.save_all([keep, old_a, old_b])

    new = make_record(id="4", email="me@example.com", slot="12:00")
    store.commit(store.load_all(), new, replaced=old_a)

    assert [r.id for r in store.load_all()] == ["1", "4"]


def test_build_store_selects_backend(tmp_path):
    from booking_form.config import Settings
    from booking_form.services.store import SpreadsheetStore, build_store

    store = build_store(Settings(_env_file=None, bookings_file=tmp_path / "b.json"))
    assert isinstance(store, FileStore)

    sheets = build_store(Settings(
        _env_file=None,
        storage_backend="sheets",
        apps_script_url="https://script.example.com/exec",
    ))
    assert isinstance(sheets, SpreadsheetStore)
    sheets.close()

    with pytest.raises(RuntimeError):
        build_store(Settings(_env_file=None, storage_backend="kv"))
