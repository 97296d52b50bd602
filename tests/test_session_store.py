import json

from salonflow.infrastructure.session_store.json_store import JsonFileSessionStore
from salonflow.infrastructure.session_store.memory_store import InMemorySessionStore

SESSION = {"access_token": "a", "refresh_token": "r", "expires_at": 123, "user": {"id": "u1", "phone": "94771234567"}}


def test_memory_store_round_trip_and_isolation():
    store = InMemorySessionStore()
    store.save("salonflow_session", SESSION)
    loaded = store.load("salonflow_session")
    assert loaded == SESSION
    loaded["user"]["id"] = "changed"
    assert store.load("salonflow_session")["user"]["id"] == "u1"
    store.delete("salonflow_session")
    assert store.load("salonflow_session") is None


def test_json_store_survives_new_instance(tmp_path):
    path = tmp_path / "state" / "session.json"
    JsonFileSessionStore(path).save("salonflow_session", SESSION)

    assert JsonFileSessionStore(path).load("salonflow_session") == SESSION


def test_json_store_delete_keeps_other_keys(tmp_path):
    path = tmp_path / "session.json"
    store = JsonFileSessionStore(path)
    store.save("salonflow_session", SESSION)
    store.save("other", {"x": 1})
    store.delete("salonflow_session")

    assert store.load("salonflow_session") is None
    assert json.loads(path.read_text()) == {"other": {"x": 1}}


def test_json_store_treats_corrupt_file_as_empty(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json")
    store = JsonFileSessionStore(path)
    assert store.load("salonflow_session") is None
    store.save("salonflow_session", SESSION)
    assert store.load("salonflow_session") == SESSION
