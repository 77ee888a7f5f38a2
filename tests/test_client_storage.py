"""
Tests for client-side storage and notifications.
"""

import pytest

from client.notifications import Notifications
from client.storage import JsonFileStorage, MemoryStorage


@pytest.fixture(params=["memory", "file"])
def storage(request, tmp_path):
    if request.param == "memory":
        return MemoryStorage()
    return JsonFileStorage(tmp_path / "session.json")


class TestStorage:
    def test_set_get_remove(self, storage):
        assert storage.is_empty()
        storage.set("auth_token", "abc")
        assert storage.get("auth_token") == "abc"
        storage.remove("auth_token")
        assert storage.get("auth_token") is None
        assert storage.is_empty()

    def test_remove_missing_key(self, storage):
        storage.remove("nothing")
        assert storage.is_empty()


class TestJsonFileStorage:
    def test_survives_new_instance(self, tmp_path):
        path = tmp_path / "nested" / "session.json"
        JsonFileStorage(path).set("current_user", '{"id": 1}')
        assert JsonFileStorage(path).get("current_user") == '{"id": 1}'

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("{not json", encoding="utf-8")

        storage = JsonFileStorage(path)
        assert storage.is_empty()
        storage.set("auth_token", "t")
        assert storage.get("auth_token") == "t"


class FakeTimer:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


class TestNotifications:
    def test_auto_dismiss_after_ttl(self):
        timer = FakeTimer()
        notes = Notifications(ttl=5.0, clock=timer)

        notes.error("Login failed. Check credentials.")
        timer.now += 4.9
        assert [n.message for n in notes.active()] == ["Login failed. Check credentials."]

        timer.now += 0.2
        assert notes.active() == []

    def test_newest_first(self):
        notes = Notifications(clock=FakeTimer())
        notes.error("first")
        notes.info("second")
        assert [n.message for n in notes.active()] == ["second", "first"]
        assert notes.active()[0].level == "info"

    def test_dismiss(self):
        notes = Notifications(clock=FakeTimer())
        item = notes.error("oops")
        notes.dismiss(item)
        assert notes.active() == []
