import sqlite3

import pytest

from app.auth_utils import DbSessionGate
from core import database
from core.directory import UserDirectory
from core.errors import SessionError, StoreError
from core.reset_manager import ResetTokenManager

T0 = 1_700_000_000_000


class RecordingNotifier:
    def __init__(self):
        self.urls = []

    def send(self, *, template_id, user, subject, reset_url):
        self.urls.append(reset_url)


def _broken(*args, **kwargs):
    raise sqlite3.OperationalError("database is locked")


def test_full_cycle_against_sqlite():
    user_id = database.create_user("user@example.com", "old-pass")
    clock = lambda: T0  # noqa: E731
    notifier = RecordingNotifier()
    manager = ResetTokenManager(UserDirectory(), notifier, DbSessionGate(), clock=clock)

    issued = manager.request_reset("user@example.com", "http://localhost:8000")
    stored = database.get_user_by_id(user_id)
    assert stored["reset_token"] == issued.token
    assert stored["reset_token_expiry"] == T0 + 3_600_000
    assert notifier.urls == [f"http://localhost:8000/account/reset/{issued.token}"]

    assert manager.find_reset_user(issued.token)["id"] == user_id

    result = manager.consume_reset(issued.token, "new-pass", "new-pass")
    assert database.get_session(result.session_id)["user_id"] == user_id
    stored = database.get_user_by_id(user_id)
    assert stored["reset_token"] is None and stored["reset_token_expiry"] is None
    assert database.verify_password("new-pass", stored["password_hash"])


def test_persist_rejects_half_set_token():
    user_id = database.create_user("user@example.com", "old-pass")
    with pytest.raises(ValueError):
        UserDirectory().persist({"id": user_id, "reset_token": "abc", "reset_token_expiry": None})


def test_driver_errors_become_store_error(monkeypatch):
    monkeypatch.setattr(database, "get_user_by_email", _broken)
    monkeypatch.setattr(database, "save_reset_token", _broken)
    directory = UserDirectory()
    with pytest.raises(StoreError):
        directory.find_by_email("user@example.com")
    with pytest.raises(StoreError):
        directory.persist({"id": 1, "reset_token": "t", "reset_token_expiry": T0})


def test_session_gate_wraps_store_errors(monkeypatch):
    import app.auth_utils as auth_utils

    monkeypatch.setattr(auth_utils, "create_session", _broken)
    with pytest.raises(SessionError):
        DbSessionGate().establish({"id": 1})
