import pytest

from core.errors import (
    AccountNotFound,
    CredentialMismatch,
    InvalidOrExpiredToken,
    NotifyError,
    SessionError,
    StoreError,
)
from core.reset_manager import ResetTokenManager, confirmed_passwords
from core.db.users.password_reset import is_token_live

T0 = 1_700_000_000_000
MINUTE = 60 * 1000


class FakeDirectory:
    def __init__(self, users=None, fail_persist=False):
        self.users = {u["email"]: dict(u) for u in (users or [])}
        self.fail_persist = fail_persist
        self.calls = []
        self.passwords = {}

    def find_by_email(self, email):
        self.calls.append(("find_by_email", email))
        user = self.users.get(email)
        return dict(user) if user else None

    def find_by_live_token(self, token, now):
        self.calls.append(("find_by_live_token", token))
        for user in self.users.values():
            if user.get("reset_token") == token and is_token_live(
                user.get("reset_token"), user.get("reset_token_expiry"), now
            ):
                return dict(user)
        return None

    def persist(self, user):
        self.calls.append(("persist", user["id"]))
        if self.fail_persist:
            raise StoreError()
        stored = self.users[user["email"]]
        stored["reset_token"] = user["reset_token"]
        stored["reset_token_expiry"] = user["reset_token_expiry"]

    def update_credential_and_clear_token(self, user, new_password, *, token, now):
        self.calls.append(("update_credential_and_clear_token", user["id"]))
        stored = self.users[user["email"]]
        if stored.get("reset_token") != token or not is_token_live(token, stored.get("reset_token_expiry"), now):
            return False
        self.passwords[user["id"]] = new_password
        stored["reset_token"] = None
        stored["reset_token_expiry"] = None
        return True

    @property
    def mutations(self):
        return [c for c in self.calls if c[0] in ("persist", "update_credential_and_clear_token")]


class FakeNotifier:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    def send(self, *, template_id, user, subject, reset_url):
        self.sent.append({"template_id": template_id, "user": user, "subject": subject, "reset_url": reset_url})
        if self.fail:
            raise NotifyError()


class FakeGate:
    def __init__(self, fail=False):
        self.established = []
        self.fail = fail

    def establish(self, user):
        if self.fail:
            raise SessionError()
        self.established.append(user["id"])
        return f"session-{user['id']}"


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock(T0)


@pytest.fixture
def directory():
    return FakeDirectory(users=[{"id": 7, "email": "user@example.com", "reset_token": None, "reset_token_expiry": None}])


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def gate():
    return FakeGate()


@pytest.fixture
def manager(directory, notifier, gate, clock):
    return ResetTokenManager(directory, notifier, gate, clock=clock)


def test_request_reset_unknown_email_never_mutates(manager, directory, notifier):
    with pytest.raises(AccountNotFound):
        manager.request_reset("nobody@example.com", "http://localhost:8000")
    assert directory.mutations == []
    assert notifier.sent == []


def test_request_reset_persists_token_and_sends_link(manager, directory, notifier):
    issued = manager.request_reset("user@example.com", "http://localhost:8000/")

    stored = directory.users["user@example.com"]
    assert stored["reset_token"] == issued.token
    assert stored["reset_token_expiry"] == T0 + 3_600_000
    assert issued.expires_at == T0 + 3_600_000
    assert issued.reset_url == f"http://localhost:8000/account/reset/{issued.token}"

    assert len(notifier.sent) == 1
    message = notifier.sent[0]
    assert message["template_id"] == "password-reset"
    assert message["subject"] == "Password Reset"
    assert message["reset_url"] == issued.reset_url
    assert message["user"]["email"] == "user@example.com"


def test_persist_happens_before_send(manager, directory, notifier):
    order = []
    original_persist = directory.persist
    directory.persist = lambda user: (order.append("persist"), original_persist(user))
    notifier.send = lambda **kw: order.append("send")
    manager.request_reset("user@example.com", "http://x")
    assert order == ["persist", "send"]


def test_persist_failure_aborts_before_send(directory, notifier, gate, clock):
    directory.fail_persist = True
    manager = ResetTokenManager(directory, notifier, gate, clock=clock)
    with pytest.raises(StoreError):
        manager.request_reset("user@example.com", "http://x")
    assert notifier.sent == []


def test_send_failure_keeps_token_usable(directory, gate, clock):
    notifier = FakeNotifier(fail=True)
    manager = ResetTokenManager(directory, notifier, gate, clock=clock)
    with pytest.raises(NotifyError):
        manager.request_reset("user@example.com", "http://x")

    token = directory.users["user@example.com"]["reset_token"]
    assert token
    result = manager.consume_reset(token, "pw1", "pw1")
    assert result.session_id == "session-7"


def test_second_request_invalidates_first_token(manager, directory):
    first = manager.request_reset("user@example.com", "http://x").token
    second = manager.request_reset("user@example.com", "http://x").token
    assert first != second

    with pytest.raises(InvalidOrExpiredToken):
        manager.find_reset_user(first)
    assert manager.find_reset_user(second)["id"] == 7


def test_consume_with_expired_token_does_not_mutate(manager, directory, gate, clock):
    token = manager.request_reset("user@example.com", "http://x").token
    directory.calls.clear()
    clock.now = T0 + 3_600_000  # exactly at expiry

    with pytest.raises(InvalidOrExpiredToken):
        manager.consume_reset(token, "pw1", "pw1")
    assert directory.mutations == []
    assert gate.established == []


def test_consume_succeeds_exactly_once(manager, directory, gate):
    token = manager.request_reset("user@example.com", "http://x").token

    result = manager.consume_reset(token, "pw1", "pw1")
    assert result.session_id == "session-7"
    assert directory.passwords[7] == "pw1"
    assert directory.users["user@example.com"]["reset_token"] is None
    assert directory.users["user@example.com"]["reset_token_expiry"] is None

    with pytest.raises(InvalidOrExpiredToken):
        manager.consume_reset(token, "pw2", "pw2")
    assert directory.passwords[7] == "pw1"
    assert gate.established == [7]


def test_consume_mismatch_never_touches_directory(manager, directory, gate):
    with pytest.raises(CredentialMismatch):
        manager.consume_reset("whatever", "pw1", "pw2")
    assert directory.calls == []
    assert gate.established == []


def test_lost_race_reports_invalid_token(manager, directory, gate):
    token = manager.request_reset("user@example.com", "http://x").token
    directory.update_credential_and_clear_token = lambda user, pw, *, token, now: False

    with pytest.raises(InvalidOrExpiredToken):
        manager.consume_reset(token, "pw1", "pw1")
    assert gate.established == []


def test_session_failure_after_password_change(directory, notifier, clock):
    manager = ResetTokenManager(directory, notifier, FakeGate(fail=True), clock=clock)
    token = manager.request_reset("user@example.com", "http://x").token

    with pytest.raises(SessionError):
        manager.consume_reset(token, "pw1", "pw1")
    assert directory.passwords[7] == "pw1"
    assert directory.users["user@example.com"]["reset_token"] is None


def test_scenario_consume_within_hour_then_reuse(manager, directory, gate, clock):
    token = manager.request_reset("user@example.com", "http://x").token

    clock.now = T0 + 30 * MINUTE
    manager.consume_reset(token, "pw1", "pw1")
    assert gate.established == [7]
    assert directory.users["user@example.com"]["reset_token"] is None

    clock.now = T0 + 31 * MINUTE
    with pytest.raises(InvalidOrExpiredToken):
        manager.consume_reset(token, "pw1", "pw1")


def test_scenario_consume_after_expiry(manager, gate, clock):
    token = manager.request_reset("user@example.com", "http://x").token

    clock.now = T0 + 61 * MINUTE
    with pytest.raises(InvalidOrExpiredToken):
        manager.consume_reset(token, "pw1", "pw1")
    assert gate.established == []


def test_confirmed_passwords():
    confirmed_passwords("same", "same")
    with pytest.raises(CredentialMismatch) as excinfo:
        confirmed_passwords("a", "b")
    assert excinfo.value.message == "Passwords do not match"
