import pytest

from core.db.schema import init_db


@pytest.fixture(autouse=True)
def _sqlite_db(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    for var in (
        "SEED_USER_EMAIL",
        "SEED_USER_PASSWORD",
        "PUBLIC_BASE_URL",
        "COOKIE_SECURE",
        "PASSWORD_RESET_REVEAL_UNKNOWN",
        "EMAIL_USER",
        "EMAIL_PASSWORD",
    ):
        monkeypatch.delenv(var, raising=False)
    init_db()
    yield
