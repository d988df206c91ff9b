import pytest

from conftest import STRONG_PASSWORD
from eventauth import models  # noqa: F401
from eventauth.database import Base, SessionLocal, engine
from eventauth.errors import InvalidCredentials
from eventauth.models.lockout import FailedLoginAttempt
from eventauth.models.session import AuthSession
from eventauth.models.user import User
from eventauth.services.lockout import LoginLockout
from eventauth.services.maintenance import cleanup_expired_sessions, cleanup_lockout_records, run_cleanup

SEVEN_DAYS = 7 * 24 * 60 * 60 * 1000
DAY = 24 * 60 * 60 * 1000


def test_cleanup_expired_sessions_leaves_live_ones(manager, store, clock):
    old = manager.signup("old@example.com", STRONG_PASSWORD)
    clock.advance(SEVEN_DAYS + 1)
    live = manager.signup("live@example.com", STRONG_PASSWORD)

    assert cleanup_expired_sessions(store, clock.now) == 1
    assert store.sessions.count() == 1
    assert store.sessions.find_by_refresh_token(old.refresh_token) is None
    assert store.sessions.find_by_refresh_token(live.refresh_token) is not None


def test_cleanup_lockout_records(manager, store, clock):
    for _ in range(2):
        with pytest.raises(InvalidCredentials):
            manager.signin("ghost@example.com", STRONG_PASSWORD)
    clock.advance(DAY + 1)

    assert cleanup_lockout_records(LoginLockout(store.lockouts, clock), store) == 1
    assert store.lockouts.get("ghost@example.com") is None


def test_run_cleanup_against_configured_database():
    Base.metadata.create_all(bind=engine)
    now = 1_700_000_000_000
    db = SessionLocal()
    try:
        db.add(User(id="maint-user", email="maint@example.com", created_at=now, updated_at=now))
        db.add(
            AuthSession(
                id="maint-dead",
                user_id="maint-user",
                access_token="maint-dead-access",
                refresh_token="maint-dead-refresh",
                access_token_expires_at=now - SEVEN_DAYS,
                refresh_token_expires_at=now - 1,
                created_at=now - SEVEN_DAYS,
            )
        )
        db.add(
            AuthSession(
                id="maint-live",
                user_id="maint-user",
                access_token="maint-live-access",
                refresh_token="maint-live-refresh",
                access_token_expires_at=now + 1,
                refresh_token_expires_at=now + SEVEN_DAYS,
                created_at=now,
            )
        )
        db.add(FailedLoginAttempt(identifier="maint@example.com", attempts=[1], created_at=now - DAY - 1))
        db.commit()
    finally:
        db.close()

    assert run_cleanup(clock=lambda: now) == {"sessions": 1, "lockouts": 1}

    db = SessionLocal()
    try:
        assert [row.id for row in db.query(AuthSession).filter(AuthSession.user_id == "maint-user")] == ["maint-live"]
        db.query(AuthSession).filter(AuthSession.user_id == "maint-user").delete()
        db.query(User).filter(User.id == "maint-user").delete()
        db.commit()
    finally:
        db.close()
