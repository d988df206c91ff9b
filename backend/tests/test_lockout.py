import pytest

from conftest import FakeClock
from eventauth.schemas.records import LockoutRecord
from eventauth.services.lockout import (
    MAX_LOCKOUT_MS,
    LoginLockout,
    calculate_lockout_duration,
    format_lockout_duration,
)
from eventauth.stores.memory import MemoryAuthStore

MINUTE = 60 * 1000


@pytest.mark.parametrize(
    ("failures", "expected"),
    [
        (5, 1 * MINUTE),
        (9, 1 * MINUTE),
        (10, 5 * MINUTE),
        (15, 15 * MINUTE),
        (20, 60 * MINUTE),
        (40, 60 * MINUTE),
        (3, MAX_LOCKOUT_MS),
    ],
)
def test_calculate_lockout_duration(failures, expected):
    assert calculate_lockout_duration(failures) == expected


@pytest.mark.parametrize(
    ("ms", "expected"),
    [
        (MINUTE, "1 minute"),
        (30 * 1000, "1 minute"),
        (5 * MINUTE, "5 minutes"),
        (60 * MINUTE, "1 hour"),
        (61 * MINUTE, "2 hours"),
        (120 * MINUTE, "2 hours"),
    ],
)
def test_format_lockout_duration(ms, expected):
    assert format_lockout_duration(ms) == expected


@pytest.fixture
def lockout_env():
    store = MemoryAuthStore()
    clock = FakeClock()
    return LoginLockout(store.lockouts, clock), store, clock


def test_unknown_identifier_is_not_locked(lockout_env):
    lockout, _, _ = lockout_env

    status = lockout.status("nobody@example.com")

    assert status.is_locked is False
    assert status.remaining_attempts == 5


def test_fifth_failure_locks(lockout_env):
    lockout, _, clock = lockout_env

    for expected_remaining in (4, 3, 2, 1):
        status = lockout.record_failure("A@Example.com")
        assert status.is_locked is False
        assert status.remaining_attempts == expected_remaining

    status = lockout.record_failure("a@example.com")
    assert status.is_locked is True
    assert status.locked_until == clock.now + MINUTE

    current = lockout.status("a@example.com")
    assert current.is_locked is True
    assert current.lockout_duration_ms == MINUTE


def test_attempts_outside_window_are_forgotten(lockout_env):
    lockout, store, clock = lockout_env

    for _ in range(4):
        lockout.record_failure("a@example.com")
    clock.advance(15 * MINUTE + 1)

    status = lockout.record_failure("a@example.com")

    assert status.is_locked is False
    assert store.lockouts.get("a@example.com").attempts == [clock.now]


def test_clear_removes_record(lockout_env):
    lockout, store, _ = lockout_env
    lockout.record_failure("a@example.com")

    lockout.clear("A@example.com")

    assert store.lockouts.get("a@example.com") is None


def test_cleanup_keeps_recent_and_still_locked_records(lockout_env):
    lockout, store, clock = lockout_env
    day = 24 * 60 * MINUTE
    store.lockouts.save(LockoutRecord(identifier="stale", attempts=[1], created_at=clock.now - day - 1))
    store.lockouts.save(
        LockoutRecord(
            identifier="stale-but-locked",
            attempts=[1],
            locked_until=clock.now + MINUTE,
            created_at=clock.now - day - 1,
        )
    )
    store.lockouts.save(LockoutRecord(identifier="recent", attempts=[1], created_at=clock.now))

    assert lockout.cleanup() == 1
    assert store.lockouts.get("stale") is None
    assert store.lockouts.get("stale-but-locked") is not None
    assert store.lockouts.get("recent") is not None
