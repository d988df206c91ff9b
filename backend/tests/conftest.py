import os
import sys

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite://")

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from eventauth.config import SessionPolicy
from eventauth.services.lockout import LoginLockout
from eventauth.services.passwords import PasswordHasher
from eventauth.services.session_manager import SessionManager
from eventauth.stores.memory import MemoryAuthStore

STRONG_PASSWORD = "Str0ng!Passw0rd"


class FakeClock:
    """Settable epoch-millisecond clock."""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class RecordingDispatcher:
    """Stands in for the mail dispatcher and remembers who it was asked to mail."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.users = []

    def dispatch(self, user):
        self.users.append(user)
        if self.fail:
            raise RuntimeError("mail queue unavailable")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(scope="session")
def hasher():
    hasher = PasswordHasher(rounds=4, max_workers=2)
    yield hasher
    hasher.shutdown()


@pytest.fixture
def store():
    return MemoryAuthStore()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def policy():
    return SessionPolicy(bcrypt_rounds=4)


@pytest.fixture
def manager(store, hasher, policy, dispatcher, clock):
    lockout = LoginLockout(store.lockouts, clock)
    return SessionManager(store, hasher, policy=policy, mail=dispatcher, lockout=lockout, clock=clock)
