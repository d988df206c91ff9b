"""Progressive lockout after repeated failed sign-ins."""
import logging
import math
from collections.abc import Callable

from pydantic import BaseModel

from eventauth.schemas.records import LockoutRecord
from eventauth.stores.base import LockoutStore

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5
ATTEMPT_WINDOW_MS = 15 * 60 * 1000
RECORD_TTL_MS = 24 * 60 * 60 * 1000

# 1 minute after 5 failures, 5 after 10, 15 after 15, 1 hour after 20+
LOCKOUT_DURATIONS_MS = (
    1 * 60 * 1000,
    5 * 60 * 1000,
    15 * 60 * 1000,
    60 * 60 * 1000,
)
MAX_LOCKOUT_MS = 60 * 60 * 1000


class LockoutStatus(BaseModel):
    is_locked: bool
    remaining_attempts: int
    locked_until: int | None = None
    lockout_duration_ms: int | None = None


def calculate_lockout_duration(failure_count: int, max_attempts: int = MAX_ATTEMPTS) -> int:
    """Lockout length for the given number of recent failures."""
    index = failure_count // max_attempts - 1
    if index < 0:
        return MAX_LOCKOUT_MS
    return LOCKOUT_DURATIONS_MS[min(index, len(LOCKOUT_DURATIONS_MS) - 1)]


def format_lockout_duration(ms: int) -> str:
    """Format lockout duration for display."""
    minutes = math.ceil(ms / 60000)
    if minutes < 60:
        return f"{minutes} minute{'' if minutes == 1 else 's'}"
    hours = math.ceil(minutes / 60)
    return f"{hours} hour{'' if hours == 1 else 's'}"


class LoginLockout:
    """Track failed sign-ins per identifier (lowercased email).

    The caller owns the transaction; these methods only read and write the
    lockout store.
    """

    def __init__(
        self,
        store: LockoutStore,
        clock: Callable[[], int],
        max_attempts: int = MAX_ATTEMPTS,
        window_ms: int = ATTEMPT_WINDOW_MS,
        record_ttl_ms: int = RECORD_TTL_MS,
    ) -> None:
        self._store = store
        self._clock = clock
        self.max_attempts = max_attempts
        self.window_ms = window_ms
        self.record_ttl_ms = record_ttl_ms

    def status(self, identifier: str) -> LockoutStatus:
        """Check whether an identifier is currently locked out."""
        now = self._clock()
        record = self._store.get(identifier.lower())
        if record is None:
            return LockoutStatus(is_locked=False, remaining_attempts=self.max_attempts)

        if record.locked_until and record.locked_until > now:
            return LockoutStatus(
                is_locked=True,
                remaining_attempts=0,
                locked_until=record.locked_until,
                lockout_duration_ms=record.locked_until - now,
            )

        window_start = now - self.window_ms
        recent = [t for t in record.attempts if t > window_start]
        return LockoutStatus(
            is_locked=False,
            remaining_attempts=max(0, self.max_attempts - len(recent)),
        )

    def record_failure(self, identifier: str) -> LockoutStatus:
        """Record a failed attempt, locking the identifier once it hits the limit."""
        now = self._clock()
        key = identifier.lower()
        window_start = now - self.window_ms

        record = self._store.get(key)
        attempts = [t for t in record.attempts if t > window_start] if record else []
        attempts.append(now)

        locked_until = None
        if len(attempts) >= self.max_attempts:
            locked_until = now + calculate_lockout_duration(len(attempts), self.max_attempts)
            logger.warning("Sign-in locked for %s after %d failures", key, len(attempts))

        self._store.save(
            LockoutRecord(
                identifier=key,
                attempts=attempts,
                locked_until=locked_until,
                created_at=record.created_at if record else now,
            )
        )

        return LockoutStatus(
            is_locked=locked_until is not None,
            remaining_attempts=max(0, self.max_attempts - len(attempts)),
            locked_until=locked_until,
            lockout_duration_ms=locked_until - now if locked_until else None,
        )

    def clear(self, identifier: str) -> None:
        """Clear failed attempts after a successful sign-in."""
        self._store.delete(identifier.lower())

    def cleanup(self) -> int:
        """Remove old records that no longer hold a lock."""
        now = self._clock()
        return self._store.delete_stale(now - self.record_ttl_ms, now)
