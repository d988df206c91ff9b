"""Periodic cleanup of dead sessions and stale lockout records.

Nothing here runs on the request path. Call ``run_cleanup`` from an
external scheduler/cron, or run ``python -m eventauth.services.maintenance``.
"""
import logging
from collections.abc import Callable

from eventauth.config import get_settings
from eventauth.services.lockout import LoginLockout
from eventauth.stores.base import AuthStore

logger = logging.getLogger(__name__)


def cleanup_expired_sessions(store: AuthStore, now: int) -> int:
    """Delete every session whose refresh window has elapsed."""
    with store.transaction():
        deleted = store.sessions.delete_expired(now)
    logger.info("Deleted %d expired sessions", deleted)
    return deleted


def cleanup_lockout_records(lockout: LoginLockout, store: AuthStore) -> int:
    """Delete lockout records older than a day that no longer hold a lock."""
    with store.transaction():
        deleted = lockout.cleanup()
    logger.info("Deleted %d stale lockout records", deleted)
    return deleted


def run_cleanup(clock: Callable[[], int] | None = None) -> dict:
    """Run both sweeps against the configured database."""
    from eventauth.database import get_db_context
    from eventauth.services.session_manager import now_ms
    from eventauth.stores.sql import SqlAuthStore

    settings = get_settings()
    clock = clock or now_ms

    with get_db_context() as db:
        store = SqlAuthStore(db)
        lockout = LoginLockout(
            store.lockouts,
            clock,
            max_attempts=settings.lockout_max_attempts,
            window_ms=settings.lockout_window_ms,
            record_ttl_ms=settings.lockout_record_ttl_ms,
        )
        return {
            "sessions": cleanup_expired_sessions(store, clock()),
            "lockouts": cleanup_lockout_records(lockout, store),
        }


if __name__ == "__main__":
    logging.basicConfig(level=get_settings().log_level.upper())
    result = run_cleanup()
    logger.info("Cleanup finished: %s", result)
