"""In-process stores with the same contract as the SQL ones.

Used by tests and single-process tools. Every record is copied on the way
in and out so callers never share mutable state with the store.
"""
import threading
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from eventauth.errors import AlreadyExists
from eventauth.schemas.records import LockoutRecord, SessionRecord, UserRecord


class MemoryCredentialStore:
    def __init__(self, lock: threading.RLock) -> None:
        self._lock = lock
        self._rows: dict[str, UserRecord] = {}
        self._by_email: dict[str, str] = {}

    def find_by_email(self, email: str) -> UserRecord | None:
        with self._lock:
            user_id = self._by_email.get(email)
            return self._rows[user_id].model_copy() if user_id else None

    def get(self, user_id: str) -> UserRecord | None:
        with self._lock:
            row = self._rows.get(user_id)
            return row.model_copy() if row else None

    def insert(self, user: UserRecord) -> UserRecord:
        with self._lock:
            if user.email in self._by_email:
                raise AlreadyExists()
            self._rows[user.id] = user.model_copy()
            self._by_email[user.email] = user.id
            return user

    def patch(self, user_id: str, fields: dict[str, Any]) -> None:
        with self._lock:
            row = self._rows.get(user_id)
            if row is not None:
                self._rows[user_id] = row.model_copy(update=fields)

    def remove(self, user_id: str) -> None:
        """Drop a user without touching its sessions."""
        with self._lock:
            row = self._rows.pop(user_id, None)
            if row is not None:
                self._by_email.pop(row.email, None)

    def snapshot(self) -> tuple:
        return dict(self._rows), dict(self._by_email)

    def restore(self, state: tuple) -> None:
        self._rows, self._by_email = state


class MemorySessionStore:
    def __init__(self, lock: threading.RLock) -> None:
        self._lock = lock
        self._rows: dict[str, SessionRecord] = {}
        self._by_access: dict[str, str] = {}
        self._by_refresh: dict[str, str] = {}

    def find_by_access_token(self, access_token: str) -> SessionRecord | None:
        with self._lock:
            session_id = self._by_access.get(access_token)
            return self._rows[session_id].model_copy() if session_id else None

    def find_by_refresh_token(self, refresh_token: str) -> SessionRecord | None:
        with self._lock:
            session_id = self._by_refresh.get(refresh_token)
            return self._rows[session_id].model_copy() if session_id else None

    def insert(self, session: SessionRecord) -> SessionRecord:
        with self._lock:
            self._index(session.model_copy())
            return session

    def patch(
        self,
        session_id: str,
        fields: dict[str, Any],
        expected_refresh_token: str | None = None,
    ) -> bool:
        with self._lock:
            row = self._rows.get(session_id)
            if row is None:
                return False
            if expected_refresh_token is not None and row.refresh_token != expected_refresh_token:
                return False
            self._unindex(row)
            self._index(row.model_copy(update=fields))
            return True

    def delete(self, session_id: str) -> None:
        with self._lock:
            row = self._rows.get(session_id)
            if row is not None:
                self._unindex(row)

    def delete_expired(self, now: int) -> int:
        with self._lock:
            expired = [row for row in self._rows.values() if row.is_refresh_expired(now)]
            for row in expired:
                self._unindex(row)
            return len(expired)

    def count(self) -> int:
        with self._lock:
            return len(self._rows)

    def _index(self, row: SessionRecord) -> None:
        self._rows[row.id] = row
        self._by_access[row.access_token] = row.id
        self._by_refresh[row.refresh_token] = row.id

    def _unindex(self, row: SessionRecord) -> None:
        self._rows.pop(row.id, None)
        self._by_access.pop(row.access_token, None)
        self._by_refresh.pop(row.refresh_token, None)

    def snapshot(self) -> tuple:
        return dict(self._rows), dict(self._by_access), dict(self._by_refresh)

    def restore(self, state: tuple) -> None:
        self._rows, self._by_access, self._by_refresh = state


class MemoryLockoutStore:
    def __init__(self, lock: threading.RLock) -> None:
        self._lock = lock
        self._rows: dict[str, LockoutRecord] = {}

    def get(self, identifier: str) -> LockoutRecord | None:
        with self._lock:
            row = self._rows.get(identifier)
            return row.model_copy(deep=True) if row else None

    def save(self, record: LockoutRecord) -> None:
        with self._lock:
            existing = self._rows.get(record.identifier)
            created_at = existing.created_at if existing else record.created_at
            self._rows[record.identifier] = record.model_copy(update={"created_at": created_at}, deep=True)

    def delete(self, identifier: str) -> None:
        with self._lock:
            self._rows.pop(identifier, None)

    def delete_stale(self, created_before: int, now: int) -> int:
        with self._lock:
            stale = [
                key
                for key, row in self._rows.items()
                if row.created_at < created_before and (row.locked_until is None or row.locked_until < now)
            ]
            for key in stale:
                del self._rows[key]
            return len(stale)

    def snapshot(self) -> dict:
        return dict(self._rows)

    def restore(self, state: dict) -> None:
        self._rows = state


class MemoryAuthStore:
    """All auth stores in process memory, serialized by one re-entrant lock."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.users = MemoryCredentialStore(self._lock)
        self.sessions = MemorySessionStore(self._lock)
        self.lockouts = MemoryLockoutStore(self._lock)

    @contextmanager
    def transaction(self) -> Generator["MemoryAuthStore", None, None]:
        with self._lock:
            saved = (self.users.snapshot(), self.sessions.snapshot(), self.lockouts.snapshot())
            try:
                yield self
            except Exception:
                self.users.restore(saved[0])
                self.sessions.restore(saved[1])
                self.lockouts.restore(saved[2])
                raise
