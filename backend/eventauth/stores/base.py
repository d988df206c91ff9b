"""Narrow repository interfaces the session manager depends on."""
from contextlib import AbstractContextManager
from typing import Any, Protocol

from eventauth.schemas.records import LockoutRecord, SessionRecord, UserRecord


class CredentialStore(Protocol):
    """Users keyed uniquely by lowercased email."""

    def find_by_email(self, email: str) -> UserRecord | None: ...

    def get(self, user_id: str) -> UserRecord | None: ...

    def insert(self, user: UserRecord) -> UserRecord:
        """Persist a new user; raise ``AlreadyExists`` on a duplicate email."""
        ...

    def patch(self, user_id: str, fields: dict[str, Any]) -> None: ...


class SessionStore(Protocol):
    """Sessions, looked up by either of their tokens."""

    def find_by_access_token(self, access_token: str) -> SessionRecord | None: ...

    def find_by_refresh_token(self, refresh_token: str) -> SessionRecord | None: ...

    def insert(self, session: SessionRecord) -> SessionRecord: ...

    def patch(
        self,
        session_id: str,
        fields: dict[str, Any],
        expected_refresh_token: str | None = None,
    ) -> bool:
        """Update a session in place.

        When ``expected_refresh_token`` is given the write only applies if the
        stored refresh token still equals it. Returns whether a row changed.
        """
        ...

    def delete(self, session_id: str) -> None: ...

    def delete_expired(self, now: int) -> int:
        """Delete sessions whose refresh window elapsed before ``now``."""
        ...


class LockoutStore(Protocol):
    """Failed sign-in bookkeeping keyed by lowercased identifier."""

    def get(self, identifier: str) -> LockoutRecord | None: ...

    def save(self, record: LockoutRecord) -> None: ...

    def delete(self, identifier: str) -> None: ...

    def delete_stale(self, created_before: int, now: int) -> int:
        """Delete records older than ``created_before`` that are not locked at ``now``."""
        ...


class AuthStore(Protocol):
    """Bundle of stores sharing one unit of work."""

    users: CredentialStore
    sessions: SessionStore
    lockouts: LockoutStore

    def transaction(self) -> AbstractContextManager["AuthStore"]:
        """Commit everything done inside the block, or roll it all back."""
        ...
