"""SQLAlchemy-backed stores."""
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventauth.errors import AlreadyExists
from eventauth.models.lockout import FailedLoginAttempt
from eventauth.models.session import AuthSession
from eventauth.models.user import User
from eventauth.schemas.records import LockoutRecord, SessionRecord, UserRecord


class SqlCredentialStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_email(self, email: str) -> UserRecord | None:
        row = self.db.query(User).filter(User.email == email).first()
        return UserRecord.model_validate(row) if row else None

    def get(self, user_id: str) -> UserRecord | None:
        row = self.db.query(User).filter(User.id == user_id).first()
        return UserRecord.model_validate(row) if row else None

    def insert(self, user: UserRecord) -> UserRecord:
        data = user.model_dump()
        data["email_verified"] = int(user.email_verified)
        self.db.add(User(**data))
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise AlreadyExists() from exc
        return user

    def patch(self, user_id: str, fields: dict[str, Any]) -> None:
        self.db.query(User).filter(User.id == user_id).update(fields, synchronize_session=False)


class SqlSessionStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_access_token(self, access_token: str) -> SessionRecord | None:
        row = self.db.query(AuthSession).filter(AuthSession.access_token == access_token).first()
        return SessionRecord.model_validate(row) if row else None

    def find_by_refresh_token(self, refresh_token: str) -> SessionRecord | None:
        row = self.db.query(AuthSession).filter(AuthSession.refresh_token == refresh_token).first()
        return SessionRecord.model_validate(row) if row else None

    def insert(self, session: SessionRecord) -> SessionRecord:
        self.db.add(AuthSession(**session.model_dump()))
        self.db.flush()
        return session

    def patch(
        self,
        session_id: str,
        fields: dict[str, Any],
        expected_refresh_token: str | None = None,
    ) -> bool:
        query = self.db.query(AuthSession).filter(AuthSession.id == session_id)
        if expected_refresh_token is not None:
            # Compare-and-swap: a concurrent rotation makes this match zero rows.
            query = query.filter(AuthSession.refresh_token == expected_refresh_token)
        updated = query.update(fields, synchronize_session=False)
        return updated == 1

    def delete(self, session_id: str) -> None:
        self.db.query(AuthSession).filter(AuthSession.id == session_id).delete(synchronize_session=False)

    def delete_expired(self, now: int) -> int:
        return (
            self.db.query(AuthSession)
            .filter(AuthSession.refresh_token_expires_at < now)
            .delete(synchronize_session=False)
        )


class SqlLockoutStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, identifier: str) -> LockoutRecord | None:
        row = self.db.query(FailedLoginAttempt).filter(FailedLoginAttempt.identifier == identifier).first()
        return LockoutRecord.model_validate(row) if row else None

    def save(self, record: LockoutRecord) -> None:
        row = self.db.query(FailedLoginAttempt).filter(FailedLoginAttempt.identifier == record.identifier).first()
        if row:
            row.attempts = list(record.attempts)
            row.locked_until = record.locked_until
        else:
            self.db.add(FailedLoginAttempt(**record.model_dump()))
        self.db.flush()

    def delete(self, identifier: str) -> None:
        self.db.query(FailedLoginAttempt).filter(
            FailedLoginAttempt.identifier == identifier,
        ).delete(synchronize_session=False)

    def delete_stale(self, created_before: int, now: int) -> int:
        return (
            self.db.query(FailedLoginAttempt)
            .filter(
                and_(
                    FailedLoginAttempt.created_at < created_before,
                    or_(
                        FailedLoginAttempt.locked_until.is_(None),
                        FailedLoginAttempt.locked_until < now,
                    ),
                )
            )
            .delete(synchronize_session=False)
        )


class SqlAuthStore:
    """All auth stores over one SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.users = SqlCredentialStore(db)
        self.sessions = SqlSessionStore(db)
        self.lockouts = SqlLockoutStore(db)

    @contextmanager
    def transaction(self) -> Generator["SqlAuthStore", None, None]:
        try:
            yield self
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
