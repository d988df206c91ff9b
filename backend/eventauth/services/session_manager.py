"""Signup, signin, refresh with rotation, and signout.

A session is Active while its access token is unexpired, AccessExpired once
only the refresh window remains, and Dead when the refresh window has
elapsed or the record is gone. Revocation is deletion; there is no revoked
flag.
"""
import logging
import secrets
import time
import uuid
from collections.abc import Callable
from typing import Any

from eventauth.config import SessionPolicy
from eventauth.errors import (
    AccountLocked,
    AccountSuspended,
    AlreadyExists,
    AuthError,
    ExternalProviderRequired,
    InvalidCredentials,
    InvalidInput,
    InvalidToken,
    TokenExpired,
    UserNotFound,
    WeakPassword,
)
from eventauth.schemas.auth import AuthResult, RefreshResult, VerifySessionResult
from eventauth.schemas.records import PublicUser, SessionRecord, UserRecord
from eventauth.services.lockout import LoginLockout, format_lockout_duration
from eventauth.services.mailer import MailDispatcher
from eventauth.services.passwords import PasswordHasher
from eventauth.services.queries import SessionQueries
from eventauth.services.validation import validate_email, validate_password
from eventauth.stores.base import AuthStore

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def generate_token(nbytes: int = 32) -> str:
    """Opaque, unguessable token from the OS CSPRNG."""
    return secrets.token_urlsafe(nbytes)


class SessionManager:
    """Session lifecycle over an ``AuthStore``."""

    def __init__(
        self,
        store: AuthStore,
        hasher: PasswordHasher,
        policy: SessionPolicy | None = None,
        mail: MailDispatcher | None = None,
        lockout: LoginLockout | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self.policy = policy or SessionPolicy()
        self._mail = mail
        self._lockout = lockout
        self._clock = clock
        self.queries = SessionQueries(store, clock)

    def signup(
        self,
        email: str,
        password: str,
        name: str | None = None,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> AuthResult:
        """Create an organizer account and its first session."""
        if not validate_email(email):
            raise InvalidInput()

        validation = validate_password(password, self.policy.password_min_length)
        if not validation.is_valid:
            raise WeakPassword(validation.errors)

        normalized = email.lower()
        if self._store.users.find_by_email(normalized) is not None:
            raise AlreadyExists()

        # Hash outside the transaction so the store is not held during bcrypt.
        password_hash = self._hasher.hash(password)

        now = self._clock()
        user = UserRecord(
            id=str(uuid.uuid4()),
            email=normalized,
            name=name,
            password_hash=password_hash,
            role="organizer",
            status="active",
            created_at=now,
            updated_at=now,
        )
        session = self._new_session(user.id, now, user_agent, ip_address)
        with self._store.transaction() as store:
            store.users.insert(user)
            store.sessions.insert(session)

        logger.info("User %s signed up", user.id)
        self._send_verification(user)
        return self._auth_result(user, session)

    def signin(
        self,
        email: str,
        password: str,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> AuthResult:
        """Verify credentials and open a new concurrent session."""
        normalized = email.lower()
        self._check_lockout(normalized)

        user = self._store.users.find_by_email(normalized)
        if user is None:
            self._record_failure(normalized)
            raise InvalidCredentials()

        if not user.has_password:
            raise ExternalProviderRequired()

        if not self._hasher.verify(password, user.password_hash):
            self._record_failure(normalized)
            raise InvalidCredentials()

        # Only after the password checks out, so probing reveals nothing.
        if user.status == "suspended":
            raise AccountSuspended()

        now = self._clock()
        session = self._new_session(user.id, now, user_agent, ip_address)
        with self._store.transaction() as store:
            store.sessions.insert(session)
            store.users.patch(user.id, {"updated_at": now})
            if self._lockout is not None:
                self._lockout.clear(normalized)

        logger.info("User %s signed in (session %s)", user.id, session.id)
        return self._auth_result(user.model_copy(update={"updated_at": now}), session)

    def refresh(
        self,
        refresh_token: str,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> RefreshResult:
        """Rotate both tokens of the session holding ``refresh_token``.

        The old pair stops matching anything the moment this commits. The
        write is a compare-and-swap on the presented refresh token, so of two
        concurrent refreshes with the same token at most one wins.
        """
        now = self._clock()
        failure: AuthError
        with self._store.transaction() as store:
            session = store.sessions.find_by_refresh_token(refresh_token) if refresh_token else None
            if session is None:
                raise InvalidToken()

            if session.is_refresh_expired(now):
                store.sessions.delete(session.id)
                failure = TokenExpired()
            else:
                user = store.users.get(session.user_id)
                if user is None:
                    logger.error("Session %s references missing user %s", session.id, session.user_id)
                    store.sessions.delete(session.id)
                    failure = UserNotFound()
                else:
                    fields = self._token_fields(now)
                    fields["user_agent"] = user_agent if user_agent is not None else session.user_agent
                    fields["ip_address"] = ip_address if ip_address is not None else session.ip_address
                    if not store.sessions.patch(session.id, fields, expected_refresh_token=refresh_token):
                        raise InvalidToken()
                    logger.info("Session %s rotated", session.id)
                    return RefreshResult(
                        access_token=fields["access_token"],
                        refresh_token=fields["refresh_token"],
                        access_token_expires_at=fields["access_token_expires_at"],
                        user=user.to_public(),
                    )

        # Raised after commit so the session deletion sticks.
        logger.warning("Refresh rejected for session %s: %s", session.id, failure.code)
        raise failure

    def signout(self, access_token: str) -> None:
        """Delete the session behind an access token; missing is fine."""
        with self._store.transaction() as store:
            session = store.sessions.find_by_access_token(access_token) if access_token else None
            if session is not None:
                store.sessions.delete(session.id)
                logger.info("Session %s signed out", session.id)

    def signout_by_refresh_token(self, refresh_token: str) -> None:
        """Delete the session behind a refresh token; missing is fine."""
        with self._store.transaction() as store:
            session = store.sessions.find_by_refresh_token(refresh_token) if refresh_token else None
            if session is not None:
                store.sessions.delete(session.id)
                logger.info("Session %s signed out", session.id)

    def verify_session(self, access_token: str) -> VerifySessionResult:
        return self.queries.verify_session(access_token)

    def get_current_user(self, access_token: str) -> PublicUser | None:
        return self.queries.get_current_user(access_token)

    def _new_session(
        self,
        user_id: str,
        now: int,
        user_agent: str | None,
        ip_address: str | None,
    ) -> SessionRecord:
        return SessionRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            created_at=now,
            user_agent=user_agent,
            ip_address=ip_address,
            **self._token_fields(now),
        )

    def _token_fields(self, now: int) -> dict[str, Any]:
        return {
            "access_token": generate_token(self.policy.token_bytes),
            "refresh_token": generate_token(self.policy.token_bytes),
            "access_token_expires_at": now + self.policy.access_token_ttl_ms,
            "refresh_token_expires_at": now + self.policy.refresh_token_ttl_ms,
        }

    @staticmethod
    def _auth_result(user: UserRecord, session: SessionRecord) -> AuthResult:
        return AuthResult(
            user_id=user.id,
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            session_id=session.id,
            access_token_expires_at=session.access_token_expires_at,
            user=user.to_public(),
        )

    def _check_lockout(self, identifier: str) -> None:
        if self._lockout is None:
            return
        status = self._lockout.status(identifier)
        if status.is_locked:
            retry_after = status.lockout_duration_ms or 0
            raise AccountLocked(
                retry_after,
                f"Too many failed sign-in attempts. Try again in {format_lockout_duration(retry_after)}",
            )

    def _record_failure(self, identifier: str) -> None:
        logger.warning("Failed sign-in attempt for %s", identifier)
        if self._lockout is None:
            return
        with self._store.transaction():
            self._lockout.record_failure(identifier)

    def _send_verification(self, user: UserRecord) -> None:
        if self._mail is None:
            return
        try:
            self._mail.dispatch(user)
        except Exception:
            # Account creation never fails on email; the user can resend later.
            logger.exception("Failed to queue verification email for user %s", user.id)
