"""Shared FastAPI dependencies."""
from collections.abc import Callable
from functools import lru_cache

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from eventauth.config import get_settings
from eventauth.database import get_db
from eventauth.services.lockout import LoginLockout
from eventauth.services.mailer import MailDispatcher, SmtpVerificationMailer
from eventauth.services.passwords import PasswordHasher
from eventauth.services.session_manager import SessionManager, now_ms
from eventauth.stores.sql import SqlAuthStore

bearer_scheme = HTTPBearer(auto_error=False)


def get_store(db: Session = Depends(get_db)) -> SqlAuthStore:
    """Auth stores bound to the request's database session."""
    return SqlAuthStore(db)


@lru_cache
def get_hasher() -> PasswordHasher:
    """Process-wide password hasher with its bounded pool."""
    settings = get_settings()
    return PasswordHasher(rounds=settings.bcrypt_rounds, max_workers=settings.hash_workers)


@lru_cache
def get_mail_dispatcher() -> MailDispatcher:
    """Process-wide verification email dispatcher."""
    settings = get_settings()
    return MailDispatcher(SmtpVerificationMailer(settings), max_workers=settings.mail_workers)


def get_clock() -> Callable[[], int]:
    return now_ms


def get_session_manager(
    store: SqlAuthStore = Depends(get_store),
    hasher: PasswordHasher = Depends(get_hasher),
    mail: MailDispatcher = Depends(get_mail_dispatcher),
    clock: Callable[[], int] = Depends(get_clock),
) -> SessionManager:
    settings = get_settings()
    lockout = None
    if settings.lockout_enabled:
        lockout = LoginLockout(
            store.lockouts,
            clock,
            max_attempts=settings.lockout_max_attempts,
            window_ms=settings.lockout_window_ms,
            record_ttl_ms=settings.lockout_record_ttl_ms,
        )
    return SessionManager(
        store,
        hasher,
        policy=settings.session_policy(),
        mail=mail,
        lockout=lockout,
        clock=clock,
    )


def get_access_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    """Access token from the bearer header, else the access cookie."""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(get_settings().access_cookie_name)
