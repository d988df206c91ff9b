"""SQLAlchemy models package."""
from eventauth.models.user import User
from eventauth.models.session import AuthSession
from eventauth.models.lockout import FailedLoginAttempt

__all__ = [
    "User",
    "AuthSession",
    "FailedLoginAttempt",
]
