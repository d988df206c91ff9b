"""Authentication error kinds with stable codes."""
from enum import StrEnum
from typing import Any


class AuthErrorCode(StrEnum):
    """Machine-readable error codes returned to clients."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    EXTERNAL_PROVIDER_REQUIRED = "EXTERNAL_PROVIDER_REQUIRED"
    ACCOUNT_SUSPENDED = "ACCOUNT_SUSPENDED"
    ACCOUNT_LOCKED = "ACCOUNT_LOCKED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    MISSING_TOKEN = "MISSING_TOKEN"


class AuthError(Exception):
    """Base class for every session/credential failure."""

    code: AuthErrorCode
    status_code: int = 400
    default_message = "Authentication failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        return {"error_code": str(self.code), "message": self.message}


class InvalidInput(AuthError):
    code = AuthErrorCode.INVALID_INPUT
    default_message = "Invalid email format"


class WeakPassword(AuthError):
    code = AuthErrorCode.WEAK_PASSWORD
    default_message = "Password requirements not met"

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(f"{self.default_message}: {', '.join(self.errors)}")

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["errors"] = self.errors
        return payload


class AlreadyExists(AuthError):
    code = AuthErrorCode.ALREADY_EXISTS
    status_code = 409
    default_message = "Email already exists"


class InvalidCredentials(AuthError):
    code = AuthErrorCode.INVALID_CREDENTIALS
    status_code = 401
    default_message = "Invalid email or password"


class ExternalProviderRequired(AuthError):
    code = AuthErrorCode.EXTERNAL_PROVIDER_REQUIRED
    default_message = "Please sign in with Google"


class AccountSuspended(AuthError):
    code = AuthErrorCode.ACCOUNT_SUSPENDED
    status_code = 403
    default_message = "Your account has been suspended"


class AccountLocked(AuthError):
    code = AuthErrorCode.ACCOUNT_LOCKED
    status_code = 429
    default_message = "Too many failed sign-in attempts"

    def __init__(self, retry_after_ms: int, message: str | None = None) -> None:
        self.retry_after_ms = retry_after_ms
        super().__init__(message)

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["retry_after_ms"] = self.retry_after_ms
        return payload


class InvalidToken(AuthError):
    code = AuthErrorCode.INVALID_TOKEN
    status_code = 401
    default_message = "Invalid refresh token"


class TokenExpired(AuthError):
    code = AuthErrorCode.TOKEN_EXPIRED
    status_code = 401
    default_message = "Refresh token expired"


class UserNotFound(AuthError):
    code = AuthErrorCode.USER_NOT_FOUND
    status_code = 401
    default_message = "User not found"


class MissingToken(AuthError):
    code = AuthErrorCode.MISSING_TOKEN
    status_code = 401
    default_message = "Missing token"
