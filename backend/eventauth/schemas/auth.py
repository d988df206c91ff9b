"""Authentication schemas."""
from pydantic import BaseModel, Field

from eventauth.schemas.records import PublicUser


class SignupRequest(BaseModel):
    """User registration request."""

    email: str = Field(..., max_length=255)
    password: str = Field(..., max_length=1024)
    name: str | None = Field(None, max_length=255)


class SigninRequest(BaseModel):
    """User login request."""

    email: str = Field(..., max_length=255)
    password: str = Field(..., max_length=1024)


class RefreshRequest(BaseModel):
    """Token refresh request; falls back to the refresh cookie when omitted."""

    refresh_token: str | None = None


class SignoutRequest(BaseModel):
    """Signout request; falls back to the bearer header or cookies when omitted."""

    access_token: str | None = None


class AuthResult(BaseModel):
    """Issued identity and token pair for signup and signin."""

    user_id: str
    access_token: str
    refresh_token: str
    session_id: str
    access_token_expires_at: int
    user: PublicUser


class RefreshResult(BaseModel):
    """Rotated token pair."""

    access_token: str
    refresh_token: str
    access_token_expires_at: int
    user: PublicUser


class VerifySessionResult(BaseModel):
    """Lightweight session check."""

    valid: bool
    needs_refresh: bool
    user_id: str | None = None


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
