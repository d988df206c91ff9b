"""Records exchanged between the session manager and its stores."""
from typing import Literal

from pydantic import BaseModel, Field

UserRole = Literal["superadmin", "admin", "organizer"]
UserStatus = Literal["active", "suspended", "pending"]


class PublicUser(BaseModel):
    """Redacted user view; never carries the password hash."""

    id: str
    email: str
    name: str | None = None
    role: UserRole
    image: str | None = None
    status: UserStatus


class UserRecord(BaseModel):
    """Credential store record."""

    id: str
    email: str
    name: str | None = None
    image: str | None = None
    password_hash: str | None = None
    role: UserRole = "organizer"
    status: UserStatus = "active"
    email_verified: bool = False
    created_at: int
    updated_at: int

    class Config:
        from_attributes = True

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)

    def to_public(self) -> PublicUser:
        return PublicUser(
            id=self.id,
            email=self.email,
            name=self.name,
            role=self.role,
            image=self.image,
            status=self.status,
        )


class SessionRecord(BaseModel):
    """Session store record."""

    id: str
    user_id: str
    access_token: str
    refresh_token: str
    access_token_expires_at: int
    refresh_token_expires_at: int
    created_at: int
    user_agent: str | None = None
    ip_address: str | None = None

    class Config:
        from_attributes = True

    def is_access_expired(self, now: int) -> bool:
        return self.access_token_expires_at < now

    def is_refresh_expired(self, now: int) -> bool:
        return self.refresh_token_expires_at < now


class LockoutRecord(BaseModel):
    """Failed sign-in attempts recorded for one identifier."""

    identifier: str
    attempts: list[int] = Field(default_factory=list)
    locked_until: int | None = None
    created_at: int

    class Config:
        from_attributes = True
