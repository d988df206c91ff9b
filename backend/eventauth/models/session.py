"""Authentication/session models."""
import uuid

from sqlalchemy import BigInteger, Column, ForeignKey, Index, String
from sqlalchemy.orm import relationship

from eventauth.database import Base


class AuthSession(Base):
    """One live login: an access/refresh token pair and their expiry windows."""

    __tablename__ = "auth_sessions"
    __table_args__ = (
        Index("ix_auth_sessions_refresh_expires_at", "refresh_token_expires_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    access_token = Column(String(128), unique=True, nullable=False, index=True)
    refresh_token = Column(String(128), unique=True, nullable=False, index=True)
    access_token_expires_at = Column(BigInteger, nullable=False)
    refresh_token_expires_at = Column(BigInteger, nullable=False)
    created_at = Column(BigInteger, nullable=False)
    user_agent = Column(String(255))
    ip_address = Column(String(45))

    user = relationship("User", back_populates="sessions")
