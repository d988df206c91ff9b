"""User model."""
import uuid

from sqlalchemy import BigInteger, Column, Integer, String
from sqlalchemy.orm import relationship

from eventauth.database import Base


class User(Base):
    """User account."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)  # always lowercased
    name = Column(String(255))
    image = Column(String(1024))
    password_hash = Column(String(255))  # NULL for external-provider accounts
    role = Column(String(20), nullable=False, default="organizer")
    status = Column(String(20), nullable=False, default="active")
    email_verified = Column(Integer, default=0)  # SQLite boolean
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)

    # Relationships
    sessions = relationship("AuthSession", back_populates="user", cascade="all, delete-orphan")
