"""Failed sign-in bookkeeping for account lockout."""
import uuid

from sqlalchemy import JSON, BigInteger, Column, String

from eventauth.database import Base


class FailedLoginAttempt(Base):
    """Recent failed sign-in timestamps for one identifier."""

    __tablename__ = "failed_login_attempts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    identifier = Column(String(255), unique=True, nullable=False, index=True)
    attempts = Column(JSON, nullable=False, default=list)  # epoch ms
    locked_until = Column(BigInteger)
    created_at = Column(BigInteger, nullable=False)
