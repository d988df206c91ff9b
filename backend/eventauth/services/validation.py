"""Email syntax and password policy checks.

Everything here is pure: no state, no I/O. The password error messages and
the three-tier strength mapping are part of the client contract, so they
must stay exactly as written.
"""
import re
from typing import Literal

from pydantic import BaseModel

PASSWORD_MIN_LENGTH = 12

SPECIAL_CHARS = "!@#$%^&*(),.?\":{}|<>[]\\;'`~_+=-"

_EMAIL_RE = re.compile(
    r"[a-zA-Z0-9._%+-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?)*"
    r"\.[a-zA-Z]{2,}"
)
_UPPER_RE = re.compile(r"[A-Z]")
_LOWER_RE = re.compile(r"[a-z]")
_DIGIT_RE = re.compile(r"[0-9]")
_SPECIAL_RE = re.compile(f"[{re.escape(SPECIAL_CHARS)}]")
_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")

PasswordStrength = Literal["weak", "medium", "strong"]


def password_length(password: str) -> int:
    """Length in UTF-16 code units, the way browser clients count it."""
    return len(password.encode("utf-16-le", "surrogatepass")) // 2


class PasswordValidation(BaseModel):
    """Outcome of checking a password against the policy."""

    is_valid: bool
    errors: list[str]
    strength: PasswordStrength


def validate_email(email: str) -> bool:
    """Return True only for syntactically well-formed addresses."""
    if not isinstance(email, str):
        return False
    return _EMAIL_RE.fullmatch(email) is not None


def validate_password(password: str, min_length: int = PASSWORD_MIN_LENGTH) -> PasswordValidation:
    """Check a password against the policy.

    One message is produced per unmet rule, independently of the others.
    Strength is derived from the error count: none is ``strong``, one or two
    is ``medium``, three or more is ``weak``.
    """
    errors: list[str] = []

    if password_length(password) < min_length:
        errors.append(f"At least {min_length} characters")
    if not _UPPER_RE.search(password):
        errors.append("At least 1 uppercase letter")
    if not _LOWER_RE.search(password):
        errors.append("At least 1 lowercase letter")
    if not _DIGIT_RE.search(password):
        errors.append("At least 1 number")
    if not _SPECIAL_RE.search(password):
        errors.append("At least 1 special character (!@#$%^&* etc.)")

    if not errors:
        strength: PasswordStrength = "strong"
    elif len(errors) <= 2:
        strength = "medium"
    else:
        strength = "weak"

    return PasswordValidation(is_valid=not errors, errors=errors, strength=strength)


def is_password_valid(password: str, min_length: int = PASSWORD_MIN_LENGTH) -> bool:
    """Check if password meets minimum requirements."""
    return validate_password(password, min_length).is_valid


def password_strength_score(password: str, min_length: int = PASSWORD_MIN_LENGTH) -> int:
    """Score a password from 0 to 100 for strength meters."""
    length = password_length(password)
    score = min(length * 2, 30)

    for pattern in (_LOWER_RE, _UPPER_RE, _DIGIT_RE, _NON_ALNUM_RE):
        if pattern.search(password):
            score += 10

    if length > min_length:
        score += min((length - min_length) * 3, 30)

    return min(score, 100)
