"""Field validation shared by the services and the REST API."""
import re
import time
from typing import Optional

from zxsgit.utils.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def is_valid_email(email: Optional[str]) -> bool:
    """Check the email shape (something@domain.tld)."""
    return bool(email) and EMAIL_PATTERN.match(str(email).lower()) is not None


def normalize_email(email: str) -> str:
    """Lowercase and strip an email address."""
    return email.strip().lower()


def require_text(value: Optional[str], message: str) -> str:
    """
    Return the stripped value, or raise if it is blank.

    Args:
        value: Raw input
        message: Error message for a blank value

    Returns:
        Stripped value

    Raises:
        ValidationError: If the value is missing or blank
    """
    if value is None or not str(value).strip():
        raise ValidationError(message)
    return str(value).strip()


def require_email(email: Optional[str]) -> str:
    """Validate and normalize an email address."""
    if not is_valid_email(email):
        raise ValidationError("Invalid email")
    return normalize_email(email)
