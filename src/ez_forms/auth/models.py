"""Authentication models for FastAPI"""

from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    """Requester identity resolved from a verified access token"""

    user_id: str
    email: Optional[str] = None
    claims: dict = {}


def normalize_email(email: Optional[str]) -> Optional[str]:
    """
    Canonical form used whenever emails are stored or compared.

    Args:
        email: Raw email string, possibly with surrounding whitespace or mixed case

    Returns:
        Trimmed, lower-cased email, or None if nothing usable was given
    """
    if email is None:
        return None
    email = email.strip().lower()
    return email or None
