"""Password hashing and policy."""

import secrets

import bcrypt

from reportdesk_api.config import settings
from reportdesk_api.exceptions import ValidationError

TEMP_PASSWORD_BYTES = 12


def validate_password(password: str) -> None:
    """Raise ValidationError if the password violates the length policy."""
    if len(password) < settings.password_min_length:
        raise ValidationError(
            f"Password must be at least {settings.password_min_length} characters"
        )


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its stored bcrypt hash.

    Returns False for malformed hashes instead of raising.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def generate_temporary_password() -> str:
    """Generate a random password that satisfies the length policy."""
    return secrets.token_urlsafe(TEMP_PASSWORD_BYTES)
