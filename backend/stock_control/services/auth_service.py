# Overview: Password hashing, strength rules, and credential checks.

"""
Authentication Service

WHY: Every dispatch and receive must be attributable to a real account.
Passwords are stored as bcrypt hashes only; every login is verified against
the stored hash.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost from BCRYPT_ROUNDS, default 12)
- Minimum 8 characters required
- Must contain uppercase, lowercase, digit, and special char
- Inactive users cannot log in
- Session tokens managed separately (see session_service.py)
"""

import re
from typing import Optional

import bcrypt
from flask import current_app

from ..errors import ValidationError


DEFAULT_BCRYPT_ROUNDS = 12


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character (!@#$%^&*(),.'":{}|<>)

    Raises PasswordValidationError if requirements not met.
    """
    if not isinstance(password, str):
        raise PasswordValidationError("Password is required")

    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    A missing or malformed hash never matches.
    """
    if not password_hash or not isinstance(password, str):
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def public_user(user: Optional[dict]) -> Optional[dict]:
    """User record as sent to clients: the credential hash never leaves."""
    if user is None:
        return None
    return {k: v for k, v in user.items() if k != "passwordHash"}


def authenticate(store, email: str, password: str) -> Optional[dict]:
    """
    Return the user for valid, active credentials, else None.

    Email match is exact (case-sensitive).
    """
    if not email or not password:
        return None
    user = store.users.get_by_email(email)
    if user is None or not user.get("active", False):
        return None
    if not verify_password(password, user.get("passwordHash")):
        return None
    return user
