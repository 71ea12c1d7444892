"""Password hashing and applicant-token generation."""

from __future__ import annotations

import secrets

from werkzeug.security import check_password_hash, generate_password_hash

_TOKEN_BYTES = 16


def hash_password(password: str) -> str:
    """Return a salted ``scrypt:...$salt$hash`` string for ``users.password_hash``."""
    return generate_password_hash(password, method="scrypt")


def verify_password(stored: str, supplied: str) -> bool:
    try:
        return check_password_hash(stored, supplied)
    except ValueError:
        # Unknown method or malformed hash string.
        return False


def generate_applicant_token() -> str:
    """32 hex characters; the token is the applicant's only credential."""
    return secrets.token_hex(_TOKEN_BYTES)
