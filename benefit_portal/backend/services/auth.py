"""Reviewer authentication."""

from __future__ import annotations

import logging

from benefit_portal.backend.core.errors import AuthenticationError
from benefit_portal.backend.core.models import User
from benefit_portal.backend.core.security import verify_password
from benefit_portal.backend.core.storage import Storage

logger = logging.getLogger(__name__)


def authenticate(storage: Storage, email: str, password: str) -> User:
    """Return the user whose credentials match, else raise 401."""
    user = storage.get_user_by_email(email)
    if user is None:
        logger.info("Login failed: unknown email %s", email)
        raise AuthenticationError("Incorrect email.")
    if not verify_password(user.password_hash, password):
        logger.info("Login failed: wrong password for %s", email)
        raise AuthenticationError("Incorrect password.")
    return user
