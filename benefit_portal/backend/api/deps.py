"""Request-scoped dependencies: settings, storage and the signed-in reviewer."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request

from benefit_portal.backend.core.db import session_scope
from benefit_portal.backend.core.errors import AuthenticationError
from benefit_portal.backend.core.models import User
from benefit_portal.backend.core.storage import Storage
from benefit_portal.backend.core.utils.config import PortalSettings

SESSION_USER_KEY = "user_id"


def get_settings(request: Request) -> PortalSettings:
    return request.app.state.settings


def get_storage(request: Request) -> Iterator[Storage]:
    """One transaction per request, committed when the handler succeeds."""
    with session_scope(request.app.state.session_factory) as session:
        yield Storage(session)


def get_optional_user(request: Request, storage: Storage = Depends(get_storage)) -> User | None:
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        return None
    user = storage.get_user(user_id)
    if user is None:
        # Account removed since login.
        request.session.clear()
    return user


def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise AuthenticationError("Not authenticated")
    return user
