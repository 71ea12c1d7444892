"""Session login for reviewers and admins."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from benefit_portal.backend.api.deps import SESSION_USER_KEY, get_optional_user, get_storage
from benefit_portal.backend.core.models import User
from benefit_portal.backend.core.storage import Storage
from benefit_portal.backend.schemas import LoginIn, UserOut
from benefit_portal.backend.services import authenticate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=UserOut)
def login(request: Request, body: LoginIn, storage: Storage = Depends(get_storage)) -> UserOut:
    user = authenticate(storage, body.email, body.password)
    request.session[SESSION_USER_KEY] = user.id
    logger.info("User %s logged in", user.email)
    return UserOut.model_validate(user)


@router.post("/logout")
def logout(request: Request) -> dict[str, bool]:
    request.session.clear()
    return {"ok": True}


@router.get("/me", response_model=UserOut | None)
def me(user: User | None = Depends(get_optional_user)) -> UserOut | None:
    """Current session's user, or ``null`` when signed out."""
    return UserOut.model_validate(user) if user is not None else None
