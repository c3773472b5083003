import logging

import asyncpg
from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from fueldrop.actors import ActorKind, repository_for
from fueldrop.auth import RequestContext, get_request_context, get_session_store
from fueldrop.config import settings
from fueldrop.db import get_pool
from fueldrop.models import Identity
from fueldrop.sessions import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


class LoginBody(BaseModel):
    email: str
    password: str
    user_type: ActorKind = Field(..., alias="userType")


class RegisterBody(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    user_type: ActorKind = Field(..., alias="userType")


def _set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        session_id,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


@router.post("/login")
async def login(
    body: LoginBody,
    response: Response,
    pool: asyncpg.Pool = Depends(get_pool),
    sessions: SessionStore = Depends(get_session_store),
) -> dict:
    user = await repository_for(body.user_type, pool).authenticate(body.email, body.password)
    if user is None:
        return {"success": False, "message": "Invalid credentials"}
    session_id = await sessions.create(Identity(user_id=user["id"], user_type=body.user_type))
    _set_session_cookie(response, session_id)
    logger.info("Login: %s id=%d", body.user_type.value, user["id"])
    return {"success": True, "user": user, "userType": body.user_type.value}


@router.post("/register")
async def register(
    body: RegisterBody,
    response: Response,
    pool: asyncpg.Pool = Depends(get_pool),
    sessions: SessionStore = Depends(get_session_store),
) -> dict:
    """Create the account and log it in straight away."""
    fields = body.model_dump(exclude={"user_type"})
    user_id = await repository_for(body.user_type, pool).register(fields)
    session_id = await sessions.create(Identity(user_id=user_id, user_type=body.user_type))
    _set_session_cookie(response, session_id)
    return {"success": True, "message": "Registration successful"}


@router.post("/logout")
async def logout(
    response: Response,
    context: RequestContext = Depends(get_request_context),
    sessions: SessionStore = Depends(get_session_store),
) -> dict:
    if context.session_id:
        await sessions.destroy(context.session_id)
    response.delete_cookie(settings.session_cookie_name)
    return {"success": True, "message": "Logged out successfully."}
