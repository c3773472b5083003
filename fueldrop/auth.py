"""
Access guard. The request context is built once per request from the session
cookie; the checks below only look at it and never touch Postgres.
"""
from fastapi import Depends, Request
from pydantic import BaseModel

from fueldrop.actors import ActorKind
from fueldrop.config import settings
from fueldrop.errors import Forbidden, Unauthorized
from fueldrop.models import Identity
from fueldrop.sessions import SessionStore, get_redis


class RequestContext(BaseModel):
    session_id: str | None = None
    identity: Identity | None = None


def require_authenticated(context: RequestContext) -> Identity:
    if context.identity is None:
        raise Unauthorized()
    return context.identity


def require_role(context: RequestContext, expected: ActorKind) -> Identity:
    identity = require_authenticated(context)
    if identity.user_type != expected:
        raise Forbidden(f"Forbidden: Access restricted to {expected.value}s.")
    return identity


async def get_session_store() -> SessionStore:
    return SessionStore(await get_redis())


async def get_request_context(
    request: Request,
    sessions: SessionStore = Depends(get_session_store),
) -> RequestContext:
    session_id = request.cookies.get(settings.session_cookie_name)
    if not session_id:
        return RequestContext()
    return RequestContext(session_id=session_id, identity=await sessions.load(session_id))


def role_guard(expected: ActorKind):
    """Dependency yielding the caller's identity if they are logged in as expected."""

    def guard(context: RequestContext = Depends(get_request_context)) -> Identity:
        return require_role(context, expected)

    return guard


dealer_only = role_guard(ActorKind.DEALER)
customer_only = role_guard(ActorKind.CUSTOMER)
delivery_boy_only = role_guard(ActorKind.DELIVERY_BOY)
