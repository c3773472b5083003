"""
Server-side sessions in Redis: session:<opaque id> -> {"userId", "userType"} with a TTL.
The opaque id is the only thing the client holds (in a cookie).
"""
import json
import logging
import secrets

import redis.asyncio as redis

from fueldrop.actors import ActorKind
from fueldrop.config import settings
from fueldrop.models import Identity

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session:"

_redis: redis.Redis | None = None


async def get_redis() -> redis.Redis:
    global _redis
    if _redis is None:
        _redis = redis.from_url(settings.redis_url, decode_responses=True)
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


class SessionStore:
    def __init__(self, client: redis.Redis, ttl_seconds: int | None = None):
        self.client = client
        self.ttl_seconds = ttl_seconds or settings.session_ttl_seconds

    async def create(self, identity: Identity) -> str:
        session_id = secrets.token_urlsafe(32)
        payload = json.dumps({"userId": identity.user_id, "userType": identity.user_type.value})
        await self.client.set(SESSION_KEY_PREFIX + session_id, payload, ex=self.ttl_seconds)
        return session_id

    async def load(self, session_id: str) -> Identity | None:
        raw = await self.client.get(SESSION_KEY_PREFIX + session_id)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            return Identity(user_id=data["userId"], user_type=ActorKind(data["userType"]))
        except (ValueError, KeyError, TypeError) as e:
            # Treat a corrupt payload as no session at all
            logger.warning("Discarding unreadable session: %s", e)
            await self.destroy(session_id)
            return None

    async def destroy(self, session_id: str) -> None:
        await self.client.delete(SESSION_KEY_PREFIX + session_id)
