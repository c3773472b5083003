import fakeredis
import pytest

from _helper import customer, dealer
from fueldrop.actors import ActorKind
from fueldrop.auth import RequestContext, require_authenticated, require_role
from fueldrop.errors import Forbidden, Unauthorized
from fueldrop.sessions import SESSION_KEY_PREFIX, SessionStore


def test_require_authenticated_without_session():
    with pytest.raises(Unauthorized):
        require_authenticated(RequestContext())


def test_require_authenticated_with_stale_cookie():
    # Cookie present but the session expired in Redis
    with pytest.raises(Unauthorized):
        require_authenticated(RequestContext(session_id="gone"))


def test_require_role_matches():
    identity = dealer(3)
    context = RequestContext(session_id="abc", identity=identity)
    assert require_authenticated(context) == identity
    assert require_role(context, ActorKind.DEALER) == identity


def test_require_role_mismatch():
    context = RequestContext(session_id="abc", identity=customer())
    with pytest.raises(Forbidden) as exc_info:
        require_role(context, ActorKind.DELIVERY_BOY)
    assert "delivery_boy" in exc_info.value.message


def test_require_role_checks_authentication_first():
    with pytest.raises(Unauthorized):
        require_role(RequestContext(), ActorKind.DEALER)


@pytest.mark.asyncio
async def test_session_store_round_trip():
    client = fakeredis.FakeAsyncRedis(decode_responses=True)
    store = SessionStore(client, ttl_seconds=60)

    session_id = await store.create(customer(42))
    assert await client.ttl(SESSION_KEY_PREFIX + session_id) > 0
    assert await store.load(session_id) == customer(42)

    await store.destroy(session_id)
    assert await store.load(session_id) is None


@pytest.mark.asyncio
async def test_session_store_discards_corrupt_payload():
    client = fakeredis.FakeAsyncRedis(decode_responses=True)
    store = SessionStore(client)
    await client.set(SESSION_KEY_PREFIX + "bad", '{"userId": 1, "userType": "admin"}')

    assert await store.load("bad") is None
    assert await client.exists(SESSION_KEY_PREFIX + "bad") == 0
