import pytest
from fakeredis.aioredis import FakeRedis

from travel_checkout.infra.processed_store import RedisProcessedStore, SessionProcessedStore


@pytest.mark.asyncio
async def test_session_store_survives_reload():
    session = {}
    store = SessionProcessedStore(session)
    assert not await store.has_processed(42)
    await store.mark_processed(42)
    await store.mark_processed(42)
    assert session["processed_bookings"] == [42]
    # Nouvelle requête, même session (ex: rafraîchissement de page)
    assert await SessionProcessedStore(session).has_processed(42)

@pytest.mark.asyncio
async def test_redis_store_is_per_user():
    redis = FakeRedis(decode_responses=True)
    alice = RedisProcessedStore(redis, namespace="7")
    bob = RedisProcessedStore(redis, namespace="8")
    await alice.mark_processed(42)
    assert await alice.has_processed(42)
    assert not await bob.has_processed(42)
