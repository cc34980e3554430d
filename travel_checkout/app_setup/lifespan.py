"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Rate limiting (FastAPILimiter sur Redis, fakeredis en tests)
- Redis de la garde "déjà traité" si PROCESSED_STORE_REDIS_URL est défini
- Fermeture des clients httpx du backend à l'arrêt
Variables d'environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement le rate limiting (tests)
  - USE_FAKE_REDIS_FOR_TESTS=1: utilise fakeredis (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: active un fallback local si l'init échoue
"""
import os
import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from travel_checkout.config import PROCESSED_STORE_REDIS_URL
from travel_checkout.infra.backend_client import close_http_clients

try:
    from fakeredis.aioredis import FakeRedis  # tests only
except Exception:
    FakeRedis = None

logger = logging.getLogger("uvicorn.error")


def _redis_from_url(url: str):
    if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
        if not FakeRedis:
            raise RuntimeError("USE_FAKE_REDIS_FOR_TESTS=1 mais fakeredis n'est pas installé.")
        return FakeRedis(decode_responses=True)
    return aioredis.from_url(url, encoding="utf-8", decode_responses=True)

async def init_rate_limiter(app: FastAPI) -> None:
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
        return
    try:
        r = _redis_from_url(os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0"))
        await FastAPILimiter.init(r)
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        app.state.rate_limit_enabled = os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1"
        logger.warning("Rate limiting %s due to init error: %s",
                       "falling back to local in-memory" if app.state.rate_limit_enabled else "disabled", e)

async def init_processed_store(app: FastAPI) -> None:
    app.state.processed_redis = None
    if not PROCESSED_STORE_REDIS_URL:
        logger.info("Processed-bookings guard stored in the signed session")
        return
    try:
        r = _redis_from_url(PROCESSED_STORE_REDIS_URL)
        await r.ping()
        app.state.processed_redis = r
        logger.info("Processed-bookings guard stored in Redis")
    except Exception as e:
        logger.warning("Processed-bookings Redis unavailable, using the session instead: %s", e)

@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_rate_limiter(app)
    await init_processed_store(app)
    try:
        yield
    finally:
        await close_http_clients()
        if getattr(app.state, "processed_redis", None) is not None:
            await app.state.processed_redis.aclose()
