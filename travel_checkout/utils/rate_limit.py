from typing import Any, Dict
from fastapi import Request, Response, HTTPException
import os
import time
import hashlib

from travel_checkout.config import COOKIE_NAME

def _client_key(request: Request) -> str:
    # Un compteur par (utilisateur, route): hash du token si présent, sinon IP du client
    auth_header = request.headers.get("Authorization", "")
    token = auth_header[7:].strip() if auth_header.startswith("Bearer ") else request.cookies.get(COOKIE_NAME)
    path = request.url.path
    if token:
        h = hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]
        return f"user:{h}:{path}"
    ip = request.client.host if request.client else "local"
    return f"ip:{ip}:{path}"

RATE_LIMIT_DETAIL = "Trop de tentatives de paiement, réessayez dans quelques instants"

def _local_window_allows(request: Request, times: int, seconds: int) -> bool:
    """Fenêtre glissante en mémoire (app.state._rl_store), une liste d'horodatages par clé."""
    now = time.time()
    key = _client_key(request)
    windows = getattr(request.app.state, "_rl_store", None)
    if windows is None:
        windows = request.app.state._rl_store = {}
    recent = [t for t in windows.get(key, []) if now - t < seconds]
    allowed = len(recent) < times
    if allowed:
        recent.append(now)
    windows[key] = recent
    return allowed

def optional_rate_limit(times: int, seconds: int):
    """
    Limite la création d'intentions de paiement (double clic, rejeu du formulaire).
    - LOCAL_RATE_LIMIT_FALLBACK=1: fenêtre glissante en mémoire, par instance
    - rate limiting désactivé au démarrage (app.state): aucune limite
    - sinon fastapi-limiter sur Redis; une panne Redis ne bloque jamais le paiement
    """
    async def _dep(request: Request, response: Response):
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            if not _local_window_allows(request, times, seconds):
                raise HTTPException(status_code=429, detail=RATE_LIMIT_DETAIL)
            return

        if getattr(request.app.state, "rate_limit_enabled", None) is False:
            return

        try:
            from fastapi_limiter.depends import RateLimiter
            async def _identifier(req: Request) -> str:
                return _client_key(req)
            return await RateLimiter(times=times, seconds=seconds, identifier=_identifier)(request, response)
        except HTTPException:
            raise
        except Exception:
            return
    return _dep

def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    enabled = getattr(request.app.state, "rate_limit_enabled", None)
    try:
        from fastapi_limiter import FastAPILimiter
        ready = getattr(FastAPILimiter, "redis", None) is not None
    except Exception:
        ready = False
    return {
        "enabled": (bool(enabled) if enabled is not None else None),
        "ready": ready,
        "backend": "redis" if ready else None,
    }
