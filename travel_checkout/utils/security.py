"""
Identité de l'utilisateur courant et dépendances FastAPI associées.

La connexion est gérée ailleurs: ici on relit seulement
- le token (Bearer prioritaire, sinon cookie COOKIE_NAME)
- request.session["user_info"] = {"id": ..., "role": ...} posé par le flux de connexion
"""
from typing import Any, Dict

from fastapi import Depends, HTTPException, Request
from fastapi.responses import Response

from travel_checkout.bookings.models import CheckoutSession
from travel_checkout.bookings.normalize import pick_cased, to_int
from travel_checkout.config import API_BASE_URL, COOKIE_NAME
from travel_checkout.infra.backend_client import BackendClient
from travel_checkout.infra.processed_store import ProcessedStore, RedisProcessedStore, SessionProcessedStore

USER_INFO_KEY = "user_info"


def _token_from_request(request: Request) -> str:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip()
    return (request.cookies.get(COOKIE_NAME) or "").strip()

def _user_info(request: Request) -> Dict[str, Any]:
    try:
        info = request.session.get(USER_INFO_KEY)
    except AssertionError:
        # SessionMiddleware absent (tests unitaires d'un router isolé)
        return {}
    return info if isinstance(info, dict) else {}

def get_checkout_session(request: Request) -> CheckoutSession:
    token = _token_from_request(request)
    if not token:
        raise HTTPException(status_code=401, detail="Non authentifié")
    info = _user_info(request)
    role = pick_cased(info, "role") or ""
    if isinstance(role, dict):
        role = pick_cased(role, "name") or ""
    return CheckoutSession(
        access_token=token,
        user_id=to_int(pick_cased(info, "id")) or None,
        role=str(role).lower(),
    )

def require_session(session: CheckoutSession = Depends(get_checkout_session)) -> CheckoutSession:
    return session

def get_backend_client(session: CheckoutSession = Depends(require_session)) -> BackendClient:
    return BackendClient(base_url=API_BASE_URL, access_token=session.access_token)

def get_processed_store(request: Request, session: CheckoutSession = Depends(require_session)) -> ProcessedStore:
    """Redis si configuré au démarrage (app.state.processed_redis), sinon la session signée."""
    redis = getattr(request.app.state, "processed_redis", None)
    if redis is not None:
        return RedisProcessedStore(redis, namespace=str(session.user_id or "anonymous"))
    return SessionProcessedStore(request.session)

def clear_session(request: Request, response: Response) -> None:
    """Déconnexion locale: vide la session et supprime le cookie de token."""
    try:
        request.session.clear()
    except AssertionError:
        pass
    response.delete_cookie(COOKIE_NAME, path="/")
