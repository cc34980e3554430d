"""
Client HTTP du backend REST (réservations, coupons, paiements, utilisateurs).

- Un httpx.AsyncClient partagé par hôte (principal / repli), timeout fixe par appel
- BackendClient: porte le token de l'utilisateur et classe les erreurs HTTP
  en BackendError (auth, not found, connexion, requête)
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from travel_checkout.config import API_BASE_URL, HTTP_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

BANNED_MARKERS = ("banned", "locked", "disabled")


class BackendError(Exception):
    """Erreur de base pour un appel backend échoué."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class BackendAuthError(BackendError):
    """401/403: session expirée, droits insuffisants ou compte bloqué."""

    @property
    def banned(self) -> bool:
        text = error_message(self.payload).lower()
        return self.status_code == 403 and any(m in text for m in BANNED_MARKERS)


class BackendNotFoundError(BackendError):
    """404 côté backend."""


class BackendConnectionError(BackendError):
    """Pas de réponse: connexion refusée, DNS, timeout."""


class BackendRequestError(BackendError):
    """Toute autre réponse >= 400 (400, 5xx...)."""


def error_message(payload: Any) -> str:
    """
    Extrait un message lisible d'un corps d'erreur backend.
    - Tolère PascalCase/camelCase (message/Message, error, title/Title)
    - Retourne "" si rien d'exploitable
    """
    if isinstance(payload, str):
        return payload
    if not isinstance(payload, dict):
        return ""
    for key in ("message", "Message", "error", "Error", "title", "Title"):
        value = payload.get(key)
        if value:
            return str(value)
    return ""


_clients: Dict[str, httpx.AsyncClient] = {}

def get_http_client(base_url: str = API_BASE_URL) -> httpx.AsyncClient:
    """Retourne (et crée au besoin) le client httpx partagé pour un hôte."""
    client = _clients.get(base_url)
    if client is None or client.is_closed:
        client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(HTTP_TIMEOUT_SECONDS),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )
        _clients[base_url] = client
    return client

async def close_http_clients() -> None:
    for client in list(_clients.values()):
        await client.aclose()
    _clients.clear()


class BackendClient:
    """Accès au backend au nom d'un utilisateur (Bearer token optionnel)."""

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        access_token: Optional[str] = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url
        self.access_token = access_token
        self.http = http or get_http_client(base_url)

    def with_base_url(self, base_url: str) -> "BackendClient":
        """Même identité, autre hôte (utilisé par le repli du polling)."""
        return BackendClient(base_url=base_url, access_token=self.access_token)

    async def call(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        headers: dict[str, str] = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        try:
            response = await self.http.request(
                method,
                path,
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.TimeoutException as exc:
            raise BackendConnectionError(f"backend_timeout: {method} {path} after {HTTP_TIMEOUT_SECONDS}s") from exc
        except httpx.HTTPError as exc:
            raise BackendConnectionError(f"backend_connection_failed: {exc}") from exc

        payload = _parse_body(response)
        status = response.status_code
        if status in (401, 403):
            raise BackendAuthError("backend_auth_failed", status_code=status, payload=payload)
        if status == 404:
            raise BackendNotFoundError("backend_not_found", status_code=status, payload=payload)
        if status >= 400:
            logger.warning("backend %s %s -> %s %s", method, path, status, error_message(payload))
            raise BackendRequestError(f"backend_error_{status}", status_code=status, payload=payload)
        return payload

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.call("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.call("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self.call("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.call("DELETE", path, **kwargs)


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
