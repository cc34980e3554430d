import logging
from typing import Any, Dict

from travel_checkout.config import API_BASE_URL, FALLBACK_API_BASE_URL
from travel_checkout.infra.backend_client import BackendClient, BackendConnectionError, BackendError

logger = logging.getLogger(__name__)

async def _check_host(base_url: str) -> Dict[str, Any]:
    info: Dict[str, Any] = {"url": base_url, "reachable": False}
    try:
        await BackendClient(base_url=base_url).get("/health")
        info["reachable"] = True
    except BackendConnectionError as exc:
        info["error"] = str(exc)
    except BackendError as exc:
        # Le backend répond (même en erreur): il est joignable
        info["reachable"] = True
        info["status_code"] = exc.status_code
    return info

async def health_backend_info() -> Dict[str, Any]:
    """Joignabilité de l'hôte principal et de l'hôte de repli (si configuré)."""
    info = {"primary": await _check_host(API_BASE_URL)}
    if FALLBACK_API_BASE_URL:
        info["fallback"] = await _check_host(FALLBACK_API_BASE_URL)
    return info
