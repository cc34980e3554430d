import logging
from functools import partial
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.status import HTTP_303_SEE_OTHER

from travel_checkout.bookings.models import CheckoutSession
from travel_checkout.config import FALLBACK_API_BASE_URL
from travel_checkout.infra.backend_client import BackendClient
from travel_checkout.infra.processed_store import ProcessedStore
from travel_checkout.payments import service as payments_service
from travel_checkout.payments.poller import PaymentConfirmationPoller
from travel_checkout.payments.service import ConfirmationResult
from travel_checkout.utils.rate_limit import optional_rate_limit
from travel_checkout.utils.security import get_backend_client, get_processed_store, require_session

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/checkout", tags=["Payments API"])


def make_poller(client: BackendClient) -> PaymentConfirmationPoller:
    """Poller sur l'hôte principal, avec l'hôte de repli si FALLBACK_API_BASE_URL est défini."""
    fallback = client.with_base_url(FALLBACK_API_BASE_URL) if FALLBACK_API_BASE_URL else None
    return PaymentConfirmationPoller(client, fallback)

def get_poller_factory():
    return make_poller

# module travel_checkout.payments.views
@router.post("/{booking_id}/intent", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_payment_intent(
    request: Request,
    booking_id: int,
    description: Optional[str] = None,
    session: CheckoutSession = Depends(require_session),
    client: BackendClient = Depends(get_backend_client),
):
    """
    Crée l'intention de paiement pour le montant réconcilié.
    - Sécurité: session requise + rate limit (10 req / 60s)
    - Réponse: {"checkout_url": ...} ou redirection 303 si le client accepte text/html
    - Erreurs: 400 montant/validation, 401 reconnexion, 404 réservation, 502/503 intégration/réseau
    """
    checkout_url = await payments_service.start_checkout(client, booking_id, session, description)
    accept = (request.headers.get("accept") or "").lower()
    if "text/html" in accept:
        return RedirectResponse(url=checkout_url, status_code=HTTP_303_SEE_OTHER)
    return JSONResponse({"checkout_url": checkout_url})

@router.get("/{booking_id}/return", response_model=ConfirmationResult)
async def payment_return(
    booking_id: int,
    order_code: Optional[str] = Query(default=None, alias="orderCode"),
    session: CheckoutSession = Depends(require_session),
    client: BackendClient = Depends(get_backend_client),
    store: ProcessedStore = Depends(get_processed_store),
    poller_factory=Depends(get_poller_factory),
):
    """
    Retour du prestataire de paiement (?orderCode=...).
    - Vérifie le paiement par polling borné: 3 tentatives sur l'hôte principal; l'hôte de repli
      (3 tentatives de plus) n'est utilisé que si FALLBACK_API_BASE_URL est défini
    - Paiement encaissé: statut 'paid' et cumul fidélité, une seule fois
    - L'épuisement des tentatives n'est pas une erreur: la réponse reflète l'état connu
    """
    return await payments_service.confirm_payment_return(
        client,
        booking_id,
        session,
        store,
        order_code=order_code,
        poller_factory=partial(poller_factory, client),
    )
