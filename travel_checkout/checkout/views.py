import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from travel_checkout.bookings.models import CheckoutSession
from travel_checkout.checkout import service as checkout_service
from travel_checkout.checkout.service import CheckoutSummary
from travel_checkout.infra.backend_client import BackendClient
from travel_checkout.utils.security import get_backend_client, require_session

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/checkout", tags=["Checkout API"])


class CouponRequest(BaseModel):
    code: str

# module travel_checkout.checkout.views
@router.get("/{booking_id}", response_model=CheckoutSummary)
async def get_checkout_summary(
    booking_id: int,
    session: CheckoutSession = Depends(require_session),
    client: BackendClient = Depends(get_backend_client),
):
    """
    Récapitulatif payable d'une réservation.
    - Montant réconcilié: original - remise + services additionnels
    - Coupon appliqué, lignes additionnelles, statut de paiement, can_pay
    - Erreurs: 404 réservation introuvable, 401 session expirée
    """
    return await checkout_service.get_summary(client, booking_id, session)

@router.post("/{booking_id}/coupon", response_model=CheckoutSummary)
async def apply_checkout_coupon(
    booking_id: int,
    body: CouponRequest,
    session: CheckoutSession = Depends(require_session),
    client: BackendClient = Depends(get_backend_client),
):
    """Applique un coupon puis renvoie le récapitulatif recalculé (400/404 si refusé)."""
    return await checkout_service.apply_coupon(client, booking_id, body.code, session)

@router.delete("/{booking_id}/coupon", response_model=CheckoutSummary)
async def remove_checkout_coupon(
    booking_id: int,
    session: CheckoutSession = Depends(require_session),
    client: BackendClient = Depends(get_backend_client),
):
    return await checkout_service.remove_coupon(client, booking_id, session)
