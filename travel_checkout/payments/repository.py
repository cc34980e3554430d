"""
Accès backend pour la feature 'payments' (intent, statut, vérification par orderCode).
"""
import logging
from typing import Any, Dict, Optional

from travel_checkout.infra.backend_client import BackendClient, BackendNotFoundError
from travel_checkout.bookings.models import PaymentStatus
from travel_checkout.bookings.normalize import normalize_payment_status, pick_cased, to_bool

logger = logging.getLogger(__name__)

# module travel_checkout.payments.repository
async def post_create_intent(client: BackendClient, booking_id: int, amount: float, description: str) -> Any:
    """POST /Payment/create-intent {BookingId, Amount, Description} -> réponse brute (forme variable)."""
    return await client.post(
        "/Payment/create-intent",
        json={"BookingId": int(booking_id), "Amount": amount, "Description": description},
    )

async def get_payment_status(client: BackendClient, booking_id: int) -> Optional[PaymentStatus]:
    """
    GET /Payment/status/{bookingId}.
    - 404 = pas encore de paiement (état normal "en attente"): retourne None
    """
    try:
        raw = await client.get(f"/Payment/status/{int(booking_id)}")
    except BackendNotFoundError:
        return None
    if not isinstance(raw, dict):
        return None
    return normalize_payment_status(raw)

async def check_payment_by_order_code(client: BackendClient, order_code: str) -> Dict[str, Any]:
    """
    GET /Payment/check-payment-by-ordercode?orderCode=...
    Retour normalisé: {"was_updated": bool, "is_paid": bool, "status": str | None}
    """
    raw = await client.get("/Payment/check-payment-by-ordercode", params={"orderCode": order_code}) or {}
    payment = pick_cased(raw, "paymentStatus") or {}
    return {
        "was_updated": to_bool(pick_cased(raw, "wasUpdated")),
        "is_paid": to_bool(pick_cased(payment, "isPaid")),
        "status": pick_cased(payment, "status"),
    }
