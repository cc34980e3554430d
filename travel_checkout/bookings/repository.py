"""
Accès backend pour la feature 'bookings' (réservation, combo, statut).
"""
import logging
from typing import Any, Dict, List, Optional

from travel_checkout.infra.backend_client import BackendClient
from travel_checkout.bookings.models import Booking
from travel_checkout.bookings.normalize import normalize_booking, pick_cased, to_float

logger = logging.getLogger(__name__)

# module travel_checkout.bookings.repository
async def fetch_booking(client: BackendClient, booking_id: int, fallback_role: str = "") -> Booking:
    """
    GET /Booking/{id} puis normalisation.
    - Les BackendError (404, 401/403...) sont propagées à l'appelant
    - Si la réservation n'embarque pas de prix de combo, le complète via GET /ServiceCombo/{id}
    """
    raw = await client.get(f"/Booking/{int(booking_id)}") or {}
    booking = normalize_booking(raw, fallback_role=fallback_role)
    if not booking.unit_price and booking.combo_id:
        price = await fetch_combo_price(client, booking.combo_id)
        if price:
            booking = booking.model_copy(update={"unit_price": price})
    return booking

async def fetch_combo_price(client: BackendClient, combo_id: int) -> Optional[float]:
    """Prix unitaire d'un combo, None si indisponible (best-effort)."""
    try:
        combo = await client.get(f"/ServiceCombo/{int(combo_id)}") or {}
    except Exception:
        logger.warning("bookings.repository.fetch_combo_price failed combo_id=%s", combo_id, exc_info=True)
        return None
    return to_float(pick_cased(combo, "price")) or None

async def fetch_combo_details(client: BackendClient, combo_id: int) -> List[Dict[str, Any]]:
    """GET /ServiceComboDetail/combo/{id}: catalogue des services additionnels du combo."""
    details = await client.get(f"/ServiceComboDetail/combo/{int(combo_id)}")
    return details if isinstance(details, list) else []

async def update_booking_status(client: BackendClient, booking_id: int, status: str) -> None:
    """PUT /Booking/{id}/status avec une chaîne brute en body (ex: "paid")."""
    await client.put(f"/Booking/{int(booking_id)}/status", json=status)
