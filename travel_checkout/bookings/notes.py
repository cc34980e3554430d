"""
Marqueurs machine embarqués dans le champ "notes" d'une réservation.

Formats (hérités du formulaire de réservation):
- [ADDITIONAL_SERVICES:id:qty,id:qty,...]
- [COUPON_CODE:code]
Ce module est la seule frontière qui lit ces marqueurs; le reste du code
utilise Booking.additional_service_selections et Booking.applied_coupon_code.
"""
import re
from typing import List, Optional

from travel_checkout.bookings.models import ServiceSelection

ADDITIONAL_SERVICES_RE = re.compile(r"\[ADDITIONAL_SERVICES:([^\]]+)\]")
COUPON_CODE_RE = re.compile(r"\[COUPON_CODE:([^\]]+)\]")
_STRIP_RE = re.compile(r"\n?\[(?:ADDITIONAL_SERVICES|COUPON_CODE):[^\]]+\]")

# module travel_checkout.bookings.notes
def parse_additional_services(notes: str) -> List[ServiceSelection]:
    """
    Extrait les paires (service_id, quantity) du marqueur ADDITIONAL_SERVICES.
    - Quantité absente => 1
    - Ignore les entrées à id non numérique ou quantité <= 0
    - En cas de doublon, la première entrée l'emporte
    """
    match = ADDITIONAL_SERVICES_RE.search(notes or "")
    if not match:
        return []
    selections: List[ServiceSelection] = []
    seen = set()
    for entry in match.group(1).split(","):
        id_str, _, qty_str = entry.partition(":")
        try:
            service_id = int(id_str.strip())
            quantity = int(qty_str.strip() or "1")
        except ValueError:
            continue
        if quantity <= 0 or service_id in seen:
            continue
        seen.add(service_id)
        selections.append(ServiceSelection(service_id=service_id, quantity=quantity))
    return selections

def parse_coupon_code(notes: str) -> Optional[str]:
    match = COUPON_CODE_RE.search(notes or "")
    if not match:
        return None
    return match.group(1).strip() or None

def strip_markers(notes: str) -> str:
    """Retire les marqueurs pour n'afficher que la note saisie par le client."""
    return _STRIP_RE.sub("", notes or "").strip()
