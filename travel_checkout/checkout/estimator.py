"""
Estimation du montant de base d'une réservation (logique pure, pas d'appel réseau).
"""
from travel_checkout.bookings.models import Booking
from travel_checkout.config import PARTNER_DISCOUNT_RATE, PARTNER_ROLE


def is_partner(role: str) -> bool:
    return (role or "").strip().lower() == PARTNER_ROLE

# module travel_checkout.checkout.estimator
def gross_amount(booking: Booking) -> float:
    """Prix unitaire x quantité, sans remise (0 si une des valeurs manque)."""
    return (booking.unit_price or 0) * (booking.quantity or 0)

def estimate_base_amount(booking: Booking) -> float:
    """
    Montant de base estimé: prix unitaire x quantité, remise partenaire appliquée.
    - Rôle partenaire: multiplie par PARTNER_DISCOUNT_RATE (0.97)
    - Estimation nulle: retourne le total autoritatif du backend (même s'il vaut 0)
    """
    amount = gross_amount(booking)
    if is_partner(booking.role):
        amount *= PARTNER_DISCOUNT_RATE
    if not amount:
        return booking.total_amount or 0.0
    return amount
