"""
Résolution de la remise appliquée à une réservation.

Ordre de priorité strict:
1) coupon rattaché en base (BookingCoupons)
2) coupon noté dans le champ notes ([COUPON_CODE:...]) -> calcul via l'API coupons
3) rôle partenaire: total autoritatif déjà remisé, on recalcule le prix d'origine
4) aucune remise
Ne lève jamais: toute erreur backend retombe sur un calcul arithmétique.
"""
import logging

from travel_checkout.bookings.models import Booking, DiscountResult
from travel_checkout.checkout.estimator import estimate_base_amount, gross_amount, is_partner
from travel_checkout.config import PARTNER_DISCOUNT_RATE
from travel_checkout.coupons import repository as coupons_repo
from travel_checkout.infra.backend_client import BackendClient, BackendError

logger = logging.getLogger(__name__)


def no_discount(booking: Booking, source: str = "none") -> DiscountResult:
    return DiscountResult(original_total=booking.total_amount, discount_amount=0.0, source=source)

def _finalize(booking: Booking, original_total: float, discount: float, code, source: str) -> DiscountResult:
    # Une remise nulle ou négative équivaut à "pas de remise"
    if discount <= 0 or original_total <= 0:
        return no_discount(booking, source=source)
    return DiscountResult(
        original_total=original_total,
        discount_amount=discount,
        applied_coupon_code=code,
        source=source,
    )

# module travel_checkout.checkout.discounts
def relational_discount(booking: Booking) -> DiscountResult:
    """Coupon rattaché: le backend a déjà baissé TotalAmount, on retrouve l'écart."""
    total = booking.total_amount
    gross = gross_amount(booking)
    original = gross if gross > total else estimate_base_amount(booking)
    return _finalize(booking, original, max(0.0, original - total), booking.attached_coupon.code, "relational")

async def notes_coupon_discount(client: BackendClient, booking: Booking) -> DiscountResult:
    """
    Coupon noté dans notes: calcule la remise sur le montant de base.
    - Succès API: remise retournée (si > 0)
    - Échec API: repli sur (base - total autoritatif) si base > total
    """
    code = booking.applied_coupon_code
    total = booking.total_amount
    gross = gross_amount(booking)
    base = gross if gross > 0 else total
    try:
        discount = await coupons_repo.calculate_discount(client, code, base)
    except BackendError as exc:
        logger.warning("checkout.discounts calculate-discount failed code=%s booking=%s: %s", code, booking.id, exc)
        discount = max(0.0, base - total) if base > total else 0.0
    return _finalize(booking, base, discount, code, "notes")

def partner_discount(booking: Booking) -> DiscountResult:
    total = booking.total_amount
    original = total / PARTNER_DISCOUNT_RATE
    return _finalize(booking, original, max(0.0, original - total), None, "partner")

async def resolve_discount(client: BackendClient, booking: Booking) -> DiscountResult:
    if booking.attached_coupon is not None:
        result = relational_discount(booking)
    elif booking.applied_coupon_code:
        result = await notes_coupon_discount(client, booking)
    elif is_partner(booking.role):
        result = partner_discount(booking)
    else:
        result = no_discount(booking)
    logger.info(
        "checkout.discounts booking=%s source=%s original=%s discount=%s",
        booking.id, result.source, result.original_total, result.discount_amount,
    )
    return result
