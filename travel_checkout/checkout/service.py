"""
Cas d'usage 'checkout': récapitulatif payable, application et retrait de coupon.
Chaque opération recharge la réservation et relance la réconciliation complète.
"""
import logging
from typing import List, Optional

from pydantic import BaseModel

from travel_checkout.bookings.models import (
    LOCKED_BOOKING_STATUSES,
    AdditionalServiceLine,
    Booking,
    CheckoutSession,
    PaymentStatus,
    ReconciledTotal,
)
from travel_checkout.checkout.reconciler import reconcile
from travel_checkout.coupons import repository as coupons_repo
from travel_checkout.infra.backend_client import (
    BackendAuthError,
    BackendClient,
    BackendConnectionError,
    BackendError,
    BackendNotFoundError,
    error_message,
)
from travel_checkout.payments import repository as payments_repo
from travel_checkout.payments.errors import ConnectivityError, CouponRejected, ReauthenticationRequired
from travel_checkout.payments.service import load_booking

logger = logging.getLogger(__name__)


class CheckoutSummary(BaseModel):
    booking_id: int
    status: str
    combo_name: Optional[str] = None
    quantity: int = 0
    customer_note: str = ""
    totals: ReconciledTotal
    discount_applied: bool = False
    coupon_code: Optional[str] = None
    discount_source: str = "none"
    add_ons: List[AdditionalServiceLine] = []
    payment: Optional[PaymentStatus] = None
    can_pay: bool = True


def can_pay(booking: Booking, payment: Optional[PaymentStatus]) -> bool:
    """Paiement impossible si déjà payé, ou réservation annulée/confirmée/terminée."""
    if payment is not None and payment.is_paid:
        return False
    return booking.status_normalized not in LOCKED_BOOKING_STATUSES

# module travel_checkout.checkout.service
async def build_summary(client: BackendClient, booking: Booking) -> CheckoutSummary:
    reconciliation = await reconcile(client, booking)
    try:
        payment = await payments_repo.get_payment_status(client, booking.id)
    except BackendError:
        logger.warning("checkout.service payment status unavailable booking=%s", booking.id, exc_info=True)
        payment = None
    discount = reconciliation.discount
    return CheckoutSummary(
        booking_id=booking.id,
        status=booking.status_normalized,
        combo_name=booking.combo_name,
        quantity=booking.quantity,
        customer_note=booking.customer_note,
        totals=reconciliation.totals,
        discount_applied=discount.applied,
        coupon_code=discount.applied_coupon_code,
        discount_source=discount.source,
        add_ons=reconciliation.add_ons.lines,
        payment=payment,
        can_pay=can_pay(booking, payment),
    )

async def get_summary(client: BackendClient, booking_id: int, session: CheckoutSession) -> CheckoutSummary:
    booking = await load_booking(client, booking_id, session)
    return await build_summary(client, booking)

def _coupon_error(exc: BackendError, default: str) -> Exception:
    if isinstance(exc, BackendAuthError):
        return ReauthenticationRequired()
    if isinstance(exc, BackendConnectionError):
        return ConnectivityError()
    if isinstance(exc, BackendNotFoundError):
        return CouponRejected("Ce code promo n'existe pas", status_code=404)
    message = error_message(exc.payload)
    if exc.status_code == 400:
        return CouponRejected(message or None)
    return CouponRejected(message or default, status_code=502)

async def apply_coupon(client: BackendClient, booking_id: int, code: str, session: CheckoutSession) -> CheckoutSummary:
    """
    Valide puis applique un coupon à la réservation.
    - Code vide, combo absent, code invalide, remise <= 0: CouponRejected (pas de retry)
    - Succès: réservation rechargée, réconciliation relancée depuis zéro
    """
    code = (code or "").strip()
    if not code:
        raise CouponRejected("Veuillez saisir un code promo")
    booking = await load_booking(client, booking_id, session)
    if not booking.combo_id:
        raise CouponRejected("Informations du service introuvables")
    try:
        if not await coupons_repo.validate_coupon(client, code, booking.combo_id):
            raise CouponRejected("Code promo invalide")
        discount = await coupons_repo.calculate_discount(client, code, booking.total_amount)
        if discount <= 0:
            raise CouponRejected("Ce code promo ne s'applique pas à cette commande")
        await coupons_repo.apply_coupon(client, booking.id, code)
    except BackendError as exc:
        logger.warning("checkout.service apply coupon failed booking=%s code=%s: %s", booking.id, code, exc)
        raise _coupon_error(exc, "Impossible d'appliquer le code promo. Veuillez réessayer.") from exc
    logger.info("checkout.service coupon %s applied to booking=%s", code, booking.id)
    return await get_summary(client, booking.id, session)

async def remove_coupon(client: BackendClient, booking_id: int, session: CheckoutSession) -> CheckoutSummary:
    booking = await load_booking(client, booking_id, session)
    code = booking.attached_coupon.code if booking.attached_coupon else booking.applied_coupon_code
    if not code:
        raise CouponRejected("Aucun code promo appliqué")
    try:
        await coupons_repo.remove_coupon(client, booking.id, code)
    except BackendError as exc:
        logger.warning("checkout.service remove coupon failed booking=%s code=%s: %s", booking.id, code, exc)
        raise _coupon_error(exc, "Impossible de retirer le code promo. Veuillez réessayer.") from exc
    logger.info("checkout.service coupon %s removed from booking=%s", code, booking.id)
    return await get_summary(client, booking.id, session)
