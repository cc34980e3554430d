"""
Réconciliation du montant payable: base - remise + services additionnels.
Toujours recalculé depuis zéro à partir de la réservation (jamais incrémental).
"""
import asyncio
import logging

from pydantic import BaseModel

from travel_checkout.bookings.models import AddOnsResult, Booking, DiscountResult, ReconciledTotal
from travel_checkout.checkout.addons import aggregate_add_ons
from travel_checkout.checkout.discounts import resolve_discount
from travel_checkout.infra.backend_client import BackendClient
from travel_checkout.payments.errors import InvalidAmountError

logger = logging.getLogger(__name__)


class Reconciliation(BaseModel):
    totals: ReconciledTotal
    discount: DiscountResult
    add_ons: AddOnsResult

# module travel_checkout.checkout.reconciler
async def reconcile(client: BackendClient, booking: Booking) -> Reconciliation:
    """
    Lance la remise et les services additionnels en parallèle, puis compose le total.
    Invariant: final_payable = original_total - discount_amount + add_ons_total
    """
    discount, add_ons = await asyncio.gather(
        resolve_discount(client, booking),
        aggregate_add_ons(client, booking.additional_service_selections, booking.combo_id),
    )
    totals = ReconciledTotal.compose(discount.original_total, discount.discount_amount, add_ons.total)
    logger.info(
        "checkout.reconcile booking=%s original=%s discount=%s add_ons=%s final=%s",
        booking.id, totals.original_total, totals.discount_amount, totals.add_ons_total, totals.final_payable,
    )
    return Reconciliation(totals=totals, discount=discount, add_ons=add_ons)

def ensure_payable(totals: ReconciledTotal) -> float:
    """Bloque le paiement si le montant final n'est pas strictement positif."""
    if totals.final_payable <= 0:
        raise InvalidAmountError()
    return totals.final_payable
