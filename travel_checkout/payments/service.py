"""
Cas d'usage 'payments': création de l'intention et confirmation au retour du prestataire.
"""
import logging
from typing import Any, Callable, Optional, Tuple

from pydantic import BaseModel

from travel_checkout.bookings import repository as bookings_repo
from travel_checkout.bookings.models import PAID_STATUSES, Booking, CheckoutSession, PaymentStatus
from travel_checkout.bookings.normalize import pick_cased, to_float, to_int
from travel_checkout.checkout.reconciler import ensure_payable, reconcile
from travel_checkout.infra.backend_client import BackendClient, BackendError
from travel_checkout.infra.processed_store import ProcessedStore
from travel_checkout.payments import repository as payments_repo
from travel_checkout.payments.errors import classify_backend_error
from travel_checkout.payments.intent import create_intent, payment_description
from travel_checkout.payments.poller import PaymentConfirmationPoller, PollOutcome, PollState
from travel_checkout.users import loyalty
from travel_checkout.users import repository as users_repo

logger = logging.getLogger(__name__)


class ConfirmationResult(BaseModel):
    booking_id: int
    poll: Optional[PollOutcome] = None
    payment: Optional[PaymentStatus] = None
    confirmed: bool = False
    status_updated: bool = False
    spent_recorded: bool = False
    amount_spent: float = 0.0
    loyalty_level: Optional[str] = None
    loyalty_progress: Optional[float] = None


async def load_booking(client: BackendClient, booking_id: int, session: CheckoutSession) -> Booking:
    """Charge la réservation; les erreurs backend sont traduites dans la taxonomie checkout."""
    try:
        return await bookings_repo.fetch_booking(client, booking_id, fallback_role=session.role)
    except BackendError as exc:
        raise classify_backend_error(exc) from exc

# module travel_checkout.payments.service
async def start_checkout(client: BackendClient, booking_id: int, session: CheckoutSession, description: Optional[str] = None) -> str:
    """
    Réconcilie le montant depuis zéro puis crée l'intention de paiement.
    - final_payable <= 0: InvalidAmountError (paiement bloqué)
    Retour: URL de checkout du prestataire.
    """
    booking = await load_booking(client, booking_id, session)
    reconciliation = await reconcile(client, booking)
    amount = ensure_payable(reconciliation.totals)
    return await create_intent(client, booking.id, amount, payment_description(description))

async def ensure_booking_paid(client: BackendClient, booking: Booking) -> bool:
    """
    Passe la réservation à 'paid' si elle ne l'est pas déjà (paid/confirmed/completed/success).
    Best-effort: retourne True seulement si une écriture a eu lieu.
    """
    if booking.is_settled:
        logger.info("payments.service booking=%s already %s, status untouched", booking.id, booking.status_normalized)
        return False
    try:
        await bookings_repo.update_booking_status(client, booking.id, "paid")
    except BackendError:
        logger.warning("payments.service could not mark booking=%s paid", booking.id, exc_info=True)
        return False
    logger.info("payments.service booking=%s marked paid", booking.id)
    return True

async def record_loyalty_spend(
    client: BackendClient,
    booking: Booking,
    session: CheckoutSession,
    store: ProcessedStore,
    amount: float,
) -> Tuple[bool, Any]:
    """
    Ajoute le montant payé au cumul fidélité, une seule fois par réservation.
    - Garde: store.has_processed(booking.id) / store.mark_processed(booking.id)
    - Best-effort: toute erreur est loggée, jamais levée
    Retour: (cumul mis à jour ?, profil renvoyé par le backend)
    """
    if await store.has_processed(booking.id):
        logger.info("payments.service spend already recorded for booking=%s", booking.id)
        return False, None
    user_id = session.user_id or booking.user_id
    if not user_id or amount <= 0:
        return False, None
    try:
        profile = await users_repo.update_spent(client, user_id, amount)
    except BackendError:
        logger.warning("payments.service update-spent failed user=%s booking=%s", user_id, booking.id, exc_info=True)
        return False, None
    await store.mark_processed(booking.id)
    logger.info("payments.service spend recorded user=%s booking=%s amount=%s", user_id, booking.id, amount)
    return True, profile

def loyalty_from_profile(profile) -> Tuple[Optional[str], Optional[float]]:
    """
    Niveau et progression (0-100) depuis le profil renvoyé par update-spent.
    - TotalSpent présent: niveau et progression recalculés
    - Sinon Level (0..3): niveau seul, progression inconnue
    """
    if not isinstance(profile, dict):
        return None, None
    total_spent = pick_cased(profile, "totalSpent")
    if total_spent is not None:
        spent = to_float(total_spent)
        level = loyalty.calculate_level(spent)
        return level, loyalty.calculate_progress(spent, level)
    level = pick_cased(profile, "level")
    if level is not None:
        return loyalty.level_from_number(to_int(level)), None
    return None, None

def payment_received(poll: Optional[PollOutcome], payment: Optional[PaymentStatus]) -> bool:
    """
    Le paiement est-il réellement encaissé ?
    - Statut rechargé paid/completed: oui
    - Poller ALREADY_PAID (isPaid côté prestataire): oui
    - Poller UPDATED: mis à jour ne veut pas dire payé (annulé, échoué...);
      on suit le statut rechargé, ou celui du poller si le rechargement a échoué
    """
    if payment is not None and payment.is_paid:
        return True
    if poll is None:
        return False
    if poll.state == PollState.ALREADY_PAID:
        return True
    if poll.state == PollState.UPDATED and payment is None:
        return (poll.payment_status or "").lower() in PAID_STATUSES
    return False

async def confirm_payment_return(
    client: BackendClient,
    booking_id: int,
    session: CheckoutSession,
    store: ProcessedStore,
    order_code: Optional[str] = None,
    poller_factory: Optional[Callable[[], PaymentConfirmationPoller]] = None,
) -> ConfirmationResult:
    """
    Retour du prestataire: vérifie le paiement puis déclenche les effets de bord une seule fois.
    1) orderCode présent: PaymentConfirmationPoller (retries + hôte de repli)
    2) recharge la réservation et le statut de paiement
    3) si encaissé (voir payment_received): statut 'paid' (idempotent) + cumul fidélité (garde de session)
    L'épuisement des tentatives n'est pas une erreur: le résultat reflète l'état connu.
    """
    result = ConfirmationResult(booking_id=booking_id)
    if order_code:
        poller = poller_factory() if poller_factory else PaymentConfirmationPoller(client)
        result.poll = await poller.run(order_code)

    booking = await load_booking(client, booking_id, session)
    try:
        result.payment = await payments_repo.get_payment_status(client, booking_id)
    except BackendError:
        logger.warning("payments.service payment status reload failed booking=%s", booking_id, exc_info=True)

    result.confirmed = payment_received(result.poll, result.payment)
    if not result.confirmed:
        return result

    result.status_updated = await ensure_booking_paid(client, booking)
    amount = (result.payment.amount if result.payment else 0) or booking.total_amount
    result.spent_recorded, profile = await record_loyalty_spend(client, booking, session, store, amount)
    if result.spent_recorded:
        result.amount_spent = amount
        result.loyalty_level, result.loyalty_progress = loyalty_from_profile(profile)
    return result
