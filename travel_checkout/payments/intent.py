"""
Création de l'intention de paiement auprès du prestataire (via le backend).
"""
import logging
from typing import Any, Optional

from travel_checkout.config import PAYMENT_DESCRIPTION, PAYMENT_DESCRIPTION_MAX_LENGTH
from travel_checkout.infra.backend_client import BackendClient, BackendError
from travel_checkout.payments import repository as payments_repo
from travel_checkout.payments.errors import (
    IntegrationError,
    InvalidAmountError,
    PaymentValidationError,
    classify_backend_error,
)

logger = logging.getLogger(__name__)

# Chemins candidats pour l'URL de checkout, dans l'ordre de priorité
CHECKOUT_URL_PATHS = (
    ("CheckoutUrl",),
    ("checkoutUrl",),
    ("data", "checkoutUrl"),
    ("data", "CheckoutUrl"),
)


def payment_description(text: Optional[str] = None) -> str:
    """Description tronquée à la limite du prestataire (25 caractères)."""
    return (text or PAYMENT_DESCRIPTION).strip()[:PAYMENT_DESCRIPTION_MAX_LENGTH]

def extract_checkout_url(payload: Any) -> Optional[str]:
    for path in CHECKOUT_URL_PATHS:
        node = payload
        for key in path:
            node = node.get(key) if isinstance(node, dict) else None
        if isinstance(node, str) and node.strip():
            return node.strip()
    return None

# module travel_checkout.payments.intent
async def create_intent(client: BackendClient, booking_id: int, amount: float, description: str) -> str:
    """
    Demande une session de checkout pour le montant réconcilié et retourne l'URL de redirection.
    - amount <= 0: InvalidAmountError, aucun appel réseau
    - description > 25 caractères: PaymentValidationError (l'appelant doit tronquer)
    - Erreurs backend classées par statut (voir payments.errors.classify_backend_error)
    """
    if not amount or amount <= 0:
        raise InvalidAmountError()
    if not description or len(description) > PAYMENT_DESCRIPTION_MAX_LENGTH:
        raise PaymentValidationError(
            f"La description doit contenir entre 1 et {PAYMENT_DESCRIPTION_MAX_LENGTH} caractères"
        )
    try:
        payload = await payments_repo.post_create_intent(client, booking_id, round(amount, 2), description)
    except BackendError as exc:
        logger.warning("payments.intent create-intent failed booking=%s status=%s", booking_id, exc.status_code)
        raise classify_backend_error(exc) from exc

    checkout_url = extract_checkout_url(payload)
    if not checkout_url:
        logger.error("payments.intent no checkout url in response booking=%s payload=%s", booking_id, payload)
        raise IntegrationError("Aucune URL de paiement reçue du serveur. Veuillez réessayer plus tard.")
    logger.info("payments.intent created booking=%s amount=%s", booking_id, amount)
    return checkout_url
