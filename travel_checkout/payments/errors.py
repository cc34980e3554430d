"""
Taxonomie d'erreurs du checkout, exprimée en HTTPException pour les handlers FastAPI.

- validation (montant, coupon): 400, bloque uniquement l'action en cours
- autorisation: 401, session détruite + redirection vers la page de connexion
- intégration/connectivité: 502/503, message actionnable, réservation inchangée
Les erreurs "best-effort" (catalogue, fidélité, polling) ne sont jamais levées: elles sont loggées.
"""
from typing import Optional
from fastapi import HTTPException

from travel_checkout.infra.backend_client import (
    BackendAuthError,
    BackendConnectionError,
    BackendError,
    BackendNotFoundError,
    error_message,
)

DNS_MARKERS = ("name is valid, but no data", "dns", "resolve", "no such host")

DNS_DIAGNOSTIC = (
    "Impossible de joindre le prestataire de paiement (erreur DNS). Vérifiez:\n"
    "1. la connexion internet du serveur\n"
    "2. le serveur DNS (essayer 8.8.8.8 ou 1.1.1.1)\n"
    "3. un pare-feu ou antivirus bloquant la connexion\n"
    "4. un proxy ou VPN\n"
    "Si le problème persiste, contactez le support."
)
ACCOUNT_BLOCKED_MESSAGE = "Votre compte a été bloqué. Veuillez contacter le support."
CONNECTIVITY_MESSAGE = (
    "Impossible de contacter le serveur. Vérifiez que le backend est démarré "
    "et votre connexion réseau, puis réessayez."
)


class CheckoutError(HTTPException):
    default_status = 400
    default_detail = "Erreur de paiement"

    def __init__(self, detail: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(status_code=status_code or self.default_status, detail=detail or self.default_detail)


class InvalidAmountError(CheckoutError):
    default_detail = "Le montant à payer doit être supérieur à 0"


class PaymentValidationError(CheckoutError):
    default_detail = "Données invalides. Veuillez vérifier votre saisie."


class CouponRejected(CheckoutError):
    default_detail = "Code promo invalide"


class ReauthenticationRequired(CheckoutError):
    default_status = 401
    default_detail = "Vous n'avez pas les droits pour payer. Veuillez vous reconnecter."


class BookingNotFound(CheckoutError):
    default_status = 404
    default_detail = "Réservation introuvable. Veuillez vérifier."


class IntegrationError(CheckoutError):
    default_status = 502
    default_detail = "Erreur du serveur. Veuillez réessayer plus tard."


class ConnectivityError(CheckoutError):
    default_status = 503
    default_detail = CONNECTIVITY_MESSAGE


def is_dns_failure(payload) -> bool:
    text = ""
    if isinstance(payload, dict):
        text = str(payload.get("error") or payload.get("Error") or "")
    return any(marker in text.lower() for marker in DNS_MARKERS)

def integration_detail(payload) -> str:
    """Message 5xx: diagnostic DNS si détecté, sinon message du backend."""
    if is_dns_failure(payload):
        return DNS_DIAGNOSTIC
    if isinstance(payload, dict):
        for key in ("message", "Message", "error", "Error", "innerException"):
            if payload.get(key):
                return str(payload[key])
    return IntegrationError.default_detail

def classify_backend_error(exc: BackendError) -> CheckoutError:
    """
    Traduit une BackendError en erreur de la taxonomie (selon le statut HTTP).
    - 401/403 -> ReauthenticationRequired (403 si le compte est bloqué)
    - 404 -> BookingNotFound
    - 400 -> PaymentValidationError (message serveur)
    - 5xx -> IntegrationError (diagnostic DNS si besoin)
    - pas de réponse -> ConnectivityError
    """
    if isinstance(exc, BackendAuthError):
        if exc.banned:
            return ReauthenticationRequired(ACCOUNT_BLOCKED_MESSAGE, status_code=403)
        return ReauthenticationRequired()
    if isinstance(exc, BackendNotFoundError):
        return BookingNotFound()
    if isinstance(exc, BackendConnectionError):
        return ConnectivityError()
    if exc.status_code == 400:
        return PaymentValidationError(error_message(exc.payload) or None)
    if exc.status_code and exc.status_code >= 500:
        return IntegrationError(integration_detail(exc.payload))
    return IntegrationError(error_message(exc.payload) or None, status_code=502)
