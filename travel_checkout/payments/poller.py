"""
Vérification du paiement après retour du prestataire (pas de webhook: polling).

Machine à états sur un orderCode:
    IDLE -> CHECKING(attempt, host) -> UPDATED | ALREADY_PAID | EXHAUSTED_RETRIES

- Au plus `max_attempts` vérifications par hôte, espacées de `retry_delay`
- Hôte principal épuisé: on recommence à zéro sur l'hôte de repli (si configuré)
- Erreur réseau (connexion, 502/503/504) sur l'hôte principal: bascule directe sur le repli
- 401/403: arrêt immédiat, pas de nouvelle tentative
- Tentatives strictement séquentielles; un poller ne s'exécute qu'une fois
L'annulation passe par asyncio (annuler la tâche interrompt l'attente en cours).
"""
import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Tuple

from pydantic import BaseModel, Field

from travel_checkout.config import (
    CONFIRMATION_MAX_ATTEMPTS,
    CONFIRMATION_NETWORK_FALLBACK_DELAY_SECONDS,
    CONFIRMATION_RETRY_DELAY_SECONDS,
)
from travel_checkout.infra.backend_client import (
    BackendAuthError,
    BackendClient,
    BackendConnectionError,
    BackendError,
)
from travel_checkout.payments import repository as payments_repo

logger = logging.getLogger(__name__)

NETWORK_STATUS_CODES = (502, 503, 504)

PRIMARY = "primary"
FALLBACK = "fallback"


class PollState(str, Enum):
    IDLE = "idle"
    CHECKING = "checking"
    UPDATED = "updated"
    ALREADY_PAID = "already_paid"
    EXHAUSTED_RETRIES = "exhausted_retries"


class PollOutcome(BaseModel):
    state: PollState
    order_code: str
    attempts: List[Tuple[str, int]] = Field(default_factory=list)
    payment_status: Optional[str] = None
    error: Optional[str] = None

    @property
    def confirmed(self) -> bool:
        return self.state in (PollState.UPDATED, PollState.ALREADY_PAID)


def is_network_error(exc: BackendError) -> bool:
    return isinstance(exc, BackendConnectionError) or exc.status_code in NETWORK_STATUS_CODES


class PaymentConfirmationPoller:
    def __init__(
        self,
        primary: BackendClient,
        fallback: Optional[BackendClient] = None,
        *,
        max_attempts: int = CONFIRMATION_MAX_ATTEMPTS,
        retry_delay: float = CONFIRMATION_RETRY_DELAY_SECONDS,
        network_fallback_delay: float = CONFIRMATION_NETWORK_FALLBACK_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.hosts = [(PRIMARY, primary)]
        if fallback is not None:
            self.hosts.append((FALLBACK, fallback))
        self.max_attempts = max(1, int(max_attempts))
        self.retry_delay = retry_delay
        self.network_fallback_delay = network_fallback_delay
        self.sleep = sleep
        self.state = PollState.IDLE
        self.host: Optional[str] = None
        self.attempt = 0
        self._outcome: Optional[PollOutcome] = None

    async def run(self, order_code: str) -> PollOutcome:
        """Exécute la vérification une seule fois; les appels suivants renvoient le même résultat."""
        if self._outcome is not None:
            return self._outcome
        outcome = PollOutcome(state=PollState.EXHAUSTED_RETRIES, order_code=order_code)
        for index, (host, client) in enumerate(self.hosts):
            has_next_host = index + 1 < len(self.hosts)
            finished = await self._poll_host(host, client, order_code, outcome, has_next_host)
            if finished:
                break
        self.state = outcome.state
        self._outcome = outcome
        if outcome.confirmed:
            logger.info("payments.poller order=%s state=%s attempts=%s", order_code, outcome.state.value, len(outcome.attempts))
        else:
            logger.warning("payments.poller order=%s gave up after %s attempts (%s)", order_code, len(outcome.attempts), outcome.error)
        return outcome

    async def _poll_host(self, host: str, client: BackendClient, order_code: str, outcome: PollOutcome, has_next_host: bool) -> bool:
        """Retourne True si l'état est terminal (confirmé ou arrêt définitif)."""
        self.host = host
        self.attempt = 0
        while self.attempt < self.max_attempts:
            self.attempt += 1
            self.state = PollState.CHECKING
            outcome.attempts.append((host, self.attempt))
            logger.info("payments.poller order=%s host=%s attempt=%s/%s", order_code, host, self.attempt, self.max_attempts)
            try:
                result = await payments_repo.check_payment_by_order_code(client, order_code)
            except BackendAuthError as exc:
                outcome.error = f"unauthorized ({exc.status_code})"
                return True
            except BackendError as exc:
                outcome.error = str(exc)
                logger.warning("payments.poller order=%s host=%s attempt=%s failed: %s", order_code, host, self.attempt, exc)
                if is_network_error(exc) and has_next_host:
                    await self.sleep(self.network_fallback_delay)
                    return False
            else:
                outcome.payment_status = result.get("status") or outcome.payment_status
                if result["was_updated"] or result["is_paid"]:
                    outcome.error = None
                if result["was_updated"]:
                    outcome.state = PollState.UPDATED
                    return True
                if result["is_paid"]:
                    outcome.state = PollState.ALREADY_PAID
                    return True
            if self.attempt < self.max_attempts or has_next_host:
                await self.sleep(self.retry_delay)
        return False
