"""
Agrégation des services additionnels (best-effort, ne bloque jamais le checkout).
"""
import logging
from typing import Iterable, Optional

from travel_checkout.bookings import repository as bookings_repo
from travel_checkout.bookings.models import AddOnsResult, ServiceSelection
from travel_checkout.bookings.normalize import normalize_combo_service
from travel_checkout.infra.backend_client import BackendClient

logger = logging.getLogger(__name__)

# module travel_checkout.checkout.addons
async def aggregate_add_ons(
    client: BackendClient,
    selections: Iterable[ServiceSelection],
    combo_id: Optional[int],
) -> AddOnsResult:
    """
    Associe chaque sélection (id, qty) au service du catalogue du combo.
    - Aucune sélection valide (ou pas de combo): résultat vide, aucun appel réseau
    - La quantité vient de la sélection, jamais du catalogue
    - Ids absents du catalogue: ignorés silencieusement
    - Échec du catalogue: résultat vide (loggé)
    """
    quantities = {s.service_id: s.quantity for s in selections if s.quantity > 0}
    if not quantities or not combo_id:
        return AddOnsResult()
    try:
        details = await bookings_repo.fetch_combo_details(client, combo_id)
    except Exception:
        logger.warning("checkout.addons catalog fetch failed combo_id=%s", combo_id, exc_info=True)
        return AddOnsResult()

    lines = []
    for detail in details:
        line = normalize_combo_service(detail)
        if line is None or line.id not in quantities:
            continue
        lines.append(line.model_copy(update={"quantity": quantities.pop(line.id)}))
    total = sum(line.amount for line in lines)
    return AddOnsResult(lines=lines, total=total)
