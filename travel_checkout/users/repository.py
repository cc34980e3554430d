"""Accès backend pour le profil utilisateur (cumul des dépenses / niveau de fidélité)."""
from typing import Any

from travel_checkout.infra.backend_client import BackendClient

# module travel_checkout.users.repository
async def update_spent(client: BackendClient, user_id: int, amount_spent: float) -> Any:
    """
    PUT /User/update-spent/{userId}?amountSpent=...
    Le backend cumule TotalSpent et recalcule le niveau; la réponse peut contenir le profil mis à jour.
    """
    return await client.put(f"/User/update-spent/{int(user_id)}", params={"amountSpent": amount_spent})
