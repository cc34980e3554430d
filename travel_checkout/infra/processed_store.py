"""
Garde d'idempotence "réservation déjà traitée" (cumul fidélité).

- SessionProcessedStore: liste conservée dans la session signée du navigateur
  (survit à un rafraîchissement de page, propre à une session)
- RedisProcessedStore: set Redis par utilisateur (multi-instances)
Les deux sont en lecture puis ajout, sans compare-and-set.
"""
from typing import Any, MutableMapping, Protocol

SESSION_KEY = "processed_bookings"


class ProcessedStore(Protocol):
    async def has_processed(self, booking_id: int) -> bool: ...

    async def mark_processed(self, booking_id: int) -> None: ...


class SessionProcessedStore:
    def __init__(self, session: MutableMapping[str, Any], key: str = SESSION_KEY):
        self.session = session
        self.key = key

    async def has_processed(self, booking_id: int) -> bool:
        return int(booking_id) in [int(x) for x in self.session.get(self.key) or []]

    async def mark_processed(self, booking_id: int) -> None:
        processed = list(self.session.get(self.key) or [])
        if int(booking_id) not in processed:
            processed.append(int(booking_id))
        # Réassigner pour que Starlette sérialise la session modifiée
        self.session[self.key] = processed


class RedisProcessedStore:
    def __init__(self, redis: Any, namespace: str):
        self.redis = redis
        self.key = f"checkout:processed:{namespace}"

    async def has_processed(self, booking_id: int) -> bool:
        return bool(await self.redis.sismember(self.key, str(int(booking_id))))

    async def mark_processed(self, booking_id: int) -> None:
        await self.redis.sadd(self.key, str(int(booking_id)))
