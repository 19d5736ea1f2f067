"""Learner-owned study records: the mistake bank and spaced-repetition cards.

Records live under their owner's key prefix (``mistake:{user}:{id}``,
``srs-card:{user}:{id}``), so every lookup is scoped to the caller and one
learner can never read or change another learner's records.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable

from errors import NotFound
from schemas.base import CamelModel
from schemas.study import Mistake, ReviewCard
from services.kv_store import KVStore, card_key, card_prefix, mistake_key, mistake_prefix
from services.locks import KeyedLock

logger = logging.getLogger(__name__)

RECORD_LOCKS = KeyedLock()

# Ownership and identity are set by the server, never by the request body.
PROTECTED_FIELDS = frozenset({"id", "userId", "user_id"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _unprotected(data: dict) -> dict:
    return {k: v for k, v in data.items() if k not in PROTECTED_FIELDS}


class LearnerRecords:
    model: type[CamelModel]
    not_found_message = "Record not found"

    def __init__(self, store: KVStore, clock: Callable[[], datetime] = _utcnow):
        self.store = store
        self.clock = clock

    def _key(self, user_id: str, record_id: str) -> str:
        raise NotImplementedError

    def _prefix(self, user_id: str) -> str:
        raise NotImplementedError

    def _creation_fields(self, data: dict, now: datetime) -> dict:
        return {}

    @staticmethod
    def _sort_key(record):
        raise NotImplementedError

    async def list_for_user(self, user_id: str) -> list:
        records = [
            self.model.model_validate(raw)
            for raw in await self.store.get_by_prefix(self._prefix(user_id))
            if isinstance(raw, dict)
        ]
        return sorted(records, key=self._sort_key)

    async def create(self, user_id: str, data: dict):
        """Store a new record; a client-chosen id that already exists is overwritten."""
        record_id = data.get("id") or str(uuid.uuid4())
        key = self._key(user_id, record_id)
        async with self.store.transaction():
            await self.store.lock(RECORD_LOCKS, key)
            now = self.clock()
            record = self.model.model_validate(
                {
                    **_unprotected(data),
                    **self._creation_fields(data, now),
                    "id": record_id,
                    "userId": user_id,
                }
            )
            await self.store.set(key, record.to_store())
        logger.info("Created %s %s for user %s", self.model.__name__, record_id, user_id)
        return record

    async def update(self, user_id: str, record_id: str, changes: dict):
        key = self._key(user_id, record_id)
        async with self.store.transaction():
            await self.store.lock(RECORD_LOCKS, key)
            existing = await self.store.get(key, for_update=True)
            if not isinstance(existing, dict):
                raise NotFound(self.not_found_message)
            record = self.model.model_validate(
                {**existing, **_unprotected(changes), "updatedAt": self.clock()}
            )
            await self.store.set(key, record.to_store())
        return record

    async def delete(self, user_id: str, record_id: str) -> None:
        key = self._key(user_id, record_id)
        async with self.store.transaction():
            await self.store.lock(RECORD_LOCKS, key)
            if await self.store.get(key) is None:
                raise NotFound(self.not_found_message)
            await self.store.delete(key)
        logger.info("Deleted %s %s for user %s", self.model.__name__, record_id, user_id)


class MistakeBank(LearnerRecords):
    model = Mistake
    not_found_message = "Mistake not found"

    def _key(self, user_id: str, record_id: str) -> str:
        return mistake_key(user_id, record_id)

    def _prefix(self, user_id: str) -> str:
        return mistake_prefix(user_id)

    def _creation_fields(self, data: dict, now: datetime) -> dict:
        return {"timestamp": now}

    @staticmethod
    def _sort_key(record: Mistake):
        return record.timestamp


class ReviewDeck(LearnerRecords):
    """Spaced-repetition cards, soonest review first."""

    model = ReviewCard
    not_found_message = "Card not found"

    def _key(self, user_id: str, record_id: str) -> str:
        return card_key(user_id, record_id)

    def _prefix(self, user_id: str) -> str:
        return card_prefix(user_id)

    def _creation_fields(self, data: dict, now: datetime) -> dict:
        return {"createdAt": now, "nextReview": data.get("nextReview") or now}

    @staticmethod
    def _sort_key(record: ReviewCard):
        return record.next_review

    async def due(self, user_id: str) -> list[ReviewCard]:
        now = self.clock()
        return [card for card in await self.list_for_user(user_id) if card.next_review <= now]
