"""Shared teaching content: the vocabulary list and grammar rules.

Anyone may read the library; only teachers may change it.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable

from errors import NotFound
from schemas.base import CamelModel
from schemas.library import GrammarRule, VocabularyItem
from services.auth import TEACHER_ROLE, Caller, require_role
from services.kv_store import GRAMMAR_NAMESPACE, VOCABULARY_NAMESPACE, KVStore, make_key, make_prefix
from services.locks import KeyedLock

logger = logging.getLogger(__name__)

LIBRARY_LOCKS = KeyedLock()

PROTECTED_FIELDS = frozenset({"id", "createdBy", "created_by", "createdAt", "created_at"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _unprotected(data: dict) -> dict:
    return {k: v for k, v in data.items() if k not in PROTECTED_FIELDS}


class ContentLibrary:
    namespace: str
    model: type[CamelModel]
    not_found_message = "Item not found"

    def __init__(self, store: KVStore, clock: Callable[[], datetime] = _utcnow):
        self.store = store
        self.clock = clock

    def _key(self, item_id: str) -> str:
        return make_key(self.namespace, item_id)

    async def list_all(self) -> list:
        items = [
            self.model.model_validate(raw)
            for raw in await self.store.get_by_prefix(make_prefix(self.namespace))
            if isinstance(raw, dict)
        ]
        return sorted(items, key=lambda item: item.created_at)

    async def create(self, caller: Caller, data: dict):
        require_role(caller, TEACHER_ROLE)
        item_id = data.get("id") or str(uuid.uuid4())
        key = self._key(item_id)
        async with self.store.transaction():
            await self.store.lock(LIBRARY_LOCKS, key)
            item = self.model.model_validate(
                {
                    **_unprotected(data),
                    "id": item_id,
                    "createdBy": caller.user_id,
                    "createdAt": self.clock(),
                }
            )
            await self.store.set(key, item.to_store())
        logger.info("Teacher %s added %s %s", caller.user_id, self.model.__name__, item_id)
        return item

    async def update(self, caller: Caller, item_id: str, changes: dict):
        require_role(caller, TEACHER_ROLE)
        key = self._key(item_id)
        async with self.store.transaction():
            await self.store.lock(LIBRARY_LOCKS, key)
            existing = await self.store.get(key, for_update=True)
            if not isinstance(existing, dict):
                raise NotFound(self.not_found_message)
            item = self.model.model_validate(
                {**existing, **_unprotected(changes), "updatedAt": self.clock()}
            )
            await self.store.set(key, item.to_store())
        return item

    async def delete(self, caller: Caller, item_id: str) -> None:
        require_role(caller, TEACHER_ROLE)
        key = self._key(item_id)
        async with self.store.transaction():
            await self.store.lock(LIBRARY_LOCKS, key)
            if await self.store.get(key) is None:
                raise NotFound(self.not_found_message)
            await self.store.delete(key)
        logger.info("Teacher %s removed %s %s", caller.user_id, self.model.__name__, item_id)


class VocabularyLibrary(ContentLibrary):
    namespace = VOCABULARY_NAMESPACE
    model = VocabularyItem
    not_found_message = "Vocabulary not found"


class GrammarLibrary(ContentLibrary):
    namespace = GRAMMAR_NAMESPACE
    model = GrammarRule
    not_found_message = "Grammar rule not found"
