"""Key-value store over the ``kv_store`` table.

Mirrors the get / set / delete / prefix-scan contract the app was built
against. Ordering and filtering of scan results is up to the caller.
Writes are staged on the session and only become visible on commit, so
compound operations run inside ``transaction()``.
"""
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any
from urllib.parse import quote, unquote

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from models.kv import KVEntry
from services.locks import KeyedLock


def _part(value) -> str:
    # ':' inside a component would let one key shape alias another.
    return quote(str(value), safe="")


def make_key(namespace: str, *parts) -> str:
    return ":".join([namespace, *(_part(p) for p in parts)])


def make_prefix(namespace: str, *parts) -> str:
    return make_key(namespace, *parts) + ":"


def user_key(user_id: str) -> str:
    return make_key("user", user_id)


def history_key(user_id: str, changed_at: str) -> str:
    return make_key("fluency-history", user_id, changed_at)


def history_prefix(user_id: str) -> str:
    return make_prefix("fluency-history", user_id)


def certificate_key(user_id: str, certificate_id: str) -> str:
    return make_key("certificate", user_id, certificate_id)


def certificate_prefix(user_id: str) -> str:
    return make_prefix("certificate", user_id)


def counter_key(year: int, level: str) -> str:
    return make_key("certificate-counter", year, level)


def progress_key(user_id: str, class_id: str) -> str:
    return make_key("progress", user_id, class_id)


def progress_prefix(user_id: str) -> str:
    return make_prefix("progress", user_id)


def progress_summary_key(user_id: str) -> str:
    return make_key("user-progress", user_id)


def mistake_key(user_id: str, mistake_id: str) -> str:
    return make_key("mistake", user_id, mistake_id)


def mistake_prefix(user_id: str) -> str:
    return make_prefix("mistake", user_id)


def card_key(user_id: str, card_id: str) -> str:
    return make_key("srs-card", user_id, card_id)


def card_prefix(user_id: str) -> str:
    return make_prefix("srs-card", user_id)


USER_PREFIX = "user:"
VOCABULARY_NAMESPACE = "vocab"
GRAMMAR_NAMESPACE = "grammar"


def user_id_from_key(key: str) -> str | None:
    """Inverse of ``user_key``; ``None`` for keys of any other shape."""
    if not key.startswith(USER_PREFIX):
        return None
    part = key[len(USER_PREFIX):]
    if not part or ":" in part:
        return None
    return unquote(part)


class KVStore:
    def __init__(self, session: AsyncSession):
        self.session = session
        self._held: AsyncExitStack | None = None

    @property
    def in_transaction(self) -> bool:
        return self._held is not None

    async def get(self, key: str, *, for_update: bool = False) -> Any:
        if for_update:
            entry = await self.session.get(
                KVEntry, key, with_for_update=True, populate_existing=True
            )
        else:
            entry = await self.session.get(KVEntry, key)
        return entry.value if entry is not None else None

    async def set(self, key: str, value: Any) -> None:
        entry = await self.session.get(KVEntry, key)
        if entry is None:
            self.session.add(KVEntry(key=key, value=value))
        else:
            entry.value = value
            flag_modified(entry, "value")
        await self.session.flush()

    async def delete(self, key: str) -> None:
        entry = await self.session.get(KVEntry, key)
        if entry is not None:
            await self.session.delete(entry)
            await self.session.flush()

    async def get_entries_by_prefix(self, prefix: str) -> list[tuple[str, Any]]:
        result = await self.session.execute(
            select(KVEntry.key, KVEntry.value).where(KVEntry.key.startswith(prefix, autoescape=True))
        )
        # LIKE is case-insensitive on some backends; re-check the exact prefix.
        return [(row.key, row.value) for row in result if row.key.startswith(prefix)]

    async def get_by_prefix(self, prefix: str) -> list[Any]:
        return [value for _, value in await self.get_entries_by_prefix(prefix)]

    async def incr(self, key: str) -> int:
        """Bump an integer counter and return the new value.

        Callers must hold the counter's lock for the rest of the transaction.
        """
        if not self.in_transaction:
            raise RuntimeError("incr() needs an open transaction")
        current = await self.get(key, for_update=True) or 0
        value = int(current) + 1
        await self.set(key, value)
        return value

    async def lock(self, locks: KeyedLock, key: str) -> None:
        """Take ``key`` in ``locks`` until the current transaction ends."""
        if self._held is None:
            raise RuntimeError("lock() needs an open transaction")
        await self._held.enter_async_context(locks.hold(key))

    @asynccontextmanager
    async def transaction(self):
        if self._held is not None:
            yield self
            return
        async with AsyncExitStack() as held:
            self._held = held
            try:
                yield self
                await self.session.commit()
            except BaseException:
                await self.session.rollback()
                raise
            finally:
                self._held = None
