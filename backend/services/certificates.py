"""Certificate issuance for fluency level upgrades.

Certificate numbers look like ``DLA-2025-B1-000042``: one counter per
(year, level), bumped once per issued certificate. The counter bump and
the certificate row are written in the same store transaction, and the
counter lock is held until that transaction ends.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable

from config import settings
from errors import NotFound
from fluency_levels import FluencyLevel
from schemas.certificate import Certificate
from services.kv_store import KVStore, certificate_key, certificate_prefix, counter_key
from services.locks import KeyedLock

logger = logging.getLogger(__name__)

COUNTER_LOCKS = KeyedLock()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_certificate_number(year: int, level: FluencyLevel, counter: int, prefix: str | None = None) -> str:
    # Zero-padded to six digits; larger counters simply print wider.
    prefix = prefix or settings.CERTIFICATE_PREFIX
    return f"{prefix}-{year}-{FluencyLevel(level).value}-{counter:06d}"


class CertificateIssuer:
    def __init__(self, store: KVStore, clock: Callable[[], datetime] = _utcnow):
        self.store = store
        self.clock = clock

    async def issue(self, user_id: str, user_name: str | None, level: FluencyLevel, issued_by: str) -> Certificate:
        level = FluencyLevel(level)
        async with self.store.transaction():
            issued_at = self.clock()
            year = issued_at.year
            key = counter_key(year, level.value)
            await self.store.lock(COUNTER_LOCKS, key)
            counter = await self.store.incr(key)

            certificate = Certificate(
                id=str(uuid.uuid4()),
                user_id=user_id,
                user_name=user_name,
                level=level,
                issued_at=issued_at,
                issued_by=issued_by,
                certificate_number=format_certificate_number(year, level, counter),
            )
            await self.store.set(certificate_key(user_id, certificate.id), certificate.to_store())

        logger.info(
            "Issued certificate %s to user %s at level %s",
            certificate.certificate_number, user_id, level.value,
        )
        return certificate

    async def list_for_user(self, user_id: str) -> list[Certificate]:
        """All certificates of a user, oldest first."""
        raw = await self.store.get_by_prefix(certificate_prefix(user_id))
        certificates = [Certificate.model_validate(item) for item in raw]
        return sorted(certificates, key=lambda c: c.issued_at)

    async def get_one(self, user_id: str, certificate_id: str) -> Certificate:
        raw = await self.store.get(certificate_key(user_id, certificate_id))
        if raw is None:
            raise NotFound("Certificate not found")
        return Certificate.model_validate(raw)
