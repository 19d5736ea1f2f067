"""FastAPI dependencies shared by the routers."""
from datetime import datetime, timezone
from typing import Callable

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from errors import Unauthorized
from services.auth import Caller, IdentityProvider, extract_bearer_token, get_identity_provider
from services.certificates import CertificateIssuer
from services.fluency import FluencyLevelManager
from services.kv_store import KVStore
from services.library import GrammarLibrary, VocabularyLibrary
from services.progress import ProgressTracker
from services.study import MistakeBank, ReviewDeck


def get_clock() -> Callable[[], datetime]:
    return lambda: datetime.now(timezone.utc)


async def get_store(db: AsyncSession = Depends(get_db)) -> KVStore:
    return KVStore(db)


async def get_certificate_issuer(
    store: KVStore = Depends(get_store),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> CertificateIssuer:
    return CertificateIssuer(store, clock)


async def get_fluency_manager(
    store: KVStore = Depends(get_store),
    issuer: CertificateIssuer = Depends(get_certificate_issuer),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> FluencyLevelManager:
    return FluencyLevelManager(store, issuer, clock)


async def get_progress_tracker(
    store: KVStore = Depends(get_store),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> ProgressTracker:
    return ProgressTracker(store, clock)


async def get_mistake_bank(
    store: KVStore = Depends(get_store),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> MistakeBank:
    return MistakeBank(store, clock)


async def get_review_deck(
    store: KVStore = Depends(get_store),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> ReviewDeck:
    return ReviewDeck(store, clock)


async def get_vocabulary_library(
    store: KVStore = Depends(get_store),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> VocabularyLibrary:
    return VocabularyLibrary(store, clock)


async def get_grammar_library(
    store: KVStore = Depends(get_store),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> GrammarLibrary:
    return GrammarLibrary(store, clock)


async def get_current_caller(
    authorization: str | None = Header(default=None),
    provider: IdentityProvider = Depends(get_identity_provider),
    manager: FluencyLevelManager = Depends(get_fluency_manager),
) -> Caller:
    token = extract_bearer_token(authorization)
    if not token:
        raise Unauthorized()
    identity = await provider.resolve_token(token)
    if identity is None:
        raise Unauthorized()
    return await manager.get_caller(identity.user_id, identity.role, identity.name)


async def get_current_teacher(
    caller: Caller = Depends(get_current_caller),
    manager: FluencyLevelManager = Depends(get_fluency_manager),
) -> Caller:
    # Teacher rights come from the stored profile, never from token metadata.
    return await manager.require_admin(caller.user_id)
