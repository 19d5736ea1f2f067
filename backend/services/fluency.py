"""Fluency level state machine.

Learners sit on the CEFR ladder A1 -> C1 and an admin (teacher) moves them
one rung at a time, up or down. Each accepted change appends an entry to
the learner's history; upgrades also mint a certificate.

Writes for a learner run under that learner's profile lock and inside one
store transaction: history entry first, then the profile, then the
certificate. A failure anywhere rolls the whole change back.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from errors import DataIntegrityError, InvalidLevel, InvalidTransition, NotFound
from fluency_levels import DEFAULT_LEVEL, FluencyLevel, format_level, get_metadata, level_or_default, parse_level
from schemas.fluency import FluencyHistoryEntry, FluencyRead, FluencyUpdateResult, MigrationResult
from schemas.user import UserProfile, UserSummary
from services.auth import STUDENT_ROLE, TEACHER_ROLE, Caller, require_role
from services.certificates import CertificateIssuer
from services.kv_store import USER_PREFIX, KVStore, history_key, history_prefix, user_id_from_key, user_key
from services.locks import KeyedLock

logger = logging.getLogger(__name__)

PROFILE_LOCKS = KeyedLock()
SYSTEM_ACTOR = "system"

INITIAL_REASON = "Initial assignment"
LAZY_MIGRATION_REASON = "Migration - Initial assignment"
BULK_MIGRATION_REASON = "Bulk migration - Initial assignment"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FluencyLevelManager:
    def __init__(
        self,
        store: KVStore,
        issuer: CertificateIssuer | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.clock = clock
        self.issuer = issuer or CertificateIssuer(store, clock)

    # -- profiles -----------------------------------------------------------

    async def _load_profile(self, user_id: str, *, for_update: bool = False) -> dict | None:
        raw = await self.store.get(user_key(user_id), for_update=for_update)
        if not isinstance(raw, dict):
            return None
        profile = dict(raw)
        # Older records may lack the id; the key is authoritative.
        if not profile.get("id"):
            profile["id"] = user_id
        return profile

    @staticmethod
    def _stored_level(profile: dict) -> FluencyLevel:
        try:
            return level_or_default(profile.get("fluencyLevel"))
        except InvalidLevel:
            logger.error("User %s has a corrupt fluency level %r", profile["id"], profile.get("fluencyLevel"))
            raise DataIntegrityError(f"Stored fluency level for user {profile['id']} is invalid") from None

    async def _require_profile(self, user_id: str, *, for_update: bool = False) -> dict:
        profile = await self._load_profile(user_id, for_update=for_update)
        if profile is None:
            raise NotFound("User not found")
        return profile

    async def get_caller(self, user_id: str, fallback_role: str | None = STUDENT_ROLE, fallback_name: str | None = None) -> Caller:
        profile = await self._load_profile(user_id)
        if profile is None:
            return Caller(user_id=user_id, role=fallback_role, name=fallback_name)
        return Caller(
            user_id=user_id,
            role=profile.get("role") or fallback_role,
            name=profile.get("name") or fallback_name,
        )

    async def require_admin(self, admin_id: str) -> Caller:
        # Privileges come from the stored profile only.
        return require_role(await self.get_caller(admin_id, fallback_role=None), TEACHER_ROLE)

    async def get_profile(self, user_id: str, *, migrate: bool = False) -> UserProfile:
        profile = await self._require_profile(user_id)
        if migrate and not profile.get("fluencyLevel"):
            return await self.initialize(user_id, reason=LAZY_MIGRATION_REASON)
        return UserProfile.model_validate(profile)

    async def list_profiles(self, admin_id: str) -> list[UserSummary]:
        await self.require_admin(admin_id)
        users = []
        for key, raw in await self.store.get_entries_by_prefix(USER_PREFIX):
            user_id = user_id_from_key(key)
            if user_id is None or not isinstance(raw, dict) or not raw.get("email"):
                continue
            profile = {**raw, "id": raw.get("id") or user_id}
            users.append(
                UserSummary(
                    id=profile["id"],
                    email=profile.get("email"),
                    name=profile.get("name"),
                    role=profile.get("role") or STUDENT_ROLE,
                    fluency_level=self._stored_level(profile),
                    fluency_level_updated_at=profile.get("fluencyLevelUpdatedAt"),
                )
            )
        return sorted(users, key=lambda u: ((u.name or "").lower(), u.id))

    # -- history ------------------------------------------------------------

    async def _append_history(
        self,
        user_id: str,
        previous_level: FluencyLevel | None,
        new_level: FluencyLevel,
        changed_by: str,
        changed_by_name: str | None = None,
        reason: str | None = None,
    ) -> dict:
        changed_at = self.clock()
        while True:
            record = FluencyHistoryEntry(
                user_id=user_id,
                previous_level=previous_level,
                new_level=new_level,
                changed_at=changed_at,
                changed_by=changed_by,
                changed_by_name=changed_by_name,
                reason=reason,
            ).to_store()
            key = history_key(user_id, record["changedAt"])
            if await self.store.get(key) is None:
                break
            # Same-instant writes for one learner must not share a key.
            changed_at += timedelta(microseconds=1)
        await self.store.set(key, record)
        return record

    async def get_history(self, user_id: str) -> list[FluencyHistoryEntry]:
        """All level changes for a learner, most recent first."""
        await self._require_profile(user_id)
        raw = await self.store.get_by_prefix(history_prefix(user_id))
        entries = [
            FluencyHistoryEntry.model_validate(item)
            for item in raw
            if isinstance(item, dict) and item.get("userId") == user_id
        ]
        return sorted(entries, key=lambda e: e.changed_at, reverse=True)

    # -- initialization -----------------------------------------------------

    async def _initialize_locked(
        self,
        user_id: str,
        changed_by: str,
        changed_by_name: str | None,
        reason: str,
    ) -> tuple[dict, bool]:
        """Assign A1 to a profile without a level. Caller holds the profile lock."""
        profile = await self._require_profile(user_id, for_update=True)
        if profile.get("fluencyLevel"):
            return profile, False

        record = await self._append_history(
            user_id, None, DEFAULT_LEVEL, changed_by, changed_by_name, reason
        )
        profile.update(
            fluencyLevel=DEFAULT_LEVEL.value,
            fluencyLevelUpdatedAt=record["changedAt"],
            fluencyLevelUpdatedBy=changed_by,
        )
        await self.store.set(user_key(user_id), profile)
        return profile, True

    async def initialize(
        self,
        user_id: str,
        changed_by: str = SYSTEM_ACTOR,
        changed_by_name: str | None = None,
        reason: str = INITIAL_REASON,
    ) -> UserProfile:
        async with self.store.transaction():
            await self.store.lock(PROFILE_LOCKS, user_id)
            profile, created = await self._initialize_locked(user_id, changed_by, changed_by_name, reason)
        if created:
            logger.info("Assigned initial fluency level %s to user %s", DEFAULT_LEVEL.value, user_id)
        return UserProfile.model_validate(profile)

    async def register(self, user_id: str, email: str | None, name: str | None, role: str) -> UserProfile:
        """Store a new account's profile and give it its initial level."""
        async with self.store.transaction():
            await self.store.lock(PROFILE_LOCKS, user_id)
            if await self._load_profile(user_id, for_update=True) is None:
                await self.store.set(
                    user_key(user_id),
                    {"id": user_id, "email": email, "name": name, "role": role},
                )
            profile, _ = await self._initialize_locked(user_id, SYSTEM_ACTOR, None, INITIAL_REASON)
        logger.info("Registered %s %s at level %s", role, user_id, profile["fluencyLevel"])
        return UserProfile.model_validate(profile)

    async def bulk_migrate(self, admin_id: str) -> MigrationResult:
        """Give every profile that predates fluency tracking level A1. Safe to re-run."""
        admin = await self.require_admin(admin_id)
        migrated = skipped = 0

        for key, raw in await self.store.get_entries_by_prefix(USER_PREFIX):
            user_id = user_id_from_key(key)
            if user_id is None or not isinstance(raw, dict):
                continue
            if raw.get("fluencyLevel"):
                skipped += 1
                continue
            async with self.store.transaction():
                await self.store.lock(PROFILE_LOCKS, user_id)
                _, created = await self._initialize_locked(
                    user_id, admin.user_id, admin.name, BULK_MIGRATION_REASON
                )
            if created:
                migrated += 1
                logger.info("Migrated user %s to %s fluency level", user_id, DEFAULT_LEVEL.value)
            else:
                skipped += 1

        logger.info("Bulk fluency migration by %s: migrated=%d skipped=%d", admin.user_id, migrated, skipped)
        return MigrationResult(
            migrated_count=migrated,
            skipped_count=skipped,
            message=f"Migrated {migrated} users, skipped {skipped} users with existing fluency levels",
        )

    # -- level reads and changes --------------------------------------------

    async def get_level(self, user_id: str) -> FluencyRead:
        profile = await self._require_profile(user_id)
        level = self._stored_level(profile)
        return FluencyRead(
            user_id=profile["id"],
            fluency_level=level,
            fluency_level_updated_at=profile.get("fluencyLevelUpdatedAt"),
            fluency_level_updated_by=profile.get("fluencyLevelUpdatedBy"),
            metadata=get_metadata(level),
        )

    async def set_level(self, admin_id: str, user_id: str, requested_level) -> FluencyUpdateResult:
        admin = await self.require_admin(admin_id)

        async with self.store.transaction():
            await self.store.lock(PROFILE_LOCKS, user_id)
            profile = await self._require_profile(user_id, for_update=True)
            new_level = parse_level(requested_level)
            current_level = self._stored_level(profile)
            if not current_level.is_adjacent(new_level):
                raise InvalidTransition()

            record = await self._append_history(
                user_id, current_level, new_level, admin.user_id, admin.name
            )
            profile.update(
                fluencyLevel=new_level.value,
                fluencyLevelUpdatedAt=record["changedAt"],
                fluencyLevelUpdatedBy=admin.user_id,
            )
            await self.store.set(user_key(user_id), profile)

            certificate = None
            if current_level.is_upgrade_to(new_level):
                certificate = await self.issuer.issue(
                    user_id, profile.get("name"), new_level, admin.user_id
                )

        logger.info(
            "Admin %s updated user %s from %s to %s",
            admin.user_id, user_id, format_level(current_level), format_level(new_level),
        )
        return FluencyUpdateResult(
            user_id=user_id,
            previous_level=current_level,
            new_level=new_level,
            fluency_level_updated_at=record["changedAt"],
            fluency_level_updated_by=admin.user_id,
            metadata=get_metadata(new_level),
            certificate=certificate,
        )
