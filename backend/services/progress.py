"""Lesson progress and the per-learner progress summary.

Each lesson result is stored under ``progress:{user}:{class}``. Completing a
lesson also updates the learner's summary (streak, completed lessons) in the
same transaction, under the learner's progress lock.
"""
import logging
from datetime import datetime, timezone
from typing import Callable

from schemas.progress import LessonProgress, ProgressOverview, ProgressSummary
from services.kv_store import KVStore, progress_key, progress_prefix, progress_summary_key
from services.locks import KeyedLock

logger = logging.getLogger(__name__)

PROGRESS_LOCKS = KeyedLock()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def next_streak(streak: int, last_activity: datetime | None, now: datetime) -> int:
    """Streak after an activity at ``now``, counted in UTC calendar days."""
    if last_activity is None:
        return 1
    days = (now.astimezone(timezone.utc).date() - last_activity.astimezone(timezone.utc).date()).days
    if days == 0:
        return streak or 1
    if days == 1:
        return streak + 1
    if days > 1:
        return 1
    # Activity dated after ``now``: clock skew, leave the streak alone.
    return streak


class ProgressTracker:
    def __init__(self, store: KVStore, clock: Callable[[], datetime] = _utcnow):
        self.store = store
        self.clock = clock

    async def _load_summary(self, user_id: str, *, for_update: bool = False) -> ProgressSummary:
        raw = await self.store.get(progress_summary_key(user_id), for_update=for_update)
        return ProgressSummary.model_validate(raw if isinstance(raw, dict) else {})

    async def record(self, user_id: str, class_id: str, completed: bool, score: float | None = None) -> LessonProgress:
        async with self.store.transaction():
            await self.store.lock(PROGRESS_LOCKS, user_id)
            now = self.clock()
            lesson = LessonProgress(
                user_id=user_id,
                class_id=class_id,
                completed=completed,
                score=score,
                completed_at=now,
            )
            await self.store.set(progress_key(user_id, class_id), lesson.to_store())

            if completed:
                summary = await self._load_summary(user_id, for_update=True)
                summary.streak = next_streak(summary.streak, summary.last_activity_date, now)
                if class_id not in summary.completed_lessons:
                    summary.completed_lessons.append(class_id)
                summary.last_activity_date = now
                summary.updated_at = now
                await self.store.set(progress_summary_key(user_id), summary.to_store())

        logger.info("Saved progress for user %s on class %s (completed=%s)", user_id, class_id, completed)
        return lesson

    async def get_overview(self, user_id: str) -> ProgressOverview:
        """Summary totals plus every lesson result, oldest first."""
        lessons = [
            LessonProgress.model_validate(item)
            for item in await self.store.get_by_prefix(progress_prefix(user_id))
            if isinstance(item, dict)
        ]
        lessons.sort(key=lambda lesson: lesson.completed_at)
        summary = await self._load_summary(user_id)
        return ProgressOverview.model_validate(
            {**summary.to_store(), "progress": [lesson.to_store() for lesson in lessons]}
        )

    async def update_summary(self, user_id: str, changes: dict) -> ProgressSummary:
        async with self.store.transaction():
            await self.store.lock(PROGRESS_LOCKS, user_id)
            current = await self._load_summary(user_id, for_update=True)
            summary = ProgressSummary.model_validate(
                {**current.to_store(), **changes, "updatedAt": self.clock()}
            )
            await self.store.set(progress_summary_key(user_id), summary.to_store())
        return summary
