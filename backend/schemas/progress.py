from datetime import datetime

from pydantic import ConfigDict, Field

from schemas.base import CamelModel, UtcDatetime


class LessonProgress(CamelModel):
    user_id: str
    class_id: str
    completed: bool = False
    score: float | None = None
    completed_at: datetime


class ProgressRecord(CamelModel):
    class_id: str = Field(min_length=1)
    completed: bool = False
    score: float | None = None


class ProgressSummary(CamelModel):
    """Per-learner totals. Keys written by older clients are kept as-is."""

    streak: int = 0
    last_activity_date: UtcDatetime | None = None
    completed_lessons: list[str] = []
    tests_completed: int = 0
    average_score: float = 0
    total_xp: int = Field(default=0, alias="totalXP")
    vocabulary: list[dict] = []
    updated_at: datetime | None = None

    model_config = ConfigDict(extra="allow")


class ProgressSummaryUpdate(CamelModel):
    streak: int | None = Field(default=None, ge=0)
    last_activity_date: UtcDatetime | None = None
    completed_lessons: list[str] | None = None
    tests_completed: int | None = Field(default=None, ge=0)
    average_score: float | None = None
    total_xp: int | None = Field(default=None, alias="totalXP", ge=0)
    vocabulary: list[dict] | None = None

    model_config = ConfigDict(extra="allow")


class ProgressOverview(ProgressSummary):
    progress: list[LessonProgress] = []
