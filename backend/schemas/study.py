from datetime import datetime

from pydantic import ConfigDict, Field

from schemas.base import CamelModel, UtcDatetime


class Mistake(CamelModel):
    id: str
    user_id: str
    word: str | None = None
    user_answer: str | None = None
    correct_answer: str | None = None
    category: str | None = None
    lesson_title: str | None = None
    timestamp: datetime
    reviewed_count: int = 0
    mastered: bool = False
    updated_at: datetime | None = None

    model_config = ConfigDict(extra="allow")


class MistakeCreate(CamelModel):
    id: str | None = Field(default=None, min_length=1)
    word: str | None = None
    user_answer: str | None = None
    correct_answer: str | None = None
    category: str | None = None
    lesson_title: str | None = None
    reviewed_count: int = Field(default=0, ge=0)
    mastered: bool = False

    model_config = ConfigDict(extra="allow")


class MistakeUpdate(CamelModel):
    word: str | None = None
    user_answer: str | None = None
    correct_answer: str | None = None
    category: str | None = None
    lesson_title: str | None = None
    reviewed_count: int | None = Field(default=None, ge=0)
    mastered: bool | None = None

    model_config = ConfigDict(extra="allow")


class ReviewCard(CamelModel):
    id: str
    user_id: str
    front: str | None = None
    back: str | None = None
    next_review: UtcDatetime
    interval: int = 0
    ease_factor: float = 2.5
    review_count: int = 0
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(extra="allow")


class ReviewCardCreate(CamelModel):
    id: str | None = Field(default=None, min_length=1)
    front: str | None = None
    back: str | None = None
    next_review: UtcDatetime | None = None
    interval: int = Field(default=0, ge=0)
    ease_factor: float = Field(default=2.5, gt=0)
    review_count: int = Field(default=0, ge=0)

    model_config = ConfigDict(extra="allow")


class ReviewCardUpdate(CamelModel):
    front: str | None = None
    back: str | None = None
    next_review: UtcDatetime | None = None
    interval: int | None = Field(default=None, ge=0)
    ease_factor: float | None = Field(default=None, gt=0)
    review_count: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(extra="allow")


class ReviewCardList(CamelModel):
    cards: list[ReviewCard]
