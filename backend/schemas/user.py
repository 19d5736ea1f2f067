from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, Field

from fluency_levels import FluencyLevel
from schemas.base import CamelModel

Role = Literal["student", "teacher"]


class UserProfile(CamelModel):
    """Stored learner/teacher profile. Unknown keys are kept untouched."""

    id: str
    email: str | None = None
    name: str | None = None
    role: str = "student"
    fluency_level: FluencyLevel | None = None
    fluency_level_updated_at: datetime | None = None
    fluency_level_updated_by: str | None = None

    model_config = ConfigDict(extra="allow")


class UserSummary(CamelModel):
    id: str
    email: str | None = None
    name: str | None = None
    role: str
    fluency_level: FluencyLevel
    fluency_level_updated_at: datetime | None = None


class UserList(CamelModel):
    users: list[UserSummary]


class SignupRequest(CamelModel):
    email: str
    password: str = Field(min_length=6)
    name: str
    role: Role = "student"


class ProfileResponse(CamelModel):
    profile: UserProfile


class SignupResponse(CamelModel):
    user: UserProfile
