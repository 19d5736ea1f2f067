from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field

from fluency_levels import FluencyLevel
from schemas.base import CamelModel
from schemas.certificate import Certificate


class LevelMetadata(BaseModel):
    code: FluencyLevel
    name: str
    description: str
    color: str
    icon: str


class FluencyHistoryEntry(CamelModel):
    user_id: str
    previous_level: FluencyLevel | None = None
    new_level: FluencyLevel
    changed_at: datetime
    changed_by: str
    changed_by_name: str | None = None
    reason: str | None = None


class FluencyRead(CamelModel):
    user_id: str
    fluency_level: FluencyLevel
    fluency_level_updated_at: datetime | None = None
    fluency_level_updated_by: str | None = None
    metadata: LevelMetadata


class FluencyUpdate(BaseModel):
    # Left untyped so malformed codes surface as "Invalid fluency level".
    level: Any = Field(default=None, validation_alias=AliasChoices("level", "newLevel"))


class FluencyUpdateResult(CamelModel):
    success: bool = True
    user_id: str
    previous_level: FluencyLevel
    new_level: FluencyLevel
    fluency_level_updated_at: datetime
    fluency_level_updated_by: str
    metadata: LevelMetadata
    certificate: Certificate | None = None


class MigrationResult(CamelModel):
    success: bool = True
    migrated_count: int
    skipped_count: int
    message: str = ""
