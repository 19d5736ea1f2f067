from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def _as_utc(value: datetime) -> datetime:
    # Naive client timestamps are taken as UTC so they compare with ours.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    """camelCase on the wire and in the store, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_store(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    def changes(self) -> dict:
        """Fields the client actually sent, in stored (camelCase) form."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True, exclude_none=True)


class SuccessResponse(CamelModel):
    success: bool = True


class CreatedResponse(SuccessResponse):
    id: str
