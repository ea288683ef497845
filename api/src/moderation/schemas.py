"""Pydantic schemas for IP ban management."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import BanEntry


class BanRequest(BaseModel):
    """Request to ban a client IP."""

    ip: str = Field(..., min_length=1, max_length=64)
    reason: str | None = Field(None, max_length=500)


class UnbanRequest(BaseModel):
    """Request to lift a ban."""

    ip: str = Field(..., min_length=1, max_length=64)


class BanEntryResponse(BaseModel):
    """A banned IP."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ip: str
    reason: str
    banned_at: str
    banned_by: str

    @classmethod
    def from_entry(cls, entry: BanEntry) -> "BanEntryResponse":
        return cls.model_validate(entry.to_dict())


class SuccessResponse(BaseModel):
    success: bool = True
