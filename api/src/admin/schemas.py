"""Pydantic schemas for admin authentication."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class LoginRequest(BaseModel):
    """Login request."""

    password: str = Field(..., min_length=1, max_length=128)


class LoginResponse(BaseModel):
    """Session token and its fixed expiry."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    token: str
    expires_at: datetime


class ChangePasswordRequest(BaseModel):
    """Password change request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=1, max_length=128)


class VerifyResponse(BaseModel):
    valid: bool = True


class SuccessResponse(BaseModel):
    success: bool = True
