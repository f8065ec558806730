# src/coinsms/schemas/account.py
"""Account profile schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ProfileResponse(BaseModel):
    """Profile information returned by the API."""

    id: str
    custom_id: str | None
    email: str | None
    full_name: str | None
    credits_balance: int
    role: str
    banned: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RegisterRequest(BaseModel):
    full_name: str | None = Field(None, alias="fullName", max_length=120)

    model_config = ConfigDict(populate_by_name=True)


class RegisterResponse(BaseModel):
    """Profile provisioned for the caller; ``created`` is False if it already existed."""

    profile: ProfileResponse
    created: bool


class ProfileUpdate(BaseModel):
    full_name: str | None = Field(None, alias="fullName", max_length=120)

    model_config = ConfigDict(populate_by_name=True)
