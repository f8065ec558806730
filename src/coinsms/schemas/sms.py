# src/coinsms/schemas/sms.py
"""SMS submission, quote and history schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from coinsms.models import SmsStatus


class SendSmsRequest(BaseModel):
    """Body of an SMS submission.

    Both fields are optional at the schema level; presence and format are
    checked by the sender after admission control has run.
    """

    phone_number: str | None = Field(None, alias="phoneNumber", description="Destination with country code")
    message: str | None = Field(None, description="Message text, 1-480 characters")

    model_config = ConfigDict(populate_by_name=True)


class SendSmsResponse(BaseModel):
    """Result of a delivered submission."""

    success: bool = True
    message: str = "SMS sent successfully"
    destination: str
    cost: int = Field(..., description="Coins charged")
    country: str | None = Field(None, description="ISO code reported by the gateway")
    remaining_coins: int
    parts: int


class QuoteRequest(SendSmsRequest):
    """Body of a price preview; same fields as a submission."""


class QuoteResponse(BaseModel):
    """Non-authoritative price preview."""

    destination: str
    parts: int
    price_per_part: int
    cost: int


class RateTier(BaseModel):
    prefix: str
    coins_per_part: int


class RatesResponse(BaseModel):
    """Public price list, in evaluation order."""

    tiers: list[RateTier]
    default_price: int
    part_length: int
    max_parts: int


class SmsHistoryItem(BaseModel):
    """One delivery record as shown to its owner."""

    id: int
    phone_number: str
    message: str
    country: str | None
    cost: int
    status: SmsStatus
    delivery_status: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
