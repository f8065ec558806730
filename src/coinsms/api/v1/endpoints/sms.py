# src/coinsms/api/v1/endpoints/sms.py
"""SMS submission, pricing and history endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query
from sqlalchemy import select

from coinsms.core.errors import InvalidRequestError
from coinsms.core.pricing import DEFAULT_PRICE_TABLE, MAX_PARTS, PART_LENGTH, quote
from coinsms.models import SmsHistory
from coinsms.schemas.sms import (
    QuoteRequest,
    QuoteResponse,
    RatesResponse,
    RateTier,
    SendSmsRequest,
    SendSmsResponse,
    SmsHistoryItem,
)

from ..dependencies import (
    AdmittedIdentityDep,
    CurrentIdentityDep,
    SendSmsRequestDep,
    SessionDep,
    SmsSenderDep,
)

router = APIRouter(prefix="/sms", tags=["sms"])


@router.post(
    "/send",
    response_model=SendSmsResponse,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": SendSmsRequest.model_json_schema()}},
        }
    },
)
async def send_sms(
    identity: AdmittedIdentityDep,
    payload: SendSmsRequestDep,
    sender: SmsSenderDep,
) -> SendSmsResponse:
    """Send one SMS and charge its cost to the caller's coins."""
    result = await sender.send(identity.account_id, payload.phone_number, payload.message)
    return SendSmsResponse(
        destination=result.destination,
        cost=result.cost,
        country=result.country,
        remaining_coins=result.remaining_coins,
        parts=result.parts,
    )


@router.post("/quote", response_model=QuoteResponse)
async def quote_sms(payload: QuoteRequest) -> QuoteResponse:
    """Preview the cost of a message. The charge made by ``/send`` is authoritative."""
    if payload.phone_number is None or payload.message is None:
        raise InvalidRequestError("Missing required fields: phoneNumber and message")
    priced = quote(payload.phone_number, payload.message, DEFAULT_PRICE_TABLE)
    return QuoteResponse(
        destination=priced.destination,
        parts=priced.parts,
        price_per_part=priced.price_per_part,
        cost=priced.cost,
    )


@router.get("/rates", response_model=RatesResponse)
async def get_rates() -> RatesResponse:
    """Return the coin price list."""
    return RatesResponse(
        tiers=[
            RateTier(prefix=prefix, coins_per_part=price)
            for prefix, price in DEFAULT_PRICE_TABLE.tiers
        ],
        default_price=DEFAULT_PRICE_TABLE.default_price,
        part_length=PART_LENGTH,
        max_parts=MAX_PARTS,
    )


@router.get("/history", response_model=list[SmsHistoryItem])
async def get_history(
    identity: CurrentIdentityDep,
    db: SessionDep,
    limit: int = Query(50, ge=1, le=100),
    before: int | None = Query(None),
) -> list[SmsHistory]:
    """Get the caller's delivery records, newest first."""
    statement = select(SmsHistory).where(SmsHistory.user_id == identity.account_id)
    if before is not None:
        statement = statement.where(SmsHistory.id < before)
    statement = statement.order_by(SmsHistory.id.desc()).limit(limit)
    return list(db.scalars(statement))
