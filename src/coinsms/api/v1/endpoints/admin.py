# src/coinsms/api/v1/endpoints/admin.py
"""Administrative endpoints: accounts, coin adjustments and gateway status."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coinsms.core.errors import AccountNotFoundError, ConfigurationError, InvalidRequestError
from coinsms.models import CreditPurchase, Profile, SmsRate
from coinsms.schemas.account import ProfileResponse
from coinsms.schemas.admin import (
    AddCreditsRequest,
    AddCreditsResponse,
    AdminUsersResponse,
    BanRequest,
    BanResponse,
    CountryRate,
    GatewayBalanceResponse,
    RatesReport,
    RateStats,
)
from coinsms.services.ledger import CoinLedger

from ..dependencies import AdminIdentityDep, GatewayClientDep, SessionDep, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/users", response_model=AdminUsersResponse)
async def list_users(db: SessionDep) -> AdminUsersResponse:
    """List every profile, newest first."""
    profiles = db.scalars(select(Profile).order_by(Profile.created_at.desc()))
    return AdminUsersResponse(users=[ProfileResponse.model_validate(p) for p in profiles])


def _resolve_target(db: Session, payload: AddCreditsRequest) -> str:
    if payload.user_id:
        return payload.user_id
    account_id = db.scalar(
        select(Profile.id).where(func.lower(Profile.email) == (payload.email or "").strip().lower())
    )
    if account_id is None:
        raise AccountNotFoundError("User not found with that email")
    return account_id


@router.post("/credits", response_model=AddCreditsResponse)
async def add_credits(
    payload: AddCreditsRequest,
    admin: AdminIdentityDep,
    db: SessionDep,
) -> AddCreditsResponse:
    """Add coins to an account, or subtract them with a negative amount."""
    account_id = _resolve_target(db, payload)
    ledger = CoinLedger(db)

    new_balance = ledger.credit(account_id, payload.amount)
    if new_balance is None:
        if ledger.balance_of(account_id) is None:
            raise AccountNotFoundError()
        raise InvalidRequestError("Cannot subtract more credits than user has")

    verb = "Added" if payload.amount > 0 else "Subtracted"
    purchase = CreditPurchase(
        user_id=account_id,
        amount=payload.amount,
        package_name=payload.package_name
        or ("Manual Admin Add" if payload.amount > 0 else "Manual Admin Subtract"),
        payment_method="admin_manual",
        status="completed",
        admin_notes=f"{verb} by admin: {admin.email or admin.account_id}",
    )
    try:
        db.add(purchase)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to record credit purchase", extra={"account_id": account_id})

    logger.info(
        "Admin coin adjustment",
        extra={"account_id": account_id, "amount": payload.amount, "admin": admin.account_id},
    )
    return AddCreditsResponse(
        new_balance=new_balance,
        message=f"{verb} {abs(payload.amount)} coins",
    )


@router.post("/users/{user_id}/ban", response_model=BanResponse)
async def set_ban(
    user_id: str,
    payload: BanRequest,
    db: SessionDep,
) -> BanResponse:
    """Ban or unban an account. Banned accounts cannot send SMS."""
    profile = db.get(Profile, user_id)
    if profile is None:
        raise AccountNotFoundError()
    profile.banned = payload.banned
    db.commit()
    return BanResponse(
        banned=payload.banned,
        message="User banned successfully" if payload.banned else "User unbanned successfully",
    )


@router.get("/gateway/balance", response_model=GatewayBalanceResponse)
async def get_gateway_balance(gateway: GatewayClientDep) -> GatewayBalanceResponse:
    """Return the balance of the operator's gateway account."""
    if not gateway.configured:
        raise ConfigurationError("Server configuration error: Missing API key")

    data = await gateway.get_balance()
    if data is None:
        return GatewayBalanceResponse(
            balance=0,
            status="unknown",
            message="Balance endpoint not available - using placeholder",
        )
    balance = data.get("balance") or data.get("credits") or 0
    try:
        balance_value = float(balance)
    except (TypeError, ValueError):
        balance_value = 0.0
    return GatewayBalanceResponse(
        balance=balance_value,
        currency=str(data.get("currency") or "USD"),
        status=str(data.get("status") or "active"),
        raw=data,
    )


@router.get("/rates", response_model=RatesReport)
async def get_rate_report(db: SessionDep) -> RatesReport:
    """Summarize the provider rate sheet per country."""
    rates = list(db.scalars(select(SmsRate).order_by(SmsRate.country)))

    countries: dict[str, CountryRate] = {}
    for rate in rates:
        existing = countries.get(rate.country)
        if existing is None:
            countries[rate.country] = CountryRate(
                country=rate.country,
                country_code=rate.country_code,
                min_price=rate.sale_price,
                operators=1,
            )
            continue
        existing.operators += 1
        if rate.sale_price < existing.min_price:
            existing.min_price = rate.sale_price

    summary = list(countries.values())
    prices = [c.min_price for c in summary]
    stats = RateStats(
        total_countries=len(summary),
        total_operators=len(rates),
        avg_price=sum(prices) / len(prices) if prices else 0.0,
        min_price=min(prices) if prices else None,
        max_price=max(prices) if prices else None,
    )
    return RatesReport(countries=summary, stats=stats, total_records=len(rates))

