# src/coinsms/api/v1/endpoints/accounts.py
"""Account profile endpoints for the CoinSMS API."""

from __future__ import annotations

import logging
import secrets
import string

from fastapi import APIRouter, Response, status
from sqlalchemy.exc import IntegrityError

from coinsms.core.errors import AccountNotFoundError
from coinsms.core.settings import settings
from coinsms.models import Profile
from coinsms.schemas.account import (
    ProfileResponse,
    ProfileUpdate,
    RegisterRequest,
    RegisterResponse,
)

from ..dependencies import CurrentIdentityDep, SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts", tags=["accounts"])

_CUSTOM_ID_LETTERS = string.ascii_lowercase
_CUSTOM_ID_DIGITS = string.digits


def generate_custom_id() -> str:
    """Return a short public id: 8-10 lowercase letters and digits."""
    length = 8 + secrets.randbelow(3)
    return "".join(
        secrets.choice(_CUSTOM_ID_DIGITS if secrets.randbelow(10) >= 6 else _CUSTOM_ID_LETTERS)
        for _ in range(length)
    )


@router.post("/register", response_model=RegisterResponse)
async def register_profile(
    identity: CurrentIdentityDep,
    db: SessionDep,
    response: Response,
    payload: RegisterRequest | None = None,
) -> RegisterResponse:
    """Create the caller's profile with an empty balance, if it does not exist yet."""
    existing = db.get(Profile, identity.account_id)
    if existing is not None:
        return RegisterResponse(profile=ProfileResponse.model_validate(existing), created=False)

    profile = Profile(
        id=identity.account_id,
        custom_id=generate_custom_id(),
        email=identity.email,
        full_name=payload.full_name if payload else None,
        credits_balance=0,
        role="admin" if settings.is_admin_email(identity.email) else "user",
        banned=False,
    )
    db.add(profile)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent registration of the same identity won the insert.
        db.rollback()
        existing = db.get(Profile, identity.account_id)
        if existing is None:
            raise
        return RegisterResponse(profile=ProfileResponse.model_validate(existing), created=False)
    db.refresh(profile)
    logger.info("Registered profile", extra={"account_id": profile.id})

    response.status_code = status.HTTP_201_CREATED
    return RegisterResponse(profile=ProfileResponse.model_validate(profile), created=True)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(identity: CurrentIdentityDep, db: SessionDep) -> Profile:
    """Return the caller's profile and coin balance."""
    profile = db.get(Profile, identity.account_id)
    if profile is None:
        raise AccountNotFoundError()
    return profile


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    payload: ProfileUpdate,
    identity: CurrentIdentityDep,
    db: SessionDep,
) -> Profile:
    """Update the caller's display name."""
    profile = db.get(Profile, identity.account_id)
    if profile is None:
        raise AccountNotFoundError()
    profile.full_name = payload.full_name
    db.commit()
    db.refresh(profile)
    return profile
