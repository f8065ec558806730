"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, Header, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from coinsms.core.errors import ForbiddenError, RateLimitedError
from coinsms.core.security import Identity, resolve_identity
from coinsms.core.settings import settings
from coinsms.db.session import get_db
from coinsms.models import Profile
from coinsms.schemas.sms import SendSmsRequest
from coinsms.services.gateway import SmsGatewayClient, get_gateway_client
from coinsms.services.rate_limit import AdmissionController, get_admission_controller
from coinsms.services.sms_sender import SmsSender

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_identity(
    authorization: Annotated[str | None, Header()] = None,
) -> Identity:
    """Resolve the caller from the ``Authorization: Bearer`` header.

    Raises:
        UnauthorizedError: If the header is missing or malformed ("Unauthorized")
            or the token does not verify ("Invalid token").
    """
    return resolve_identity(authorization)


CurrentIdentityDep = Annotated[Identity, Depends(get_current_identity)]


def get_admission_controller_dep() -> AdmissionController:
    return get_admission_controller()


AdmissionControllerDep = Annotated[AdmissionController, Depends(get_admission_controller_dep)]


def require_send_admission(
    identity: CurrentIdentityDep,
    controller: AdmissionControllerDep,
) -> Identity:
    """Count an SMS submission against the caller's window.

    Runs after identity resolution and before the request body is examined.
    """
    decision = controller.check(identity.account_id)
    if not decision.allowed:
        raise RateLimitedError(limit=controller.limit, retry_after=decision.retry_after)
    return identity


AdmittedIdentityDep = Annotated[Identity, Depends(require_send_admission)]


async def read_send_request(_identity: AdmittedIdentityDep, request: Request) -> SendSmsRequest:
    """Parse the submission body once the caller is identified and admitted.

    The body is read here rather than declared on the route, so undecodable
    JSON is reported only after both gates have passed.
    """
    body = await request.body()
    try:
        return SendSmsRequest.model_validate_json(body or b"{}")
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False), body=body) from exc


SendSmsRequestDep = Annotated[SendSmsRequest, Depends(read_send_request)]


def get_gateway_client_dep() -> SmsGatewayClient:
    return get_gateway_client()


GatewayClientDep = Annotated[SmsGatewayClient, Depends(get_gateway_client_dep)]


def get_sms_sender(db: SessionDep, gateway: GatewayClientDep) -> SmsSender:
    """Build the sender for one request."""
    return SmsSender(db, gateway)


SmsSenderDep = Annotated[SmsSender, Depends(get_sms_sender)]


def require_admin(identity: CurrentIdentityDep, db: SessionDep) -> Identity:
    """Allow configured administrator e-mails and profiles with the admin role."""
    if settings.is_admin_email(identity.email):
        return identity
    profile = db.get(Profile, identity.account_id)
    if profile is not None and (profile.is_admin or settings.is_admin_email(profile.email)):
        return identity
    raise ForbiddenError()


AdminIdentityDep = Annotated[Identity, Depends(require_admin)]
