"""Access token verification for identities issued by the hosted auth provider."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from jose import JWTError, jwt

from coinsms.core.errors import UnauthorizedError
from coinsms.core.settings import settings


@dataclass(frozen=True)
class Identity:
    """Caller resolved from a bearer token."""

    account_id: str
    email: str | None = None


def parse_bearer(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header value.

    Raises:
        UnauthorizedError: If the header is absent or not a bearer credential.
    """
    if not authorization:
        raise UnauthorizedError()
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme != "Bearer" or not token or " " in token:
        raise UnauthorizedError()
    return token


def verify_access_token(token: str) -> Identity:
    """Verify a signed access token and return the identity it names.

    Args:
        token: Raw JWT taken from the bearer credential.

    Returns:
        The account id (``sub`` claim) and e-mail of the caller.

    Raises:
        UnauthorizedError: If the signature, audience or expiry do not verify,
            or the token carries no subject.
    """
    options: dict[str, Any] = {"verify_aud": settings.jwt_audience is not None}
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options,
        )
    except JWTError as err:
        raise UnauthorizedError("Invalid token") from err

    subject = payload.get("sub")
    if not subject or not isinstance(subject, str):
        raise UnauthorizedError("Invalid token")
    email = payload.get("email")
    return Identity(account_id=subject, email=email if isinstance(email, str) else None)


def resolve_identity(authorization: str | None) -> Identity:
    """Run both identity checks on a raw ``Authorization`` header value."""
    return verify_access_token(parse_bearer(authorization))
