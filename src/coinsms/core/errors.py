"""Domain errors surfaced by the CoinSMS API.

Every error knows the HTTP status it maps to and how to render itself as the
JSON body returned to clients. Handlers in ``coinsms.api.error_handlers``
translate them; nothing below touches FastAPI.
"""

from __future__ import annotations

from typing import Any


class CoinSmsError(Exception):
    """Base class for errors that are reported to API callers."""

    http_status: int = 500
    error: str = "Internal server error"

    def __init__(
        self,
        error: str | None = None,
        *,
        message: str | None = None,
        **extra: Any,
    ) -> None:
        self.error = error or self.error
        self.message = message
        self.extra = extra
        super().__init__(self.error)

    def to_response(self) -> dict[str, Any]:
        """Return the JSON payload describing this error."""
        body: dict[str, Any] = {"error": self.error}
        if self.message is not None:
            body["message"] = self.message
        body.update(self.extra)
        return body

    @property
    def headers(self) -> dict[str, str] | None:
        return None


class UnauthorizedError(CoinSmsError):
    """Missing, malformed or unrecognized bearer credential."""

    http_status = 401
    error = "Unauthorized"


class ForbiddenError(CoinSmsError):
    http_status = 403
    error = "Forbidden - Admin access required"


class AccountSuspendedError(ForbiddenError):
    error = "Account suspended"


class InvalidRequestError(CoinSmsError):
    http_status = 400
    error = "Invalid request"


class AccountNotFoundError(CoinSmsError):
    http_status = 404
    error = "User profile not found"


class InsufficientFundsError(CoinSmsError):
    """Raised when the balance does not cover the cost of a submission."""

    http_status = 402
    error = "Insufficient coins"

    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            message=(
                f"Necesitas {required} coins para enviar este mensaje. "
                f"Tienes {available} coins disponibles."
            ),
            required=required,
            available=available,
        )
        self.required = required
        self.available = available


class RateLimitedError(CoinSmsError):
    http_status = 429
    error = "Rate limit exceeded"

    def __init__(self, limit: int, retry_after: int) -> None:
        super().__init__(
            message=(
                f"Has alcanzado el límite de {limit} SMS por minuto. "
                f"Espera {retry_after} segundos antes de enviar otro."
            ),
            retryAfter=retry_after,
        )
        self.retry_after = retry_after

    @property
    def headers(self) -> dict[str, str] | None:
        return {"Retry-After": str(self.retry_after)}


class GatewayRejectedError(CoinSmsError):
    """The gateway answered with a non-zero application error code."""

    http_status = 400
    error = "Failed to send SMS"

    def __init__(self, gateway_message: str | None, payload: dict[str, Any]) -> None:
        super().__init__(gateway_message or self.error, gateway_error=payload)


class GatewayTimeoutError(CoinSmsError):
    http_status = 504
    error = "Request timeout - API took too long to respond"


class GatewayUnreachableError(GatewayTimeoutError):
    error = "SMS gateway unreachable"


class GatewayBadResponseError(CoinSmsError):
    """The gateway answered, but not with a usable JSON document."""

    http_status = 502
    error = "SMS gateway returned an invalid response"


class BalanceUpdateError(CoinSmsError):
    http_status = 500
    error = "Failed to update coins balance"


class ConfigurationError(CoinSmsError):
    http_status = 500
    error = "Server configuration error"
