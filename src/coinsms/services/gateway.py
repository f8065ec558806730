"""Client for the third-party SMS gateway.

The gateway takes one form-encoded POST per message and answers with a JSON
document whose ``error_code`` is 0 on success. This module only speaks HTTP:
it raises ``GatewayError`` subclasses for transport problems and returns the
parsed answer otherwise, leaving billing decisions to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from coinsms.core.settings import settings

# Configure logger for this module
logger = logging.getLogger(__name__)

SEND_PATH = "/sms/send"
BALANCE_PATHS = ("/balance", "/account/balance")


class GatewayError(RuntimeError):
    """Base exception raised for gateway failures that produced no usable answer."""


class GatewayNotConfiguredError(GatewayError):
    """Raised when no API key is configured."""


class GatewayTimeout(GatewayError):
    """Raised when the gateway did not answer within the configured timeout."""


class GatewayTransportError(GatewayError):
    """Raised when the gateway could not be reached."""


class GatewayResponseError(GatewayError):
    """Raised when the gateway answered with a non-2xx status or a non-JSON body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class GatewayConfig:
    """Immutable configuration for gateway operations."""

    base_url: str
    api_key: str | None
    timeout_seconds: float


@dataclass(frozen=True)
class GatewayResult:
    """Parsed answer to a send request."""

    error_code: int
    message: str | None
    destination: str | None = None
    iso: str | None = None
    delivery_status: str | None = None
    raw: Mapping[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error_code == 0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> GatewayResult:
        try:
            error_code = int(payload.get("error_code", -1))
        except (TypeError, ValueError):
            error_code = -1
        return cls(
            error_code=error_code,
            message=_optional_str(payload.get("message")),
            destination=_optional_str(payload.get("destination")),
            iso=_optional_str(payload.get("iso")),
            delivery_status=_optional_str(payload.get("delivery_status")),
            raw=dict(payload),
        )


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def load_gateway_config() -> GatewayConfig:
    """Build configuration object from global settings."""

    return GatewayConfig(
        base_url=settings.gateway_base_url.rstrip("/"),
        api_key=settings.gateway_api_key,
        timeout_seconds=float(settings.gateway_timeout_seconds),
    )


class SmsGatewayClient:
    """HTTP client wrapper for the SMS gateway."""

    def __init__(
        self,
        config: GatewayConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_gateway_config()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return bool(self.config.api_key)

    async def _ensure_client(self) -> httpx.AsyncClient:
        if not self.configured:
            raise GatewayNotConfiguredError("Missing SMS gateway API key")

        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.config.base_url,
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    async def send(self, destination: str, content: str) -> GatewayResult:
        """Submit one message.

        Args:
            destination: Normalized destination number, including the ``+``.
            content: Message text.

        Returns:
            The parsed gateway answer; check ``ok`` for the application status.

        Raises:
            GatewayTimeout: No answer within the configured timeout.
            GatewayTransportError: Connection-level failure.
            GatewayResponseError: Non-2xx status or a body that is not a JSON object.
        """
        client = await self._ensure_client()
        try:
            response = await client.post(
                SEND_PATH,
                data={
                    "apikey": self.config.api_key or "",
                    "number": destination,
                    "content": content,
                },
            )
        except httpx.TimeoutException as exc:
            logger.warning("SMS gateway timed out after %.0fs", self.config.timeout_seconds)
            raise GatewayTimeout("SMS gateway request timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("SMS gateway request failed: %s", exc.__class__.__name__)
            raise GatewayTransportError(f"SMS gateway request failed: {exc}") from exc

        if not response.is_success:
            logger.warning("SMS gateway responded with HTTP %s", response.status_code)
            raise GatewayResponseError(
                f"SMS gateway responded with {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        payload = _json_object(response)
        result = GatewayResult.from_payload(payload)
        if not result.ok:
            logger.info(
                "SMS gateway rejected message",
                extra={"error_code": result.error_code, "gateway_message": result.message},
            )
        return result

    async def get_balance(self) -> dict[str, Any] | None:
        """Return the account balance document, or None when no endpoint answers."""
        client = await self._ensure_client()
        for path in BALANCE_PATHS:
            try:
                response = await client.get(path, params={"apikey": self.config.api_key or ""})
            except httpx.HTTPError as exc:
                logger.warning("Gateway balance lookup on %s failed: %s", path, exc.__class__.__name__)
                continue
            if not response.is_success:
                continue
            try:
                return _json_object(response)
            except GatewayResponseError:
                continue
        return None

    async def close(self) -> None:
        """Clean up underlying HTTP client resources."""

        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None


def _json_object(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise GatewayResponseError(
            "SMS gateway returned a non-JSON body", status_code=response.status_code
        ) from exc
    if not isinstance(payload, dict):
        raise GatewayResponseError(
            "SMS gateway returned an unexpected document", status_code=response.status_code
        )
    return payload


class _GatewayClientSingleton:
    """Singleton wrapper for SmsGatewayClient."""

    _instance: SmsGatewayClient | None = None

    @classmethod
    def get_instance(cls) -> SmsGatewayClient:
        """Get or create the singleton SmsGatewayClient instance."""
        if cls._instance is None:
            cls._instance = SmsGatewayClient()
        return cls._instance


def get_gateway_client() -> SmsGatewayClient:
    """Return a singleton gateway client instance."""
    return _GatewayClientSingleton.get_instance()
