"""Paid SMS submission.

``SmsSender.send`` takes an authenticated, already rate-limited submission
through validation, pricing, the coin debit, the gateway call and the history
write. Coins are taken with a conditional update before the gateway is
called and handed back if the gateway does not accept the message, so the
balance can never go negative and a message is never sent unpaid.

The writes after the gateway call have different visibility: failing to hand
coins back is reported to the caller, failing to store the history row is
only logged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coinsms.core.errors import (
    AccountNotFoundError,
    AccountSuspendedError,
    BalanceUpdateError,
    ConfigurationError,
    GatewayBadResponseError,
    GatewayRejectedError,
    GatewayTimeoutError,
    GatewayUnreachableError,
    InsufficientFundsError,
    InvalidRequestError,
)
from coinsms.core.pricing import DEFAULT_PRICE_TABLE, PriceTable, Quote, quote
from coinsms.models import SmsHistory, SmsStatus
from coinsms.services.gateway import (
    GatewayNotConfiguredError,
    GatewayResponseError,
    GatewayResult,
    GatewayTimeout,
    GatewayTransportError,
)
from coinsms.services.ledger import CoinLedger

logger = logging.getLogger(__name__)


class SmsGateway(Protocol):
    """What the sender needs from a gateway client."""

    @property
    def configured(self) -> bool: ...

    async def send(self, destination: str, content: str) -> GatewayResult: ...


@dataclass(frozen=True)
class SendResult:
    """Outcome of a successful submission."""

    destination: str
    cost: int
    country: str | None
    remaining_coins: int
    parts: int


class SmsSender:
    """Runs one paid SMS submission for an account."""

    def __init__(
        self,
        db: Session,
        gateway: SmsGateway,
        price_table: PriceTable = DEFAULT_PRICE_TABLE,
    ) -> None:
        self.db = db
        self.gateway = gateway
        self.price_table = price_table
        self.ledger = CoinLedger(db)

    async def send(self, account_id: str, phone_number: str | None, message: str | None) -> SendResult:
        """Validate, charge and deliver one message.

        Raises:
            InvalidRequestError: Missing fields, bad destination, empty or oversized message.
            AccountNotFoundError: No profile for ``account_id``.
            AccountSuspendedError: The profile is banned.
            ConfigurationError: No gateway API key.
            InsufficientFundsError: The balance does not cover the cost.
            BalanceUpdateError: A balance write failed.
            GatewayTimeoutError: The gateway timed out or could not be reached.
            GatewayBadResponseError: The gateway answered with an HTTP error or garbage.
            GatewayRejectedError: The gateway refused the message.
        """
        if phone_number is None or message is None:
            raise InvalidRequestError(
                "Missing required fields: phoneNumber and message",
                message="Faltan campos obligatorios: número de teléfono y mensaje.",
            )
        priced = quote(phone_number, message, self.price_table)

        profile = self.ledger.get_profile(account_id)
        if profile is None:
            raise AccountNotFoundError()
        if profile.banned:
            raise AccountSuspendedError(message="Tu cuenta está suspendida.")

        if not self.gateway.configured:
            logger.error("SMS gateway API key is not configured")
            raise ConfigurationError("Server configuration error: Missing API key")

        remaining = self._debit(account_id, priced)

        try:
            result = await self.gateway.send(priced.destination, message)
        except GatewayTimeout as exc:
            self._refund(account_id, priced)
            raise GatewayTimeoutError() from exc
        except GatewayTransportError as exc:
            self._refund(account_id, priced)
            raise GatewayUnreachableError() from exc
        except GatewayResponseError as exc:
            self._refund(account_id, priced)
            raise GatewayBadResponseError(
                f"API error: {exc}", upstream_status=exc.status_code
            ) from exc
        except GatewayNotConfiguredError as exc:
            self._refund(account_id, priced)
            raise ConfigurationError("Server configuration error: Missing API key") from exc
        except BaseException:
            # Cancellation or an unexpected failure: nothing was sent.
            self._refund(account_id, priced)
            raise

        if not result.ok:
            self._record(
                SmsHistory(
                    user_id=account_id,
                    phone_number=priced.destination,
                    message=message,
                    country=None,
                    cost=0,
                    status=SmsStatus.FAILED,
                    api_response=dict(result.raw),
                )
            )
            self._refund(account_id, priced)
            raise GatewayRejectedError(result.message, dict(result.raw))

        self._record(
            SmsHistory(
                user_id=account_id,
                phone_number=priced.destination,
                message=message,
                country=result.iso,
                cost=priced.cost,
                status=SmsStatus.SENT,
                delivery_status=result.delivery_status or SmsStatus.PENDING.value,
                api_response=dict(result.raw),
            )
        )
        logger.info(
            "SMS sent",
            extra={"account_id": account_id, "cost": priced.cost, "parts": priced.parts},
        )
        return SendResult(
            destination=result.destination or priced.destination,
            cost=priced.cost,
            country=result.iso,
            remaining_coins=remaining,
            parts=priced.parts,
        )

    def _debit(self, account_id: str, priced: Quote) -> int:
        try:
            remaining = self.ledger.debit(account_id, priced.cost)
        except SQLAlchemyError as exc:
            logger.exception("Failed to debit %s coins from %s", priced.cost, account_id)
            raise BalanceUpdateError() from exc
        if remaining is None:
            available = self.ledger.balance_of(account_id)
            if available is None:
                raise AccountNotFoundError()
            raise InsufficientFundsError(required=priced.cost, available=available)
        return remaining

    def _refund(self, account_id: str, priced: Quote) -> None:
        try:
            restored = self.ledger.credit(account_id, priced.cost)
        except SQLAlchemyError as exc:
            logger.exception("Failed to refund %s coins to %s", priced.cost, account_id)
            raise BalanceUpdateError() from exc
        if restored is None:
            logger.error("Refund of %s coins found no profile for %s", priced.cost, account_id)
            raise BalanceUpdateError()

    def _record(self, record: SmsHistory) -> None:
        try:
            self._insert_record(record)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                "Failed to record SMS history",
                extra={"account_id": record.user_id, "status": record.status.value},
            )

    def _insert_record(self, record: SmsHistory) -> None:
        self.db.add(record)
        self.db.commit()
