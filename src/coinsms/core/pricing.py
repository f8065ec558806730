"""Coin pricing for outbound SMS.

Destinations are priced per 160-character part by matching dial-code prefixes,
most specific first. Everything here is pure: the same destination and message
always produce the same quote, whatever the state of the caller's account.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Final

from coinsms.core.errors import InvalidRequestError

PART_LENGTH: Final[int] = 160
MAX_PARTS: Final[int] = 3
MAX_MESSAGE_LENGTH: Final[int] = PART_LENGTH * MAX_PARTS
MIN_DESTINATION_LENGTH: Final[int] = 8
DEFAULT_PRICE: Final[int] = 3

DEFAULT_TIERS: Final[tuple[tuple[str, int], ...]] = (
    ("+53", 1),  # Cuba
    ("+1", 1),   # USA / Canada
    ("+52", 2),  # Mexico
    ("+34", 2),  # Spain
    ("+44", 2),  # UK
    ("+49", 2),  # Germany
    ("+33", 2),  # France
    ("+39", 2),  # Italy
    ("+55", 2),  # Brazil
    ("+54", 2),  # Argentina
    ("+57", 2),  # Colombia
)

_NON_DIAL_CHARS = re.compile(r"[^\d+]")


@dataclass(frozen=True)
class Quote:
    """Price of sending one message to one destination."""

    destination: str
    parts: int
    price_per_part: int

    @property
    def cost(self) -> int:
        return self.price_per_part * self.parts


class PriceTable:
    """Ordered dial-code prefix table with a default price.

    Prefixes are kept longest first so a generic prefix such as ``+1`` never
    shadows a more specific entry such as ``+1876``.
    """

    def __init__(self, tiers: Iterable[tuple[str, int]], default_price: int = DEFAULT_PRICE) -> None:
        entries = list(tiers)
        for prefix, price in entries:
            if not prefix.startswith("+") or not prefix[1:].isdigit():
                raise ValueError(f"Invalid dial-code prefix: {prefix!r}")
            if price < 0:
                raise ValueError(f"Negative price for prefix {prefix}")
        self._tiers: tuple[tuple[str, int], ...] = tuple(
            sorted(entries, key=lambda entry: len(entry[0]), reverse=True)
        )
        self.default_price = default_price

    @property
    def tiers(self) -> tuple[tuple[str, int], ...]:
        """Return the prefixes in evaluation order."""
        return self._tiers

    def price_for(self, destination: str) -> int:
        """Return the coins charged per part for a normalized destination."""
        for prefix, price in self._tiers:
            if destination.startswith(prefix):
                return price
        return self.default_price


DEFAULT_PRICE_TABLE: Final[PriceTable] = PriceTable(DEFAULT_TIERS)


def normalize_destination(raw: str) -> str:
    """Strip formatting from a phone number and check it carries a country code.

    Raises:
        InvalidRequestError: If the number lacks a leading ``+`` or is too short.
    """
    cleaned = _NON_DIAL_CHARS.sub("", raw)
    if (
        not cleaned.startswith("+")
        or "+" in cleaned[1:]
        or len(cleaned) < MIN_DESTINATION_LENGTH
    ):
        raise InvalidRequestError(
            "Invalid phone number format. Must include country code (e.g., +53 12345678)",
            message="Número de teléfono inválido. Incluye el código de país (ej. +53 12345678).",
        )
    return cleaned


def count_parts(message: str) -> int:
    """Return how many SMS parts ``message`` is billed as."""
    length = len(message)
    if length == 0:
        raise InvalidRequestError(
            "Message cannot be empty",
            message="El mensaje no puede estar vacío.",
        )
    if length > MAX_MESSAGE_LENGTH:
        raise InvalidRequestError(
            f"Message too long. Maximum {MAX_MESSAGE_LENGTH} characters ({MAX_PARTS} SMS parts)",
            message=f"Mensaje demasiado largo. Máximo {MAX_MESSAGE_LENGTH} caracteres.",
        )
    return math.ceil(length / PART_LENGTH)


def quote(phone_number: str, message: str, table: PriceTable = DEFAULT_PRICE_TABLE) -> Quote:
    """Validate a submission and price it.

    The destination is validated before the message, matching the order in
    which errors are reported to callers.
    """
    destination = normalize_destination(phone_number)
    parts = count_parts(message)
    return Quote(
        destination=destination,
        parts=parts,
        price_per_part=table.price_for(destination),
    )
