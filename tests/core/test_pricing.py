"""Tests for coin pricing."""

import pytest

from coinsms.core.errors import InvalidRequestError
from coinsms.core.pricing import (
    DEFAULT_PRICE_TABLE,
    PriceTable,
    count_parts,
    normalize_destination,
    quote,
)


class TestNormalizeDestination:
    def test_strips_formatting(self):
        assert normalize_destination("+53 (5) 123-4567") == "+5351234567"

    def test_requires_leading_plus(self):
        with pytest.raises(InvalidRequestError) as exc_info:
            normalize_destination("5351234567")
        assert "Invalid phone number format" in exc_info.value.error

    def test_rejects_short_numbers(self):
        with pytest.raises(InvalidRequestError):
            normalize_destination("+53 123")

    def test_minimum_length_is_eight_characters(self):
        assert normalize_destination("+5312345") == "+5312345"

    def test_rejects_embedded_plus(self):
        with pytest.raises(InvalidRequestError):
            normalize_destination("+53+51234567")


@pytest.mark.parametrize(
    ("length", "parts"),
    [(1, 1), (160, 1), (161, 2), (320, 2), (321, 3), (480, 3)],
)
def test_count_parts_boundaries(length: int, parts: int):
    assert count_parts("x" * length) == parts


def test_empty_message_is_rejected():
    with pytest.raises(InvalidRequestError) as exc_info:
        count_parts("")
    assert exc_info.value.error == "Message cannot be empty"


def test_message_over_three_parts_is_rejected():
    with pytest.raises(InvalidRequestError) as exc_info:
        count_parts("x" * 481)
    assert "Message too long" in exc_info.value.error


class TestTierPricing:
    def test_cuba_single_part(self):
        priced = quote("+5351234567", "x" * 50)
        assert (priced.parts, priced.price_per_part, priced.cost) == (1, 1, 1)

    def test_spain_two_parts(self):
        priced = quote("+34612345678", "x" * 200)
        assert (priced.parts, priced.price_per_part, priced.cost) == (2, 2, 4)

    def test_unlisted_country_uses_default_tier(self):
        priced = quote("+81901234567", "x")
        assert (priced.parts, priced.price_per_part, priced.cost) == (1, 3, 3)

    def test_north_america_is_cheapest_tier(self):
        assert DEFAULT_PRICE_TABLE.price_for("+12025550123") == 1

    def test_quote_is_deterministic(self):
        assert quote("+44 7700 900123", "hello") == quote("+44 7700 900123", "hello")

    def test_destination_checked_before_message(self):
        with pytest.raises(InvalidRequestError) as exc_info:
            quote("12345", "")
        assert "Invalid phone number format" in exc_info.value.error


class TestPriceTable:
    def test_specific_prefix_is_not_shadowed(self):
        table = PriceTable([("+1", 1), ("+1876", 3)], default_price=5)
        assert table.price_for("+18765551234") == 3
        assert table.price_for("+12025550123") == 1
        assert table.price_for("+4420000000") == 5

    def test_tiers_are_ordered_longest_first(self):
        table = PriceTable([("+1", 1), ("+53", 1), ("+1876", 3)])
        assert [prefix for prefix, _ in table.tiers] == ["+1876", "+53", "+1"]

    def test_rejects_malformed_prefix(self):
        with pytest.raises(ValueError):
            PriceTable([("53", 1)])
