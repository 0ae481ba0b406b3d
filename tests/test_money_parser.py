"""
Tests for the money parser module.
"""

from decimal import Decimal

import pytest

from importcost.pricing.money_parser import (
    DEFAULT_CURRENCY_SYMBOL,
    detect_currency_symbol,
    detect_symbol,
    parse_amount,
    parse_number,
)


class TestParseAmount:
    """Tests for parse_amount."""

    def test_comma_decimal(self) -> None:
        """Test a comma is read as the decimal separator."""
        assert parse_amount("¥ 177,00") == Decimal("177.00")

    def test_period_decimal(self) -> None:
        """Test a period decimal passes through."""
        assert parse_amount("R$ 94.40") == Decimal("94.40")

    def test_empty_and_none(self) -> None:
        """Test empty input yields zero."""
        assert parse_amount("") == Decimal("0")
        assert parse_amount(None) == Decimal("0")

    def test_no_digits(self) -> None:
        """Test text without digits yields zero instead of raising."""
        assert parse_amount("free") == Decimal("0")
        assert parse_amount("¥ ,.") == Decimal("0")

    def test_thousands_grouping_misparses(self) -> None:
        """Test only one decimal separator is supported per value."""
        assert parse_amount("1,234.56") == Decimal("1.234")
        assert parse_amount("1.234,56") == Decimal("1.234")

    def test_leading_decimal_point(self) -> None:
        """Test a value starting with the separator."""
        assert parse_amount("¥ ,50") == Decimal("0.50")

    def test_sign_is_stripped(self) -> None:
        """Test the minus sign is dropped with the other symbols."""
        assert parse_amount("-¥ 5,00") == Decimal("5.00")

    def test_trailing_separator(self) -> None:
        """Test a trailing separator is tolerated."""
        assert parse_amount("12,") == Decimal("12")


class TestDetectSymbol:
    """Tests for currency symbol detection."""

    def test_detect_prefix_symbol(self) -> None:
        assert detect_symbol("¥ 177,00") == "¥"

    def test_detect_multi_character_symbol(self) -> None:
        assert detect_symbol("US$10.00") == "US$"

    def test_detect_none_without_symbol(self) -> None:
        assert detect_symbol("177,00") is None
        assert detect_symbol("") is None

    def test_first_price_with_symbol_wins(self) -> None:
        """Test empty or symbol-less prices are skipped."""
        prices = ["", "10,00", "R$ 5,00", "¥ 3,00"]
        assert detect_currency_symbol(prices) == "R$"

    def test_default_symbol(self) -> None:
        assert detect_currency_symbol([]) == DEFAULT_CURRENCY_SYMBOL
        assert detect_currency_symbol(["10", ""], default="€") == "€"


class TestParseNumber:
    """Tests for lenient field coercion."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("3", Decimal("3")),
            (" 2.5 ", Decimal("2.5")),
            ("12g", Decimal("12")),
            ("-4", Decimal("-4")),
            (7, Decimal("7")),
            (0.847, Decimal("0.847")),
            (Decimal("1.5"), Decimal("1.5")),
        ],
    )
    def test_parses_numbers(self, value, expected) -> None:
        assert parse_number(value) == expected

    @pytest.mark.parametrize("value", ["", "abc", None, float("nan"), float("inf"), True])
    def test_unparseable_defaults_to_zero(self, value) -> None:
        assert parse_number(value) == Decimal("0")

    def test_custom_default(self) -> None:
        """Test callers can tell unparseable input from an explicit zero."""
        assert parse_number("abc", default=None) is None
        assert parse_number("0", default=None) == Decimal("0")


class TestMagnitudeBounds:
    """Values the arithmetic cannot carry are treated as unparseable."""

    @pytest.mark.parametrize("value", ["9e999999", "1e400", "1e13", "-1e13", "1e-400", 1e300])
    def test_out_of_range_numbers(self, value) -> None:
        assert parse_number(value) == Decimal("0")
        assert parse_number(value, default=None) is None

    def test_bounds_are_inclusive(self) -> None:
        assert parse_number("1e12") == Decimal("1e12")
        assert parse_number("1e-12") == Decimal("1e-12")
        assert parse_number("-1e12") == Decimal("-1e12")

    def test_overlong_price(self) -> None:
        assert parse_amount("¥ " + "9" * 400) == Decimal("0")
        assert parse_amount("¥ 999999999999,99") == Decimal("999999999999.99")
