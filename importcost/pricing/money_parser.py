"""
Money parser module.

Extracts numeric amounts and currency symbols from free-text price strings
such as "¥ 177,00" or "R$ 94.40".

Parsing rule: every character that is not a digit, "." or "," is dropped,
the first comma becomes a decimal point, and the longest leading decimal
number is taken. Only one decimal separator is supported per value, so a
thousands-grouped value like "1,234.56" parses as 1.234.
"""

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY_SYMBOL = "¥"

# Accepted magnitude for parsed values; anything outside is treated as unparseable
MAX_MAGNITUDE = Decimal("1e12")
MIN_MAGNITUDE = Decimal("1e-12")

_NON_NUMERIC = re.compile(r"[^0-9.,]")
_LEADING_DECIMAL = re.compile(r"^(\d+\.?\d*|\.\d+)")
_CURRENCY_TOKEN = re.compile(r"[^0-9.,\s]+")
_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_amount(price_text: str | None) -> Decimal:
    """
    Parse the numeric amount out of a price string.

    Never raises: empty, missing or malformed input yields Decimal("0").

    Args:
        price_text: Free-text price, e.g. "¥ 177,00".

    Returns:
        Decimal: Parsed amount.
    """
    if not price_text:
        return Decimal("0")

    cleaned = _NON_NUMERIC.sub("", str(price_text)).replace(",", ".", 1)
    match = _LEADING_DECIMAL.match(cleaned)
    if not match:
        return Decimal("0")

    amount = Decimal(match.group(1))
    if not _within_bounds(amount):
        logger.debug(f"Price {price_text!r} out of range, using 0")
        return Decimal("0")
    return amount


def detect_symbol(price_text: str | None) -> str | None:
    """
    Return the first currency-like token in a price string.

    A token is a run of characters that are neither digits, separators
    nor whitespace ("¥ 177,00" -> "¥", "US$10" -> "US$").
    """
    if not price_text:
        return None
    match = _CURRENCY_TOKEN.search(str(price_text))
    return match.group(0) if match else None


def detect_currency_symbol(
    price_texts: Iterable[str | None],
    default: str = DEFAULT_CURRENCY_SYMBOL,
) -> str:
    """
    Detect the currency symbol for a set of product prices.

    The first non-empty price string that carries a symbol wins; prices
    without one are skipped. Falls back to ``default``.
    """
    for text in price_texts:
        symbol = detect_symbol(text)
        if symbol:
            return symbol
    return default


def parse_number(value: Any, default: Decimal | None = Decimal("0")) -> Decimal | None:
    """
    Leniently coerce a field value (quantity, weight, rate) to Decimal.

    Numbers pass through; strings use their leading numeric prefix
    ("12g" -> 12, " 3.5 " -> 3.5). Anything unparseable, non-finite,
    or empty returns ``default``, as does any non-zero magnitude outside
    [1e-12, 1e12].
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    else:
        match = _LEADING_NUMBER.match(str(value))
        if not match:
            return default
        try:
            number = Decimal(match.group(1))
        except InvalidOperation:
            logger.debug(f"Could not coerce {value!r} to a number")
            return default

    if not number.is_finite() or not _within_bounds(number):
        logger.debug(f"Value {value!r} out of range, using {default}")
        return default
    return number


def _within_bounds(number: Decimal) -> bool:
    """Zero, or a magnitude between MIN_MAGNITUDE and MAX_MAGNITUDE."""
    if number.is_zero():
        return True
    return MIN_MAGNITUDE <= number.copy_abs() <= MAX_MAGNITUDE
