"""
Pricing engine module.

Computes the import-cost breakdown for a set of products.

Pipeline:
    subtotal          = Σ price × quantity
    freight           = tiered by total weight (source currency)
    converted_freight = freight × R                    (0 when R is unknown)
    import_tax        = 0.60 × (subtotal + converted_freight)
    consumption_tax   = icms% × (subtotal + converted_freight + import_tax)
    grand_total       = subtotal + converted_freight + import_tax + consumption_tax

Where R is the source → target exchange rate. All arithmetic uses Decimal;
nothing is rounded until display.
"""

import logging
from dataclasses import dataclass, field
from decimal import ROUND_CEILING, Decimal
from typing import Any, Iterable

from importcost.pricing.ledger import ProductEntry
from importcost.pricing.money_parser import (
    DEFAULT_CURRENCY_SYMBOL,
    detect_currency_symbol,
    parse_amount,
    parse_number,
)
from importcost.utils.config_loader import AppConfig

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

FREIGHT_BLOCK_GRAMS = Decimal("100")
FREIGHT_FIRST_BLOCK = Decimal("50")
FREIGHT_EXTRA_BLOCK = Decimal("11")

IMPORT_TAX_RATE = Decimal("0.60")
DEFAULT_ICMS_RATE = Decimal("18")

DEGRADED_FX_ADVISORY = "Exchange rate not provided: converted-currency figures are shown as zero."


@dataclass
class LineItem:
    """Per-product contribution to the subtotal."""

    entry_id: int
    price_text: str
    unit_price: Decimal
    quantity: Decimal
    line_total: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_id": self.entry_id,
            "price_text": self.price_text,
            "unit_price": float(self.unit_price),
            "quantity": float(self.quantity),
            "line_total": float(self.line_total),
        }


@dataclass
class FreightQuote:
    """Result of the weight-tier freight calculation."""

    freight: Decimal
    blocks: int
    total_weight: Decimal


@dataclass
class CalculationResult:
    """
    Full import-cost breakdown for one recalculation pass.

    Monetary fields are unrounded Decimals. ``subtotal`` and ``freight``
    are in the source currency; ``converted_freight`` and the figures
    derived from it are in the target currency.

    Attributes:
        subtotal: Σ price × quantity.
        currency_symbol: Symbol detected from the product prices.
        freight: Freight in the source currency.
        converted_freight: Freight × exchange rate (0 in degraded mode).
        import_tax: Fixed 60% levy.
        consumption_tax: ICMS levy.
        grand_total: Sum of the four components above.
        total_units: Σ quantity (unclamped).
        average_unit_cost: grand_total / total_units, or 0.
        freight_blocks: Number of 100g freight blocks.
        total_weight: Σ weight in grams.
        exchange_rate: Rate used (0 when unknown).
        icms_rate: ICMS percentage used.
        line_items: Per-product subtotal lines, in ledger order.
    """

    subtotal: Decimal
    currency_symbol: str
    freight: Decimal
    converted_freight: Decimal
    import_tax: Decimal
    consumption_tax: Decimal
    grand_total: Decimal
    total_units: Decimal
    average_unit_cost: Decimal
    freight_blocks: int
    total_weight: Decimal
    exchange_rate: Decimal = ZERO
    icms_rate: Decimal = DEFAULT_ICMS_RATE
    line_items: list[LineItem] = field(default_factory=list)

    @property
    def fx_degraded(self) -> bool:
        """True when no usable exchange rate was available."""
        return self.exchange_rate <= 0

    @property
    def advisory(self) -> str | None:
        """Message to surface to the user in degraded mode."""
        return DEGRADED_FX_ADVISORY if self.fx_degraded else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "subtotal": float(self.subtotal),
            "currency_symbol": self.currency_symbol,
            "freight": float(self.freight),
            "converted_freight": float(self.converted_freight),
            "import_tax": float(self.import_tax),
            "consumption_tax": float(self.consumption_tax),
            "grand_total": float(self.grand_total),
            "total_units": float(self.total_units),
            "average_unit_cost": float(self.average_unit_cost),
            "freight_blocks": self.freight_blocks,
            "total_weight": float(self.total_weight),
            "exchange_rate": float(self.exchange_rate),
            "icms_rate": float(self.icms_rate),
            "fx_degraded": self.fx_degraded,
            "advisory": self.advisory,
            "line_items": [item.to_dict() for item in self.line_items],
        }


def calculate_subtotal(
    entries: Iterable[ProductEntry],
    default_symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> tuple[Decimal, str, list[LineItem]]:
    """
    Sum price × quantity over all entries.

    Quantities are used as given, so zero or negative quantities still
    contribute.

    Returns:
        Tuple of (subtotal, detected currency symbol, line items).
    """
    entries = list(entries)
    subtotal = ZERO
    line_items = []

    for entry in entries:
        unit_price = parse_amount(entry.price)
        line_total = unit_price * entry.quantity
        subtotal += line_total
        line_items.append(
            LineItem(
                entry_id=entry.id,
                price_text=entry.price,
                unit_price=unit_price,
                quantity=entry.quantity,
                line_total=line_total,
            )
        )

    symbol = detect_currency_symbol((e.price for e in entries), default=default_symbol)
    return subtotal, symbol, line_items


def freight_blocks(total_weight: Decimal) -> int:
    """Number of started 100g blocks; 0 for non-positive weight."""
    if total_weight <= 0:
        return 0
    return int((total_weight / FREIGHT_BLOCK_GRAMS).to_integral_value(rounding=ROUND_CEILING))


def calculate_freight(total_weight: Decimal) -> FreightQuote:
    """
    Weight-tiered freight in the source currency.

    The first 100g block costs 50; each further started block adds 11.
    Non-positive weight means no freight.
    """
    total_weight = Decimal(total_weight)
    blocks = freight_blocks(total_weight)

    if blocks == 0:
        freight = ZERO
    elif blocks <= 1:
        freight = FREIGHT_FIRST_BLOCK
    else:
        freight = FREIGHT_FIRST_BLOCK + (blocks - 1) * FREIGHT_EXTRA_BLOCK

    return FreightQuote(freight=freight, blocks=blocks, total_weight=total_weight)


def convert_freight(freight: Decimal, exchange_rate: Decimal) -> Decimal:
    """Convert freight to the target currency; 0 when the rate is unknown."""
    if not exchange_rate or exchange_rate <= 0:
        return ZERO
    return freight * exchange_rate


def calculate_import_tax(subtotal: Decimal, converted_freight: Decimal) -> Decimal:
    """Fixed 60% import tax on subtotal plus converted freight."""
    return IMPORT_TAX_RATE * (subtotal + converted_freight)


def calculate_consumption_tax(
    subtotal: Decimal,
    converted_freight: Decimal,
    import_tax: Decimal,
    icms_rate: Decimal,
) -> Decimal:
    """ICMS levied on subtotal + converted freight + import tax."""
    base = subtotal + converted_freight + import_tax
    return (icms_rate / Decimal("100")) * base


class PricingEngine:
    """
    Engine for computing import-cost breakdowns.

    Stateless apart from configuration: every call re-derives the result
    from the entries and rates it is given.

    Attributes:
        config: Application configuration.
        default_icms_rate: ICMS rate used when none is supplied.
        default_symbol: Currency symbol used when none is detected.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        """
        Initialize the pricing engine.

        Args:
            config: Application configuration (defaults if not provided).
        """
        self.config = config or AppConfig()
        self.default_icms_rate = Decimal(str(self.config.tax.default_icms_rate))
        self.default_symbol = self.config.display.source_symbol or DEFAULT_CURRENCY_SYMBOL

    def calculate(
        self,
        entries: Iterable[ProductEntry],
        exchange_rate: Decimal | float | None = None,
        icms_rate: Decimal | float | None = None,
    ) -> CalculationResult:
        """
        Run the full pipeline over a snapshot of entries.

        Args:
            entries: Product entries (ledger order).
            exchange_rate: Source → target rate; None, 0, negative or unparseable = unknown.
            icms_rate: ICMS percentage; None or unparseable uses the configured default.

        Returns:
            CalculationResult: The breakdown.
        """
        entries = list(entries)
        rate = parse_number(exchange_rate)
        icms = parse_number(icms_rate, default=None)
        if icms is None:
            icms = self.default_icms_rate

        subtotal, symbol, line_items = calculate_subtotal(entries, default_symbol=self.default_symbol)

        total_weight = sum((e.weight for e in entries), ZERO)
        quote = calculate_freight(total_weight)

        converted_freight = convert_freight(quote.freight, rate)
        if rate <= 0:
            logger.info("No valid exchange rate; converted freight forced to 0")

        import_tax = calculate_import_tax(subtotal, converted_freight)
        consumption_tax = calculate_consumption_tax(subtotal, converted_freight, import_tax, icms)
        grand_total = subtotal + converted_freight + import_tax + consumption_tax

        total_units = sum((e.quantity for e in entries), ZERO)
        average_unit_cost = grand_total / total_units if total_units > 0 else ZERO

        logger.debug(
            f"Calculated {len(entries)} products: subtotal={subtotal}, freight={quote.freight} "
            f"({quote.blocks} blocks), total={grand_total}"
        )

        return CalculationResult(
            subtotal=subtotal,
            currency_symbol=symbol,
            freight=quote.freight,
            converted_freight=converted_freight,
            import_tax=import_tax,
            consumption_tax=consumption_tax,
            grand_total=grand_total,
            total_units=total_units,
            average_unit_cost=average_unit_cost,
            freight_blocks=quote.blocks,
            total_weight=quote.total_weight,
            exchange_rate=rate if rate > 0 else ZERO,
            icms_rate=icms,
            line_items=line_items,
        )
