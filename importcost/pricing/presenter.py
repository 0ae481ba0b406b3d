"""
Currency presenter module.

Formats amounts for display, derives the dual-currency figures, and renders
the plain-text calculation trace for a CalculationResult.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext

from importcost.pricing.pricing_engine import (
    FREIGHT_EXTRA_BLOCK,
    FREIGHT_FIRST_BLOCK,
    IMPORT_TAX_RATE,
    ZERO,
    CalculationResult,
)
from importcost.utils.config_loader import DisplayConfig

CENTS = Decimal("0.01")
TRACE_RULE = "=" * 32


def format_currency(
    amount: Decimal | float | int,
    symbol: str = "R$",
    thousands_sep: str = ".",
    decimal_sep: str = ",",
) -> str:
    """
    Format an amount as "<symbol> <grouped amount>" with two decimals.

    Defaults follow pt-BR punctuation: format_currency(1234.5) -> "R$ 1.234,50".
    """
    value = Decimal(str(amount))
    with localcontext() as ctx:
        # Enough digits for every integer place plus the cents
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        value = value.quantize(CENTS, rounding=ROUND_HALF_UP)
    if value == 0:
        value = abs(value)

    text = f"{value:,.2f}"
    text = text.replace(",", "\x00").replace(".", decimal_sep).replace("\x00", thousands_sep)
    return f"{symbol} {text}"


def format_number(value: Decimal | float | int) -> str:
    """Plain number without trailing zeros: 18 -> "18", 0.8470 -> "0.847"."""
    value = Decimal(str(value))
    if value == value.to_integral_value():
        return f"{value.to_integral_value():f}"
    return f"{value.normalize():f}"


def format_fixed(value: Decimal) -> str:
    """Two-decimal plain number, "61.00"."""
    return f"{Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP):.2f}"


@dataclass
class DualCurrencyView:
    """
    Counterpart figures in the "other" currency.

    The subtotal is a source-currency figure, so its counterpart is
    multiplied by the rate. Taxes, the grand total and the unit cost are
    target-currency figures, so theirs are divided by the rate. Every
    counterpart is 0 when no exchange rate is available.
    """

    subtotal_target: Decimal
    import_tax_base: Decimal
    import_tax_base_source: Decimal
    import_tax_source: Decimal
    consumption_tax_base: Decimal
    consumption_tax_base_source: Decimal
    consumption_tax_source: Decimal
    grand_total_source: Decimal
    average_unit_cost_source: Decimal

    @classmethod
    def from_result(cls, result: CalculationResult) -> "DualCurrencyView":
        rate = result.exchange_rate
        available = rate > 0

        def to_source(value: Decimal) -> Decimal:
            return value / rate if available else ZERO

        import_tax_base = result.subtotal + result.converted_freight
        consumption_tax_base = import_tax_base + result.import_tax
        grand_total_source = to_source(result.grand_total)

        if available and result.total_units > 0:
            average_unit_cost_source = grand_total_source / result.total_units
        else:
            average_unit_cost_source = ZERO

        return cls(
            subtotal_target=result.subtotal * rate if available else ZERO,
            import_tax_base=import_tax_base,
            import_tax_base_source=to_source(import_tax_base),
            import_tax_source=to_source(result.import_tax),
            consumption_tax_base=consumption_tax_base,
            consumption_tax_base_source=to_source(consumption_tax_base),
            consumption_tax_source=to_source(result.consumption_tax),
            grand_total_source=grand_total_source,
            average_unit_cost_source=average_unit_cost_source,
        )


class CurrencyPresenter:
    """
    Renders calculation results for display.

    Attributes:
        display: Currency symbols and separators.
    """

    def __init__(self, display: DisplayConfig | None = None) -> None:
        self.display = display or DisplayConfig()

    @property
    def source(self) -> str:
        return self.display.source_symbol

    @property
    def target(self) -> str:
        return self.display.target_symbol

    def money(self, amount: Decimal, symbol: str) -> str:
        """Format with the configured separators."""
        return format_currency(
            amount,
            symbol,
            thousands_sep=self.display.thousands_separator,
            decimal_sep=self.display.decimal_separator,
        )

    def summary(self, result: CalculationResult) -> dict[str, str | None]:
        """Formatted display values, one per result field, in both currencies."""
        dual = DualCurrencyView.from_result(result)
        src, tgt = self.source, self.target
        return {
            "subtotal_source": self.money(result.subtotal, src),
            "subtotal_target": self.money(dual.subtotal_target, tgt),
            "freight_source": self.money(result.freight, src),
            "converted_freight": self.money(result.converted_freight, tgt),
            "import_tax_source": self.money(dual.import_tax_source, src),
            "import_tax_target": self.money(result.import_tax, tgt),
            "consumption_tax_source": self.money(dual.consumption_tax_source, src),
            "consumption_tax_target": self.money(result.consumption_tax, tgt),
            "grand_total_source": self.money(dual.grand_total_source, src),
            "grand_total_target": self.money(result.grand_total, tgt),
            "total_units": format_number(result.total_units),
            "average_unit_cost_source": self.money(dual.average_unit_cost_source, src),
            "average_unit_cost_target": self.money(result.average_unit_cost, tgt),
            "advisory": result.advisory,
        }

    def build_trace(self, result: CalculationResult) -> str:
        """
        Render the step-by-step calculation trace.

        Sections are always in the same order: products, freight, import
        tax, ICMS, total, unit cost. Counterpart figures are only included
        when an exchange rate is available.
        """
        dual = DualCurrencyView.from_result(result)
        has_rate = not result.fx_degraded
        src, tgt = self.source, self.target
        symbol = result.currency_symbol
        money = self.money

        lines = ["CALCULATION BREAKDOWN", TRACE_RULE, ""]

        lines.append("1. PRODUCTS:")
        for index, item in enumerate(result.line_items, start=1):
            lines.append(
                f"   Product {index}: {item.price_text} × {format_number(item.quantity)} = "
                f"{money(item.line_total, symbol)}"
            )
        subtotal = f"   Subtotal: {money(result.subtotal, symbol)}"
        if has_rate:
            subtotal += f" = {money(dual.subtotal_target, tgt)}"
        lines.extend([subtotal, ""])

        lines.append("2. FREIGHT:")
        lines.append(f"   Total weight: {format_number(result.total_weight)}g")
        lines.append(f"   100g blocks: {result.freight_blocks}")
        if result.freight_blocks <= 1:
            lines.append(f"   Calculation: first 100g = {src}{format_fixed(FREIGHT_FIRST_BLOCK)}")
        else:
            lines.append(
                f"   Calculation: {src}{format_fixed(FREIGHT_FIRST_BLOCK)} + "
                f"({result.freight_blocks - 1} × {src}{format_fixed(FREIGHT_EXTRA_BLOCK)}) = "
                f"{src}{format_fixed(result.freight)}"
            )
        lines.append(f"   Freight in {src}: {money(result.freight, src)}")
        if has_rate:
            inverse = Decimal("1") / result.exchange_rate
            lines.append(
                f"   Exchange rate: {format_number(result.exchange_rate)} "
                f"({money(Decimal('1'), tgt)} = {money(inverse, src)})"
            )
            lines.append(
                f"   Converted freight: {src}{format_fixed(result.freight)} × "
                f"{format_number(result.exchange_rate)} = {money(result.converted_freight, tgt)}"
            )
        else:
            lines.append(f"   WARNING: {result.advisory}")
        lines.append("")

        rate_pct = format_number(IMPORT_TAX_RATE * 100)
        lines.append(f"3. IMPORT TAX ({rate_pct}%):")
        base = (
            f"   Base: {money(result.subtotal, symbol)} + {money(result.converted_freight, tgt)} = "
            f"{money(dual.import_tax_base, tgt)}"
        )
        if has_rate:
            base += f" = {money(dual.import_tax_base_source, src)}"
        tax = f"   Import tax: {money(dual.import_tax_base, tgt)} × {rate_pct}% = {money(result.import_tax, tgt)}"
        if has_rate:
            tax += f" = {money(dual.import_tax_source, src)}"
        lines.extend([base, tax, ""])

        icms_pct = format_number(result.icms_rate)
        lines.append(f"4. ICMS ({icms_pct}%):")
        base = f"   Base: {money(dual.consumption_tax_base, tgt)}"
        if has_rate:
            base += f" = {money(dual.consumption_tax_base_source, src)}"
        tax = (
            f"   ICMS: {money(dual.consumption_tax_base, tgt)} × {icms_pct}% = "
            f"{money(result.consumption_tax, tgt)}"
        )
        if has_rate:
            tax += f" = {money(dual.consumption_tax_source, src)}"
        lines.extend([base, tax, ""])

        lines.append("5. TOTAL:")
        lines.append(f"   Total in {tgt}: {money(result.grand_total, tgt)}")
        if has_rate:
            lines.append(f"   Total in {src}: {money(dual.grand_total_source, src)}")
        lines.append("")

        lines.append("6. UNIT COST:")
        lines.append(f"   Average cost in {tgt}: {money(result.average_unit_cost, tgt)} per unit")
        if has_rate:
            lines.append(f"   Average cost in {src}: {money(dual.average_unit_cost_source, src)} per unit")

        return "\n".join(lines)
