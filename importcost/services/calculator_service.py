"""
Calculator service for the import cost calculator.

Holds one calculator session (product ledger + configuration) and recomputes
the breakdown after every edit. Callers (CLI, web routes) only talk to this
layer.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable

from importcost.pricing.fx_provider import FXProvider
from importcost.pricing.ledger import DEFAULT_QUANTITY, DEFAULT_WEIGHT_GRAMS, ProductEntry, ProductLedger
from importcost.pricing.money_parser import parse_number
from importcost.pricing.presenter import CurrencyPresenter
from importcost.pricing.pricing_engine import CalculationResult, PricingEngine
from importcost.utils.config_loader import AppConfig
from importcost.validation.validator import ValidationReport, validate_inputs
from importcost.webapp.exceptions import ProductNotFoundError, ValidationError

logger = logging.getLogger(__name__)

# Reference products: (price, quantity, weight in grams)
EXAMPLE_PRODUCTS = [
    ("¥ 177,00", 2, 200),
    ("¥ 94,40", 1, 150),
]
EXAMPLE_EXCHANGE_RATE = "0.847"


@dataclass
class RecalculationOutcome:
    """
    Outcome of one edit-triggered recalculation.

    When ``blocked`` is True the result and trace are the ones from the last
    successful pass (or None if there was none).
    """

    result: CalculationResult | None
    trace: str | None
    validation: ValidationReport = field(default_factory=ValidationReport)
    blocked: bool = False

    @property
    def advisory(self) -> str | None:
        return self.result.advisory if self.result else None


class CalculatorSession:
    """
    Explicit session context: the ledger plus the two configuration scalars.

    Every mutating operation recomputes and returns a RecalculationOutcome,
    so callers never see stale derived state except when the ICMS rate is
    out of range.

    Attributes:
        config: Application configuration.
        ledger: Product entries.
        exchange_rate: Current source → target rate (0 = unknown).
        icms_rate: Current ICMS percentage, None when absent/unparseable.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        """
        Initialize a session.

        Args:
            config: Application configuration (defaults if not provided).
        """
        self.config = config or AppConfig()
        self.engine = PricingEngine(self.config)
        self.presenter = CurrencyPresenter(self.config.display)
        self.fx_provider = FXProvider(self.config)
        self.ledger = ProductLedger()
        self.exchange_rate: Decimal = self.fx_provider.get_rate()
        self.icms_rate: Decimal | None = None
        self.result: CalculationResult | None = None
        self.trace: str | None = None
        self.last_outcome: RecalculationOutcome | None = None
        self.logger = logging.getLogger(f"{__name__}.CalculatorSession")

    # ------------------------------------------------------------------
    # Ledger operations
    # ------------------------------------------------------------------

    def add_product(
        self,
        price: str | None = "",
        quantity: Any = DEFAULT_QUANTITY,
        weight: Any = DEFAULT_WEIGHT_GRAMS,
    ) -> RecalculationOutcome:
        """Add a product and recompute."""
        entry = self.ledger.add(price, quantity, weight)
        self.logger.info(f"Added product {entry.id}")
        return self.recompute()

    def add_products(self, rows: Iterable[dict[str, Any]]) -> RecalculationOutcome:
        """Add several products (e.g. from an imported file) and recompute once."""
        count = 0
        for row in rows:
            self.ledger.add(
                row.get("price", ""),
                row.get("quantity", DEFAULT_QUANTITY),
                row.get("weight", DEFAULT_WEIGHT_GRAMS),
            )
            count += 1
        self.logger.info(f"Added {count} products")
        return self.recompute()

    def update_product(self, product_id: int, field_name: str, value: Any) -> RecalculationOutcome:
        """
        Update one field of a product and recompute.

        Raises:
            ProductNotFoundError: If no product has that id.
            ValidationError: If the field name is not editable.
        """
        try:
            entry = self.ledger.update(product_id, field_name, value)
        except ValueError as e:
            raise ValidationError(str(e), details={"field": field_name}) from e
        if entry is None:
            raise ProductNotFoundError(product_id)
        return self.recompute()

    def remove_product(self, product_id: int) -> RecalculationOutcome:
        """
        Remove a product and recompute.

        Raises:
            ProductNotFoundError: If no product has that id.
        """
        if not self.ledger.remove(product_id):
            raise ProductNotFoundError(product_id)
        self.logger.info(f"Removed product {product_id}")
        return self.recompute()

    def get_product(self, product_id: int) -> ProductEntry:
        entry = self.ledger.get(product_id)
        if entry is None:
            raise ProductNotFoundError(product_id)
        return entry

    # ------------------------------------------------------------------
    # Configuration setters
    # ------------------------------------------------------------------

    def set_exchange_rate(self, value: Any) -> RecalculationOutcome:
        """
        Set the exchange rate from raw input and recompute.

        Unparseable, zero or negative input means "unknown" (degraded mode).
        """
        rate = parse_number(value)
        self.exchange_rate = rate if rate > 0 else Decimal("0")
        if self.exchange_rate > 0:
            self.fx_provider.set_manual_rate(float(self.exchange_rate))
            if not self.fx_provider.validate_rate(float(self.exchange_rate)):
                self.logger.warning(f"Exchange rate {self.exchange_rate} is outside the expected range")
        else:
            self.fx_provider.clear_manual_rate()
        self.logger.info(f"Exchange rate set to {self.exchange_rate}")
        return self.recompute()

    def set_icms_rate(self, value: Any) -> RecalculationOutcome:
        """
        Set the ICMS rate from raw input and recompute.

        Absent or unparseable input falls back to the configured default;
        out-of-range input blocks recalculation until corrected.
        """
        self.icms_rate = parse_number(value, default=None)
        self.logger.info(f"ICMS rate set to {self.icms_rate}")
        return self.recompute()

    # ------------------------------------------------------------------
    # Session-level operations
    # ------------------------------------------------------------------

    def load_examples(self) -> RecalculationOutcome:
        """Seed the session with the reference products and exchange rate."""
        for price, quantity, weight in EXAMPLE_PRODUCTS:
            self.ledger.add(price, quantity, weight)
        return self.set_exchange_rate(EXAMPLE_EXCHANGE_RATE)

    def reset(self) -> RecalculationOutcome:
        """Clear products and restore configured defaults."""
        self.ledger.clear()
        self.fx_provider.clear_manual_rate()
        self.exchange_rate = self.fx_provider.get_rate()
        self.icms_rate = None
        self.result = None
        self.trace = None
        self.logger.info("Session reset")
        return self.recompute()

    @property
    def effective_icms_rate(self) -> Decimal:
        """ICMS rate a pass would use: the input, or the configured default."""
        return self.icms_rate if self.icms_rate is not None else self.engine.default_icms_rate

    def recompute(self) -> RecalculationOutcome:
        """
        Validate and recompute from the current ledger and configuration.

        Returns:
            RecalculationOutcome: Fresh result, or the previous one if blocked.
        """
        report = validate_inputs(self.ledger, self.effective_icms_rate)

        if report.blocks_recalculation:
            outcome = RecalculationOutcome(
                result=self.result,
                trace=self.trace,
                validation=report,
                blocked=True,
            )
        else:
            self.result = self.engine.calculate(self.ledger, self.exchange_rate, self.icms_rate)
            self.trace = self.presenter.build_trace(self.result)
            outcome = RecalculationOutcome(
                result=self.result,
                trace=self.trace,
                validation=report,
                blocked=False,
            )

        self.last_outcome = outcome
        return outcome

    def state(self) -> dict[str, Any]:
        """
        Snapshot of the session for display.

        Returns:
            dict: Products, configuration, result, formatted values,
            validation flags and trace.
        """
        outcome = self.last_outcome or self.recompute()
        result = outcome.result
        return {
            "products": [entry.to_dict() for entry in self.ledger],
            "config": {
                "exchange_rate": float(self.exchange_rate),
                "icms_rate": float(self.icms_rate) if self.icms_rate is not None else None,
            },
            "blocked": outcome.blocked,
            "validation": outcome.validation.to_dict(),
            "result": result.to_dict() if result else None,
            "display": self.presenter.summary(result) if result else None,
            "advisory": outcome.advisory,
            "trace": outcome.trace,
        }
