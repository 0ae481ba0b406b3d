"""
Tests for the pricing engine module.
"""

from decimal import Decimal

import pytest

from importcost.pricing.ledger import ProductLedger
from importcost.pricing.pricing_engine import (
    DEGRADED_FX_ADVISORY,
    PricingEngine,
    calculate_consumption_tax,
    calculate_freight,
    calculate_import_tax,
    calculate_subtotal,
    convert_freight,
)
from importcost.utils.config_loader import AppConfig


class TestFreight:
    """Tests for the weight-tier freight calculation."""

    @pytest.mark.parametrize(
        "weight,blocks,freight",
        [
            (0, 0, 0),
            (-50, 0, 0),
            (1, 1, 50),
            (100, 1, 50),
            (101, 2, 61),
            (200, 2, 61),
            (350, 4, 83),
            (1000, 10, 149),
        ],
    )
    def test_freight_tiers(self, weight: int, blocks: int, freight: int) -> None:
        """Test block count = ceil(w/100) and freight = 50 + (blocks-1)*11."""
        quote = calculate_freight(Decimal(weight))
        assert quote.blocks == blocks
        assert quote.freight == Decimal(freight)

    def test_fractional_weight(self) -> None:
        quote = calculate_freight(Decimal("100.5"))
        assert quote.blocks == 2


class TestPipelineSteps:
    """Tests for the individual pipeline functions."""

    def test_convert_freight(self) -> None:
        assert convert_freight(Decimal("61"), Decimal("0.847")) == Decimal("51.667")

    def test_convert_freight_without_rate(self) -> None:
        assert convert_freight(Decimal("61"), Decimal("0")) == Decimal("0")
        assert convert_freight(Decimal("61"), Decimal("-1")) == Decimal("0")

    def test_import_tax_is_sixty_percent(self) -> None:
        assert calculate_import_tax(Decimal("100"), Decimal("50")) == Decimal("90")

    def test_consumption_tax_on_tax(self) -> None:
        # 18% of (100 + 50 + 90)
        assert calculate_consumption_tax(
            Decimal("100"), Decimal("50"), Decimal("90"), Decimal("18")
        ) == Decimal("43.2")

    def test_subtotal_uses_raw_quantities(self) -> None:
        ledger = ProductLedger()
        ledger.add("¥ 10,00", -1, 100)
        ledger.add("¥ 5,00", 3, 100)
        subtotal, symbol, items = calculate_subtotal(ledger)
        assert subtotal == Decimal("5.00")
        assert symbol == "¥"
        assert [item.line_total for item in items] == [Decimal("-10.00"), Decimal("15.00")]


class TestPricingEngine:
    """Tests for PricingEngine.calculate."""

    @pytest.fixture
    def engine(self) -> PricingEngine:
        """Create test pricing engine."""
        return PricingEngine(AppConfig())

    @pytest.fixture
    def ledger(self) -> ProductLedger:
        """Single reference product."""
        ledger = ProductLedger()
        ledger.add("¥ 177,00", 2, 200)
        return ledger

    def test_reference_scenario(self, engine: PricingEngine, ledger: ProductLedger) -> None:
        """Test the full pipeline for one product at rate 0.847 and ICMS 18%."""
        result = engine.calculate(ledger, exchange_rate=0.847, icms_rate=18)

        assert result.subtotal == Decimal("354.00")
        assert result.freight_blocks == 2
        assert result.freight == Decimal("61")
        assert result.converted_freight == Decimal("51.667")
        assert result.import_tax == Decimal("243.4002")
        assert result.consumption_tax == Decimal("116.832096")
        assert result.grand_total == Decimal("765.899296")
        assert result.total_units == Decimal("2")
        assert result.average_unit_cost == Decimal("382.949648")
        assert result.total_weight == Decimal("200")
        assert result.currency_symbol == "¥"
        assert result.fx_degraded is False
        assert result.advisory is None

    def test_grand_total_identity(self, engine: PricingEngine) -> None:
        """Test grand total is exactly the sum of its components."""
        ledger = ProductLedger()
        ledger.add("¥ 19,99", 3, 333)
        ledger.add("US$ 0,07", 7, 1)
        ledger.add("garbage", 0, 0)
        result = engine.calculate(ledger, exchange_rate="0.7731", icms_rate="17.5")

        assert result.grand_total == (
            result.subtotal + result.converted_freight + result.import_tax + result.consumption_tax
        )

    def test_degraded_mode_without_rate(self, engine: PricingEngine, ledger: ProductLedger) -> None:
        """Test a missing rate forces converted freight to 0 and flags it."""
        result = engine.calculate(ledger, exchange_rate=0, icms_rate=18)

        assert result.converted_freight == Decimal("0")
        assert result.freight == Decimal("61")
        assert result.fx_degraded is True
        assert result.advisory == DEGRADED_FX_ADVISORY
        assert result.import_tax == Decimal("0.60") * Decimal("354.00")

    @pytest.mark.parametrize("rate", [-2, "abc", None])
    def test_invalid_rate_is_unknown(self, engine: PricingEngine, ledger: ProductLedger, rate) -> None:
        result = engine.calculate(ledger, exchange_rate=rate)
        assert result.exchange_rate == Decimal("0")
        assert result.fx_degraded is True

    def test_zero_units_gives_zero_unit_cost(self, engine: PricingEngine) -> None:
        """Test no division error when the only product has quantity 0."""
        ledger = ProductLedger()
        ledger.add("¥ 177,00", 0, 200)
        result = engine.calculate(ledger, exchange_rate=0.847)

        assert result.total_units == Decimal("0")
        assert result.average_unit_cost == Decimal("0")

    def test_default_icms_rate(self, engine: PricingEngine, ledger: ProductLedger) -> None:
        result = engine.calculate(ledger, exchange_rate=1)
        assert result.icms_rate == Decimal("18")

    def test_configured_default_icms_rate(self, ledger: ProductLedger) -> None:
        config = AppConfig()
        config.tax.default_icms_rate = 12
        result = PricingEngine(config).calculate(ledger, exchange_rate=1)
        assert result.icms_rate == Decimal("12")

    def test_idempotent(self, engine: PricingEngine, ledger: ProductLedger) -> None:
        """Test recomputing with unchanged inputs gives an identical result."""
        first = engine.calculate(ledger, exchange_rate=0.847, icms_rate=18)
        second = engine.calculate(ledger, exchange_rate=0.847, icms_rate=18)
        assert first == second

    def test_empty_ledger(self, engine: PricingEngine) -> None:
        result = engine.calculate([], exchange_rate=0.847)
        assert result.subtotal == Decimal("0")
        assert result.freight == Decimal("0")
        assert result.freight_blocks == 0
        assert result.grand_total == Decimal("0")
        assert result.currency_symbol == "¥"

    def test_invalid_entries_still_aggregate(self, engine: PricingEngine) -> None:
        """Test non-positive weights still count toward total weight."""
        ledger = ProductLedger()
        ledger.add("¥ 10,00", 1, 250)
        ledger.add("¥ 10,00", 1, -100)
        result = engine.calculate(ledger, exchange_rate=1)
        assert result.total_weight == Decimal("150")
        assert result.freight_blocks == 2

    def test_to_dict(self, engine: PricingEngine, ledger: ProductLedger) -> None:
        data = engine.calculate(ledger, exchange_rate=0.847).to_dict()
        assert data["subtotal"] == pytest.approx(354.0)
        assert data["freight_blocks"] == 2
        assert data["fx_degraded"] is False
        assert data["line_items"][0]["entry_id"] == 1
