"""
Tests for product file import and breakdown export.
"""

from decimal import Decimal
from pathlib import Path

import pandas as pd
import pytest

from importcost.exporter.breakdown_exporter import (
    build_products_dataframe,
    build_summary_dataframe,
    write_breakdown,
)
from importcost.importer.product_importer import load_products, normalize_columns
from importcost.pricing.ledger import ProductLedger
from importcost.pricing.pricing_engine import CalculationResult, PricingEngine
from importcost.webapp.exceptions import FileValidationError


class TestProductImporter:
    """Tests for load_products."""

    def test_csv_english_headers(self, tmp_path: Path) -> None:
        path = tmp_path / "products.csv"
        path.write_text("price,quantity,weight\n\"¥ 177,00\",2,200\n\"¥ 94,40\",1,150\n", encoding="utf-8")

        rows = load_products(path)

        assert rows == [
            {"price": "¥ 177,00", "quantity": "2", "weight": "200"},
            {"price": "¥ 94,40", "quantity": "1", "weight": "150"},
        ]

    def test_csv_portuguese_headers_and_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "produtos.csv"
        path.write_text("Preço,Quantidade\n\"¥ 10,00\",\n,\n\"¥ 5,00\",4\n", encoding="utf-8")

        rows = load_products(path)

        assert len(rows) == 2
        assert rows[0] == {"price": "¥ 10,00", "quantity": Decimal("1"), "weight": Decimal("100")}
        assert rows[1]["quantity"] == "4"

    def test_xlsx(self, tmp_path: Path) -> None:
        path = tmp_path / "products.xlsx"
        pd.DataFrame({"Price": ["¥ 177,00"], "Qty": [2], "Weight (g)": [200]}).to_excel(
            path, index=False, engine="openpyxl"
        )

        rows = load_products(path)

        assert rows == [{"price": "¥ 177,00", "quantity": "2", "weight": "200"}]

    def test_missing_price_column(self, tmp_path: Path) -> None:
        path = tmp_path / "products.csv"
        path.write_text("quantity,weight\n1,100\n", encoding="utf-8")

        with pytest.raises(FileValidationError) as exc_info:
            load_products(path)
        assert exc_info.value.details["missing_columns"] == ["price"]

    def test_unsupported_format(self, tmp_path: Path) -> None:
        path = tmp_path / "products.txt"
        path.write_text("price\n1\n", encoding="utf-8")

        with pytest.raises(FileValidationError):
            load_products(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_products(tmp_path / "nope.csv")

    def test_normalize_strips_header_whitespace(self) -> None:
        df = normalize_columns(pd.DataFrame({" Peso ": ["1"], "preco": ["2"]}))
        assert set(df.columns) == {"weight", "price"}


class TestBreakdownExporter:
    """Tests for the breakdown exporter."""

    @pytest.fixture
    def result(self) -> CalculationResult:
        ledger = ProductLedger()
        ledger.add("¥ 177,00", 2, 200)
        ledger.add("¥ 94,40", 1, 150)
        return PricingEngine().calculate(ledger, exchange_rate="0.847", icms_rate=18)

    def test_products_dataframe(self, result: CalculationResult) -> None:
        df = build_products_dataframe(result)
        assert list(df["product"]) == [1, 2]
        assert list(df["line_total"]) == [354.0, 94.4]

    def test_summary_dataframe(self, result: CalculationResult) -> None:
        df = build_summary_dataframe(result).set_index("metric")
        assert df.loc["Subtotal", "display"] == "¥ 448,40"
        assert df.loc["Freight blocks", "value"] == 4
        assert df.loc["ICMS rate (%)", "value"] == 18.0

    def test_write_xlsx(self, tmp_path: Path, result: CalculationResult) -> None:
        path = write_breakdown(result, tmp_path, filename="breakdown.xlsx")

        sheets = pd.read_excel(path, sheet_name=None, engine="openpyxl")
        assert set(sheets) == {"Products", "Summary"}
        assert len(sheets["Products"]) == 2
        summary = sheets["Summary"].set_index("metric")
        assert summary.loc["Grand total", "value"] == pytest.approx(float(result.grand_total))

    def test_write_csv(self, tmp_path: Path, result: CalculationResult) -> None:
        path = write_breakdown(result, tmp_path / "out", filename="breakdown.csv")

        df = pd.read_csv(path)
        assert list(df.columns) == ["product", "entry_id", "price_text", "unit_price", "quantity", "line_total"]
        assert df["price_text"].tolist() == ["¥ 177,00", "¥ 94,40"]

    def test_default_filename(self, tmp_path: Path, result: CalculationResult) -> None:
        path = write_breakdown(result, tmp_path)
        assert path.name.startswith("import_cost_")
        assert path.suffix == ".xlsx"
