"""
Breakdown exporter module.

Writes a calculation result to Excel (Products + Summary sheets) or CSV.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from importcost.pricing.presenter import CurrencyPresenter, DualCurrencyView
from importcost.pricing.pricing_engine import CalculationResult

logger = logging.getLogger(__name__)


def build_products_dataframe(result: CalculationResult) -> pd.DataFrame:
    """One row per product line, in ledger order."""
    rows = [
        {
            "product": index,
            "entry_id": item.entry_id,
            "price_text": item.price_text,
            "unit_price": float(item.unit_price),
            "quantity": float(item.quantity),
            "line_total": float(item.line_total),
        }
        for index, item in enumerate(result.line_items, start=1)
    ]
    columns = ["product", "entry_id", "price_text", "unit_price", "quantity", "line_total"]
    return pd.DataFrame(rows, columns=columns)


def build_summary_dataframe(
    result: CalculationResult,
    presenter: Optional[CurrencyPresenter] = None,
) -> pd.DataFrame:
    """
    Key/value summary of the breakdown.

    Raw values are kept as floats next to the formatted display string.
    """
    presenter = presenter or CurrencyPresenter()
    dual = DualCurrencyView.from_result(result)
    src, tgt = presenter.source, presenter.target

    metrics = [
        ("Subtotal", result.subtotal, src),
        ("Subtotal (converted)", dual.subtotal_target, tgt),
        ("Freight", result.freight, src),
        ("Converted freight", result.converted_freight, tgt),
        ("Import tax", result.import_tax, tgt),
        ("ICMS", result.consumption_tax, tgt),
        ("Grand total", result.grand_total, tgt),
        ("Grand total (converted)", dual.grand_total_source, src),
        ("Average unit cost", result.average_unit_cost, tgt),
        ("Average unit cost (converted)", dual.average_unit_cost_source, src),
    ]
    rows = [
        {"metric": name, "value": float(value), "display": presenter.money(value, symbol)}
        for name, value, symbol in metrics
    ]
    rows.extend(
        [
            {"metric": "Total units", "value": float(result.total_units), "display": ""},
            {"metric": "Total weight (g)", "value": float(result.total_weight), "display": ""},
            {"metric": "Freight blocks", "value": result.freight_blocks, "display": ""},
            {"metric": "Exchange rate", "value": float(result.exchange_rate), "display": result.advisory or ""},
            {"metric": "ICMS rate (%)", "value": float(result.icms_rate), "display": ""},
        ]
    )
    return pd.DataFrame(rows, columns=["metric", "value", "display"])


def write_breakdown(
    result: CalculationResult,
    output_dir: Path,
    filename: Optional[str] = None,
    presenter: Optional[CurrencyPresenter] = None,
) -> Path:
    """
    Write the breakdown to disk.

    ``.xlsx`` filenames get a Products and a Summary sheet; ``.csv``
    filenames get the product lines only.

    Args:
        result: Calculation result to export.
        output_dir: Output directory.
        filename: Optional filename (auto-generated .xlsx if not provided).
        presenter: Presenter used for the display column.

    Returns:
        Path: Path to created file.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if filename is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"import_cost_{timestamp}.xlsx"

    output_path = output_dir / filename
    products_df = build_products_dataframe(result)

    if output_path.suffix.lower() == ".csv":
        products_df.to_csv(output_path, index=False)
    else:
        summary_df = build_summary_dataframe(result, presenter)
        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            products_df.to_excel(writer, sheet_name="Products", index=False)
            summary_df.to_excel(writer, sheet_name="Summary", index=False)

    logger.info(f"Wrote breakdown file: {output_path}")
    return output_path
