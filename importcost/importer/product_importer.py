"""
Product spreadsheet importer module.

Loads product rows (price, quantity, weight) from CSV or Excel files so they
can be added to a calculator session in one go.
"""

import logging
from pathlib import Path
from typing import Any

import pandas as pd

from importcost.pricing.ledger import DEFAULT_QUANTITY, DEFAULT_WEIGHT_GRAMS
from importcost.webapp.exceptions import FileValidationError

logger = logging.getLogger(__name__)


# Common column name variations (English and Portuguese)
COLUMN_VARIANTS = {
    "price": ["price", "Price", "unit_price", "Unit Price", "preco", "preço", "Preço", "Preco"],
    "quantity": ["quantity", "Quantity", "qty", "Qty", "quantidade", "Quantidade"],
    "weight": ["weight", "Weight", "weight_g", "Weight (g)", "peso", "Peso", "Peso (g)"],
}

SUPPORTED_SUFFIXES = {".csv", ".xlsx", ".xls"}


def find_column(df: pd.DataFrame, candidates: list[str]) -> str | None:
    """Find a column in the DataFrame from a list of candidate names."""
    for candidate in candidates:
        if candidate in df.columns:
            return candidate
    return None


def read_product_file(file_path: Path) -> pd.DataFrame:
    """
    Read a product file into a DataFrame.

    All cells are read as text so prices like "¥ 177,00" survive untouched.

    Raises:
        FileNotFoundError: If the file does not exist.
        FileValidationError: If the file format is not supported.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Product file not found: {file_path}")

    suffix = file_path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise FileValidationError(
            f"Unsupported file format: {suffix}. Expected .csv, .xlsx or .xls",
            filename=file_path.name,
        )

    logger.info(f"Loading products from: {file_path}")
    if suffix == ".csv":
        return pd.read_csv(file_path, dtype=str, keep_default_na=False)

    engine = "openpyxl" if suffix == ".xlsx" else "xlrd"
    return pd.read_excel(file_path, engine=engine, dtype=str, keep_default_na=False)


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Rename known column variants to price/quantity/weight.

    Raises:
        FileValidationError: If no price column is present.
    """
    df = df.copy()
    df.columns = [str(c).strip() for c in df.columns]

    rename_map = {}
    for internal, variants in COLUMN_VARIANTS.items():
        col = find_column(df, variants)
        if col and col != internal:
            rename_map[col] = internal

    if rename_map:
        df = df.rename(columns=rename_map)
        logger.debug(f"Renamed columns: {rename_map}")

    if "price" not in df.columns:
        raise FileValidationError(
            f"Missing required price column. Available columns: {list(df.columns)}",
            missing_columns=["price"],
        )

    return df


def dataframe_to_rows(df: pd.DataFrame) -> list[dict[str, Any]]:
    """
    Convert a normalized DataFrame into product rows.

    Missing quantity/weight columns or blank cells take the ledger defaults.
    Rows with every field blank are skipped.
    """
    rows = []
    for record in df.to_dict(orient="records"):
        price = str(record.get("price", "") or "").strip()
        quantity = str(record.get("quantity", "") or "").strip()
        weight = str(record.get("weight", "") or "").strip()

        if not (price or quantity or weight):
            continue

        rows.append(
            {
                "price": price,
                "quantity": quantity or DEFAULT_QUANTITY,
                "weight": weight or DEFAULT_WEIGHT_GRAMS,
            }
        )
    return rows


def load_products(file_path: Path) -> list[dict[str, Any]]:
    """
    Full import pipeline: read, normalize, convert.

    Args:
        file_path: Path to a .csv/.xlsx/.xls file.

    Returns:
        List of {"price", "quantity", "weight"} rows ready for a session.
    """
    df = read_product_file(file_path)
    df = normalize_columns(df)
    rows = dataframe_to_rows(df)
    logger.info(f"Imported {len(rows)} products from {Path(file_path).name}")
    return rows
