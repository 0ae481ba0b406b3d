"""
Breakdown export module.

Handles writing calculation results to Excel or CSV files.
"""

from importcost.exporter.breakdown_exporter import (
    build_products_dataframe,
    build_summary_dataframe,
    write_breakdown,
)

__all__ = [
    "build_products_dataframe",
    "build_summary_dataframe",
    "write_breakdown",
]
