"""
Product import module.

Handles loading product rows from CSV and Excel files.
"""

from importcost.importer.product_importer import load_products, normalize_columns

__all__ = ["load_products", "normalize_columns"]
