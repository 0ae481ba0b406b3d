"""
Pricing module.

Parses product prices, runs the import-cost pipeline (subtotal, freight,
import tax, ICMS) and renders results in both currencies.
"""

from importcost.pricing.fx_provider import FXProvider, fetch_google_fx_rate, get_fx_rate
from importcost.pricing.ledger import ProductEntry, ProductLedger
from importcost.pricing.money_parser import detect_currency_symbol, parse_amount
from importcost.pricing.pricing_engine import CalculationResult, PricingEngine
from importcost.pricing.presenter import CurrencyPresenter, format_currency

__all__ = [
    "FXProvider",
    "get_fx_rate",
    "fetch_google_fx_rate",
    "ProductEntry",
    "ProductLedger",
    "parse_amount",
    "detect_currency_symbol",
    "CalculationResult",
    "PricingEngine",
    "CurrencyPresenter",
    "format_currency",
]
