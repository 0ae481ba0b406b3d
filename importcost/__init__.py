"""
Import cost calculator.

Computes product subtotal, weight-tiered freight, import tax and ICMS for a
list of imported products, in both the source and the target currency.
"""

__version__ = "1.0.0"
