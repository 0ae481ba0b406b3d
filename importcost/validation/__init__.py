"""
Validation module.

Flags invalid product fields and blocks recalculation on an invalid ICMS rate.
"""

from importcost.validation.status_codes import FieldStatus
from importcost.validation.validator import ValidationReport, validate_inputs

__all__ = [
    "FieldStatus",
    "ValidationReport",
    "validate_inputs",
]
