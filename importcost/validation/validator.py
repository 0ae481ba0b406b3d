"""
Input validation for the calculator.

Two levels:
- ICMS rate outside [0, 100] is a hard failure that blocks recalculation.
- Non-positive quantity or weight is a soft flag; the entry still counts.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable

from importcost.pricing.ledger import ProductEntry
from importcost.validation.status_codes import FieldStatus, get_status_description

logger = logging.getLogger(__name__)

ICMS_MIN = Decimal("0")
ICMS_MAX = Decimal("100")


@dataclass
class ValidationReport:
    """
    Result of validating the current inputs.

    Attributes:
        icms_status: Status of the ICMS rate field.
        entry_flags: Entry id -> {field name: status} for flagged fields only.
    """

    icms_status: FieldStatus = FieldStatus.OK
    entry_flags: dict[int, dict[str, FieldStatus]] = field(default_factory=dict)

    @property
    def blocks_recalculation(self) -> bool:
        """True when the recalculation must be skipped."""
        return self.icms_status != FieldStatus.OK

    @property
    def has_flags(self) -> bool:
        return self.blocks_recalculation or bool(self.entry_flags)

    def to_dict(self) -> dict[str, Any]:
        return {
            "icms_status": self.icms_status.value,
            "icms_message": get_status_description(self.icms_status),
            "blocks_recalculation": self.blocks_recalculation,
            "entry_flags": {
                str(entry_id): {name: status.value for name, status in flags.items()}
                for entry_id, flags in self.entry_flags.items()
            },
        }


def check_icms_rate(icms_rate: Decimal | None) -> FieldStatus:
    """
    Check the ICMS rate range.

    None (absent or unparseable input) is not out of range; the engine
    substitutes the default rate for it.
    """
    if icms_rate is None:
        return FieldStatus.OK
    if icms_rate < ICMS_MIN or icms_rate > ICMS_MAX:
        return FieldStatus.OUT_OF_RANGE
    return FieldStatus.OK


def flag_entry(entry: ProductEntry) -> dict[str, FieldStatus]:
    """Return the non-positive fields of an entry."""
    flags = {}
    if entry.quantity <= 0:
        flags["quantity"] = FieldStatus.NON_POSITIVE
    if entry.weight <= 0:
        flags["weight"] = FieldStatus.NON_POSITIVE
    return flags


def validate_inputs(entries: Iterable[ProductEntry], icms_rate: Decimal | None) -> ValidationReport:
    """
    Validate the ledger and configuration before a recalculation.

    Args:
        entries: Current product entries.
        icms_rate: Parsed ICMS rate, or None if absent/unparseable.

    Returns:
        ValidationReport: Field flags and whether recalculation is blocked.
    """
    report = ValidationReport(icms_status=check_icms_rate(icms_rate))

    for entry in entries:
        flags = flag_entry(entry)
        if flags:
            report.entry_flags[entry.id] = flags

    if report.blocks_recalculation:
        logger.warning(f"ICMS rate {icms_rate} outside [{ICMS_MIN}, {ICMS_MAX}]; recalculation skipped")
    if report.entry_flags:
        logger.info(f"Flagged {len(report.entry_flags)} product(s) with non-positive quantity or weight")

    return report
