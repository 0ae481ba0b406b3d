"""
Status codes for input validation.

Defines the flags a caller uses to highlight invalid fields.
"""

from enum import Enum


class FieldStatus(str, Enum):
    """
    Validation status of a single input field.

    Values:
        OK: Value is acceptable.
        NON_POSITIVE: Quantity or weight is zero or negative (soft flag,
            the value still participates in the calculation).
        OUT_OF_RANGE: ICMS rate outside [0, 100] (hard failure, the
            recalculation is skipped).
    """

    OK = "OK"
    NON_POSITIVE = "NON_POSITIVE"
    OUT_OF_RANGE = "OUT_OF_RANGE"


# Human-readable status descriptions
STATUS_DESCRIPTIONS = {
    FieldStatus.OK: "Value is valid.",
    FieldStatus.NON_POSITIVE: "Value must be greater than zero.",
    FieldStatus.OUT_OF_RANGE: "ICMS rate must be between 0 and 100.",
}


def get_status_description(status: FieldStatus) -> str:
    """
    Get a human-readable description for a status.

    Args:
        status: The field status.

    Returns:
        str: Status description.
    """
    return STATUS_DESCRIPTIONS.get(status, "Unknown status.")
