"""
Custom exceptions for the import cost calculator.

Provides a hierarchy of exceptions for clean error handling in routes and the CLI.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """Base exception for application errors."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if status_code:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(AppException):
    """Raised when input validation fails."""

    status_code = 400
    error_code = "VALIDATION_ERROR"


class FileValidationError(ValidationError):
    """Raised when an imported product file is unusable."""

    error_code = "FILE_VALIDATION_ERROR"

    def __init__(self, message: str, filename: Optional[str] = None, missing_columns: Optional[list] = None):
        details = {}
        if filename:
            details["filename"] = filename
        if missing_columns:
            details["missing_columns"] = missing_columns
        super().__init__(message, details)


class ProductNotFoundError(AppException):
    """Raised when a product id is not in the ledger."""

    status_code = 404
    error_code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: int):
        super().__init__(
            f"Product not found: {product_id}",
            details={"product_id": product_id},
        )

