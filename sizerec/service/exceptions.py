"""Custom exceptions for SizeRec.

Defines specific exception types for the host-side layers. The pure
recommender never raises these; degenerate inputs there resolve to a score
of 0 or an average of None.
"""

from typing import Any, Dict, List, Optional


class SizeRecException(Exception):
    """Base exception for SizeRec errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidMeasurementsError(SizeRecException):
    """Raised when measurements are missing or outside plausible ranges."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message=message, details={"errors": errors or []})
        self.errors = errors or []


class InvalidRequestError(SizeRecException):
    """Raised when a request parameter other than a measurement is invalid."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message=message, details={"errors": errors or []})
        self.errors = errors or []


class ProductNotFoundError(SizeRecException):
    """Raised when a product id is not in the loaded catalog."""

    def __init__(self, product_id: str):
        super().__init__(
            message=f"Product '{product_id}' not found",
            details={"product_id": product_id},
        )


class CorpusFormatError(SizeRecException):
    """Raised when a corpus file cannot be turned into catalog records."""

    def __init__(self, path: str, error: str):
        super().__init__(
            message=f"Invalid corpus file '{path}': {error}",
            details={"path": path, "error": error},
        )
