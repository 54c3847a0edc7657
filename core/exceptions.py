"""Custom exception classes for the application.

Defines domain-specific exceptions raised by the nutrition services and
turned into JSON error responses by the handlers in `core.error_handlers`.
"""

from typing import Optional, Any, Dict, Iterable


class AppException(Exception):
    """Base exception class for all application exceptions.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional additional error details.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """Initialize application exception.

        Args:
            message: Error message.
            status_code: HTTP status code (default: 500).
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppException):
    """Exception raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        """Initialize validation error.

        Args:
            message: Validation error message.
            field: Optional field name that failed validation.
        """
        details = {"field": field} if field else {}
        self.field = field
        super().__init__(message, status_code=400, details=details)


class UnknownEnumError(AppException):
    """Raised when a categorical input is not one of the allowed values."""

    def __init__(self, field: str, value: Any, allowed: Iterable[str]):
        """Initialize unknown enum error.

        Args:
            field: Request field holding the bad value (e.g. 'activityLevel').
            value: The value that was supplied.
            allowed: Accepted values for the field.
        """
        allowed = list(allowed)
        message = f"Unknown {field} '{value}'. Expected one of: {', '.join(allowed)}"
        self.field = field
        super().__init__(
            message,
            status_code=400,
            details={"field": field, "value": value, "allowed": allowed}
        )


class InvalidRatioError(AppException):
    """Raised when custom macro ratios are negative or do not sum to 1.0."""

    def __init__(self, message: str, total: Optional[float] = None):
        """Initialize invalid ratio error.

        Args:
            message: Error message.
            total: Sum of the supplied ratios, when it could be computed.
        """
        details = {"sum": total} if total is not None else {}
        super().__init__(message, status_code=400, details=details)


class InternalComputationError(AppException):
    """Raised when the calculation pipeline fails unexpectedly.

    The message is generic. The underlying cause is chained and logged but
    never returned to the client.
    """

    def __init__(self, step: Optional[str] = None):
        details = {"type": "internal_error"}
        if step:
            details["step"] = step
        super().__init__(
            "Nutrition calculation failed",
            status_code=500,
            details=details
        )
