"""
Custom exceptions for the health insights engine.

Every exception carries:
- A descriptive message
- An error code for API responses
- HTTP status code mapping
- Optional details for debugging

Unparsable workout rows are not errors: they are dropped by the
normalizer and only logged.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Error codes for consistent API error responses."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DATA_NOT_FOUND = "DATA_NOT_FOUND"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"


class HealthInsightsError(Exception):
    """
    Base exception for all health insights errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        status_code: HTTP status code for API responses
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


class InvalidArgumentError(HealthInsightsError):
    """Raised when a caller passes an argument outside its domain."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=error_details,
        )


class DataNotFoundError(HealthInsightsError):
    """Raised when a required measurement is absent for the requested date."""

    def __init__(
        self,
        metric: str,
        date_str: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        error_details["metric"] = metric
        error_details["date"] = date_str
        super().__init__(
            message=f"No {metric} sample found for {date_str}",
            code=ErrorCode.DATA_NOT_FOUND,
            status_code=404,
            details=error_details,
        )


class UpstreamUnavailableError(HealthInsightsError):
    """Raised when a repository read or write fails.

    The core never retries; retry and timeout policy belong to the
    repository implementation.
    """

    def __init__(
        self,
        operation: str,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        error_details["operation"] = operation
        message = f"Repository call '{operation}' failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message=message,
            code=ErrorCode.UPSTREAM_UNAVAILABLE,
            status_code=503,
            details=error_details,
        )
