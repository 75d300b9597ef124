"""
Custom Exception Classes for the Scholarship Matcher API
"""
from typing import Dict, Any
from fastapi import HTTPException


class ScholarshipMatcherError(Exception):
    """Base exception for the Scholarship Matcher API"""

    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None,
        cause: Exception = None
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging"""
        result = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class ValidationError(ScholarshipMatcherError):
    """Raised when the applicant profile is missing or unusable"""

    def __init__(self, message: str, field: str = None, value: Any = None, **kwargs):
        details = kwargs.pop('details', {})
        if field:
            details['field'] = field
        if value is not None:
            details['invalid_value'] = str(value)
        super().__init__(message, error_code="VALIDATION_ERROR", details=details, **kwargs)


class RateLimitError(ScholarshipMatcherError):
    """Raised when a client exceeds its request ceiling"""

    def __init__(self, message: str = "Too many requests", limit: int = None, window: float = None, **kwargs):
        details = kwargs.pop('details', {})
        if limit:
            details['limit'] = limit
        if window:
            details['window_seconds'] = window
        super().__init__(message, error_code="RATE_LIMIT_ERROR", details=details, **kwargs)


class PayloadTooLargeError(ScholarshipMatcherError):
    """Raised when a request body exceeds the configured limit"""

    def __init__(self, message: str = "Request body too large", limit: int = None, size: int = None, **kwargs):
        details = kwargs.pop('details', {})
        if limit:
            details['limit_bytes'] = limit
        if size is not None:
            details['size_bytes'] = size
        super().__init__(message, error_code="PAYLOAD_TOO_LARGE", details=details, **kwargs)


class ProcessingError(ScholarshipMatcherError):
    """Raised when scoring a catalog fails unexpectedly"""

    def __init__(self, message: str, scholarship_id: str = None, **kwargs):
        details = kwargs.pop('details', {})
        if scholarship_id:
            details['scholarship_id'] = scholarship_id
        super().__init__(message, error_code="PROCESSING_ERROR", details=details, **kwargs)


class CatalogError(ScholarshipMatcherError):
    """Raised when the scholarship catalog cannot be fetched"""

    def __init__(self, message: str, source: str = None, **kwargs):
        details = kwargs.pop('details', {})
        if source:
            details['source'] = source
        super().__init__(message, error_code="CATALOG_ERROR", details=details, **kwargs)


class ConfigurationError(ScholarshipMatcherError):
    """Raised when configuration is invalid or missing"""

    def __init__(self, message: str, config_key: str = None, config_value: Any = None, **kwargs):
        details = kwargs.pop('details', {})
        if config_key:
            details['config_key'] = config_key
        if config_value is not None:
            details['config_value'] = str(config_value)
        super().__init__(message, error_code="CONFIGURATION_ERROR", details=details, **kwargs)


# Client-facing messages; internal failures never expose their cause
PUBLIC_MESSAGES = {
    RateLimitError: "Too many requests",
    PayloadTooLargeError: "Request body too large",
    ProcessingError: "Internal server error",
    CatalogError: "Scholarship catalog unavailable",
    ConfigurationError: "Internal server error",
}


# HTTP Exception Mapping
def map_to_http_exception(exc: ScholarshipMatcherError) -> HTTPException:
    """Map custom exceptions to HTTP exceptions"""

    status_code_mapping = {
        ValidationError: 400,
        RateLimitError: 429,
        PayloadTooLargeError: 413,
        ProcessingError: 500,
        ConfigurationError: 500,
        CatalogError: 502,
    }

    status_code = status_code_mapping.get(type(exc), 500)

    if isinstance(exc, ValidationError):
        detail = {
            "error": exc.message,
            "message": exc.message,
            "details": exc.details
        }
    else:
        public = PUBLIC_MESSAGES.get(type(exc), "Internal server error")
        detail = {
            "error": public,
            "message": public
        }

    return HTTPException(status_code=status_code, detail=detail)


# Exception context manager for better error handling
class ExceptionContext:
    """Context manager that logs an operation and wraps unexpected failures"""

    def __init__(self, operation: str, logger=None, **context):
        self.operation = operation
        self.logger = logger
        self.context = context

    def __enter__(self):
        if self.logger:
            self.logger.debug(f"Starting operation: {self.operation}", extra=self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            if self.logger:
                self.logger.debug(f"Operation completed: {self.operation}", extra=self.context)
            return False

        if self.logger:
            self.logger.error(
                f"Operation failed: {self.operation} - {exc_val}",
                extra={**self.context, "exception_type": exc_type.__name__}
            )

        # Re-raise custom exceptions as-is
        if isinstance(exc_val, ScholarshipMatcherError):
            return False

        if not isinstance(exc_val, Exception):
            return False

        raise ProcessingError(
            f"Processing error in {self.operation}: {str(exc_val)}",
            details=dict(self.context),
            cause=exc_val
        ) from exc_val
