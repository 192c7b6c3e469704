"""
Error types and error codes for process authorization.
Construction errors are raised; decode and validation misses are returned as None/False instead.
"""

from enum import Enum
from typing import Dict, Any, Optional


class ErrorCode(str, Enum):
    """Standard error codes used across procauth."""
    INVALID_ARGUMENT = "invalid_argument"
    VALIDATION_FAILED = "validation_failed"
    CONFIGURATION_ERROR = "configuration_error"
    RESOURCE_FORMAT_ERROR = "resource_format_error"
    INTERNAL_ERROR = "internal_error"

    def __str__(self) -> str:
        return self.value


# Error code constants for easy import
INVALID_ARGUMENT = ErrorCode.INVALID_ARGUMENT
VALIDATION_FAILED = ErrorCode.VALIDATION_FAILED
CONFIGURATION_ERROR = ErrorCode.CONFIGURATION_ERROR
RESOURCE_FORMAT_ERROR = ErrorCode.RESOURCE_FORMAT_ERROR
INTERNAL_ERROR = ErrorCode.INTERNAL_ERROR


class ProcessAuthError(Exception):
    """Base exception for all procauth errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            'error': self.error_code.value,
            'message': self.message,
            'details': self.details
        }

        if self.cause:
            result['cause'] = str(self.cause)

        return result

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class InvalidArgumentError(ProcessAuthError, ValueError):
    """Raised when a required argument is missing or blank."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, INVALID_ARGUMENT, details)
        self.field = field
        self.value = value

        if field:
            self.details['field'] = field
        if value is not None:
            self.details['value'] = str(value)


class ConfigurationError(ProcessAuthError):
    """Raised when there's a configuration error."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, CONFIGURATION_ERROR, details)
        self.config_key = config_key
        self.config_value = config_value

        if config_key:
            self.details['config_key'] = config_key
        if config_value is not None:
            self.details['config_value'] = str(config_value)


class ResourceFormatError(ProcessAuthError):
    """Raised when a resource document cannot be read into the extension tree."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message, RESOURCE_FORMAT_ERROR, details, cause)
        self.source = source

        if source:
            self.details['source'] = source


# Error mapping for HTTP status codes, used by layers that report rule problems to clients
ERROR_CODE_TO_HTTP_STATUS = {
    INVALID_ARGUMENT: 400,
    VALIDATION_FAILED: 422,
    CONFIGURATION_ERROR: 500,
    RESOURCE_FORMAT_ERROR: 400,
    INTERNAL_ERROR: 500,
}


def get_http_status(error_code: ErrorCode) -> int:
    """Get HTTP status code for an error code."""
    return ERROR_CODE_TO_HTTP_STATUS.get(error_code, 500)


def create_error_response(error: ProcessAuthError) -> Dict[str, Any]:
    """Create a standardized error response."""
    return {
        'error': error.error_code.value,
        'message': error.message,
        'details': error.details,
        'http_status': get_http_status(error.error_code)
    }
