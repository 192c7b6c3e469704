# Copyright (c) 2025 the procauth authors.
# All rights reserved.
# Provided without warranty.

"""
Package types provides shared error types for procauth.

Construction errors surface immediately as exceptions; decode and validation misses never raise
and are reported as None/False by the authorization modules.
"""

from .errors import (
    # Base error types
    ProcessAuthError,
    InvalidArgumentError,
    ConfigurationError,
    ResourceFormatError,

    # Error codes
    ErrorCode,
    INVALID_ARGUMENT,
    VALIDATION_FAILED,
    CONFIGURATION_ERROR,
    RESOURCE_FORMAT_ERROR,
    INTERNAL_ERROR,

    # Utilities
    get_http_status,
    create_error_response,
)

__all__ = [
    'ProcessAuthError',
    'InvalidArgumentError',
    'ConfigurationError',
    'ResourceFormatError',
    'ErrorCode',
    'INVALID_ARGUMENT',
    'VALIDATION_FAILED',
    'CONFIGURATION_ERROR',
    'RESOURCE_FORMAT_ERROR',
    'INTERNAL_ERROR',
    'get_http_status',
    'create_error_response',
]
