"""
Validation and error handling for the fleetmon package.

This module provides input validation and error handling with consistent
error reporting across the server.
"""

from .exceptions import (
    ErrorSeverity,
    ValidationError,
    handle_error,
    handle_config_error,
    handle_cli_error,
)

from .validators import (
    validate_enum_choice,
    validate_non_empty_string,
    validate_port,
    validate_positive_float,
    validate_positive_integer,
)

__all__ = [
    "ErrorSeverity",
    "ValidationError",
    "handle_error",
    "handle_config_error",
    "handle_cli_error",
    "validate_enum_choice",
    "validate_non_empty_string",
    "validate_port",
    "validate_positive_float",
    "validate_positive_integer",
]
