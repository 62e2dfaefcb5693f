"""
MCP Server Utilities

Shared validation, response formatting, and error handling utilities
for the iMessage query MCP server.
"""

from .validation import (
    validate_positive_int,
    validate_non_empty_string,
    validate_bool,
    validate_int_arg,
    validate_limit,
    validate_window_arg,
    MAX_MESSAGE_LIMIT,
    MAX_SEARCH_RESULTS,
    MIN_LIMIT,
)

from .responses import (
    text_response,
    json_response,
    error_response,
)

from .errors import handle_tool_error, is_permission_error

__all__ = [
    # Validation
    "validate_positive_int",
    "validate_non_empty_string",
    "validate_bool",
    "validate_int_arg",
    "validate_limit",
    "validate_window_arg",
    "MAX_MESSAGE_LIMIT",
    "MAX_SEARCH_RESULTS",
    "MIN_LIMIT",
    # Responses
    "text_response",
    "json_response",
    "error_response",
    # Errors
    "handle_tool_error",
    "is_permission_error",
]
