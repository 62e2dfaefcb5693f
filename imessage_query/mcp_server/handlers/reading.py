"""
Reading Handlers

Handles tools for reading message history:
- read_messages: Messages for a chat ID or a phone number / email
- get_recent_messages: Newest messages across every conversation
"""

import logging
from mcp import types

from ..utils.validation import (
    MAX_DAYS_BACK,
    MAX_HOURS_BACK,
    validate_limit,
    validate_non_empty_string,
    validate_window_arg,
)
from ..utils.responses import error_response, json_response

logger = logging.getLogger(__name__)


async def handle_read_messages(
    arguments: dict,
    messages
) -> list[types.TextContent]:
    """
    Handle read_messages tool call.

    Args:
        arguments: {"identifier": str, "limit": Optional[int], "days_back": Optional[float]}
        messages: MessagesInterface instance

    Returns:
        JSON document with conversation info and messages
    """
    identifier, error = validate_non_empty_string(arguments.get("identifier"), "identifier")
    if error:
        return error_response(error)

    limit, error = validate_limit(arguments, default=50)
    if error:
        return error_response(error)

    days_back, error = validate_window_arg(arguments, "days_back", default=30, max_val=MAX_DAYS_BACK)
    if error:
        return error_response(error)

    result = messages.read_messages(identifier, limit=limit, days_back=days_back)
    return json_response(result)


async def handle_get_recent_messages(
    arguments: dict,
    messages
) -> list[types.TextContent]:
    """
    Handle get_recent_messages tool call.

    Args:
        arguments: {"limit": Optional[int], "hours_back": Optional[float]}
        messages: MessagesInterface instance

    Returns:
        JSON document with hours_back, count and messages
    """
    limit, error = validate_limit(arguments, default=30)
    if error:
        return error_response(error)

    hours_back, error = validate_window_arg(arguments, "hours_back", default=24, max_val=MAX_HOURS_BACK)
    if error:
        return error_response(error)

    result = messages.get_recent_messages(limit=limit, hours_back=hours_back)
    return json_response(result)
