"""
Conversation Handlers

Handles tools for finding conversations:
- list_conversations: Recent conversations across iMessage, SMS and RCS
- search_conversations: Find conversations by name, phone or email
"""

import logging
from mcp import types

from ..utils.validation import (
    MAX_SEARCH_RESULTS,
    validate_bool,
    validate_limit,
    validate_non_empty_string,
)
from ..utils.responses import error_response, json_response

logger = logging.getLogger(__name__)


async def handle_list_conversations(
    arguments: dict,
    messages
) -> list[types.TextContent]:
    """
    Handle list_conversations tool call.

    Args:
        arguments: {"limit": Optional[int], "include_sms": Optional[bool]}
        messages: MessagesInterface instance

    Returns:
        JSON document with count and conversations
    """
    limit, error = validate_limit(arguments, default=50, max_val=MAX_SEARCH_RESULTS)
    if error:
        return error_response(error)

    include_sms, error = validate_bool(arguments.get("include_sms"), "include_sms", default=True)
    if error:
        return error_response(error)

    result = messages.list_conversations(limit=limit, include_sms=include_sms)
    return json_response(result)


async def handle_search_conversations(
    arguments: dict,
    messages
) -> list[types.TextContent]:
    """
    Handle search_conversations tool call.

    Args:
        arguments: {"query": str, "limit": Optional[int]}
        messages: MessagesInterface instance

    Returns:
        JSON document with query, found and results
    """
    query, error = validate_non_empty_string(arguments.get("query"), "query", strip=False)
    if error:
        return error_response(error)

    limit, error = validate_limit(arguments, default=20, max_val=MAX_SEARCH_RESULTS)
    if error:
        return error_response(error)

    result = messages.search_conversations(query, limit=limit)
    return json_response(result)
