"""
Response formatting utilities for MCP tool handlers.

Every tool answers with a single text item.
"""

import json

from mcp import types


def text_response(text: str) -> list[types.TextContent]:
    """Create a simple text response."""
    return [types.TextContent(type="text", text=text)]


def json_response(payload: dict) -> list[types.TextContent]:
    """Pretty-printed JSON document as a text response."""
    return text_response(json.dumps(payload, indent=2, ensure_ascii=False))


def error_response(error: str, prefix: str = "Error") -> list[types.TextContent]:
    """
    Create a standardized error response.

    Args:
        error: Error message
        prefix: Prefix for the error (default: "Error")
    """
    return text_response(f"{prefix}: {error}")
