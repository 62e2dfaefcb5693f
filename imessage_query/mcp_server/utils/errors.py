"""
Error rendering for MCP tool handlers.

Every failure is turned into a text response at the dispatcher so a bad
call never takes the server down.
"""

import logging

from mcp import types

from imessage_query.errors import DatabaseAccessError, MessagesQueryError
from .responses import error_response, text_response

logger = logging.getLogger(__name__)

# Common error patterns for permission issues
PERMISSION_ERROR_PATTERNS = [
    "unable to open database",
    "permission denied",
    "operation not permitted",
    "access denied",
    "authorization denied",
    "authorization not granted",
]

FULL_DISK_ACCESS_HELP = """
To grant Full Disk Access:

1. Open System Settings
2. Go to Privacy & Security -> Full Disk Access
3. Add the app that launches this server (Terminal, your IDE, or the MCP client)
4. Toggle it ON and restart that app

The Messages database is protected by macOS privacy controls.
"""


def is_permission_error(error: Exception) -> bool:
    """True if the error text looks like a permission/access failure."""
    error_str = str(error).lower()
    return any(pattern in error_str for pattern in PERMISSION_ERROR_PATTERNS)


def handle_tool_error(e: Exception, tool_name: str = "") -> list[types.TextContent]:
    """
    Render any exception as ``Error: <message>``.

    Expected query errors (not found, bad argument) are logged without a
    traceback; database failures that look like missing permissions get
    Full Disk Access instructions appended.
    """
    operation = f" in {tool_name}" if tool_name else ""

    if isinstance(e, DatabaseAccessError):
        logger.error(f"Database error{operation}: {e}")
        if is_permission_error(e):
            return text_response(f"Error: {e}\n{FULL_DISK_ACCESS_HELP}")
        return error_response(str(e))

    if isinstance(e, MessagesQueryError):
        logger.info(f"Query error{operation}: {e}")
        return error_response(str(e))

    logger.error(f"Error executing tool{operation}: {e}", exc_info=True)
    return error_response(str(e))
