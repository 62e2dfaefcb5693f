#!/usr/bin/env python3
"""
iMessage Query MCP Server - read-only access to iMessage, SMS and RCS history.

Exposes four tools over stdio:
- list_conversations
- search_conversations
- read_messages
- get_recent_messages

Usage:
    imessage-query-server
    python -m imessage_query.mcp_server
"""

import asyncio
import logging
from typing import Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp import types

from imessage_query.messages_interface import MessagesInterface
from imessage_query.mcp_server.config import configure_logging, load_config
from imessage_query.mcp_server.handlers import conversations, reading
from imessage_query.mcp_server.utils.errors import handle_tool_error

logger = logging.getLogger(__name__)


# =============================================================================
# TOOL DEFINITIONS
# =============================================================================

def get_tool_definitions() -> list[types.Tool]:
    """Tool schemas advertised to MCP clients."""
    return [
        types.Tool(
            name="list_conversations",
            description=(
                "List all conversations (individual and group chats). "
                "Shows iMessage, SMS, and RCS."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "limit": {
                        "type": "number",
                        "description": "Max conversations to return (default: 50)",
                        "default": 50
                    },
                    "include_sms": {
                        "type": "boolean",
                        "description": "Include SMS/RCS chats (default: true)",
                        "default": True
                    }
                },
                "required": []
            }
        ),
        types.Tool(
            name="search_conversations",
            description=(
                "Search for conversations by name, phone number, or group name. "
                "Works with SMS/RCS groups that include Android users."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Search term (name, phone, or group name)"
                    },
                    "limit": {
                        "type": "number",
                        "description": "Max results (default: 20)",
                        "default": 20
                    }
                },
                "required": ["query"]
            }
        ),
        types.Tool(
            name="read_messages",
            description=(
                "Read messages from a conversation. Use chat_id from list/search "
                "results for groups, or phone/email for individuals."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "identifier": {
                        "type": "string",
                        "description": "Chat ID (for groups) or phone/email (for individuals)"
                    },
                    "limit": {
                        "type": "number",
                        "description": "Max messages (default: 50)",
                        "default": 50
                    },
                    "days_back": {
                        "type": "number",
                        "description": "Days to look back (default: 30)",
                        "default": 30
                    }
                },
                "required": ["identifier"]
            }
        ),
        types.Tool(
            name="get_recent_messages",
            description="Get most recent messages across all conversations",
            inputSchema={
                "type": "object",
                "properties": {
                    "limit": {
                        "type": "number",
                        "description": "Max messages (default: 30)",
                        "default": 30
                    },
                    "hours_back": {
                        "type": "number",
                        "description": "Hours to look back (default: 24)",
                        "default": 24
                    }
                },
                "required": []
            }
        ),
    ]


# =============================================================================
# TOOL DISPATCHER WITH REGISTRY PATTERN
# =============================================================================

TOOL_REGISTRY = {
    "list_conversations": conversations.handle_list_conversations,
    "search_conversations": conversations.handle_search_conversations,
    "read_messages": reading.handle_read_messages,
    "get_recent_messages": reading.handle_get_recent_messages,
}


async def dispatch_tool(
    name: str,
    arguments: Optional[dict],
    messages: MessagesInterface
) -> list[types.TextContent]:
    """
    Route a tool call to its handler.

    Never raises: every failure becomes an ``Error: ...`` text response.
    """
    logger.info(f"Tool called: {name} with args: {arguments}")

    try:
        handler = TOOL_REGISTRY.get(name)
        if handler is None:
            raise ValueError(f"Unknown tool: {name}")
        return await handler(arguments or {}, messages)
    except Exception as e:
        return handle_tool_error(e, name)


def create_server(messages: MessagesInterface, server_name: str = "imessage-query") -> Server:
    """Build an MCP server bound to ``messages``."""
    app = Server(server_name)

    @app.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return get_tool_definitions()

    @app.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[types.TextContent]:
        return await dispatch_tool(name, arguments, messages)

    return app


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

async def main(config_path: Optional[str] = None):
    """Run the MCP server."""
    config = load_config(config_path)
    messages = MessagesInterface(config["paths"]["messages_db"])
    app = create_server(messages, config["server_name"])

    logger.info("Starting iMessage Query MCP Server...")
    logger.info(f"Server name: {config['server_name']}")
    logger.info(f"Version: {config['version']}")
    logger.info(f"Messages database: {messages.messages_db_path}")

    permissions = messages.check_permissions()
    if not permissions["messages_db_accessible"]:
        logger.warning(f"Messages database not accessible: {permissions['error']}")
        logger.warning("Grant Full Disk Access in System Settings")

    async with stdio_server() as (read_stream, write_stream):
        await app.run(
            read_stream,
            write_stream,
            app.create_initialization_options()
        )


def run() -> None:
    """Console-script entry point."""
    configure_logging()
    asyncio.run(main())


if __name__ == "__main__":
    run()
