"""
MCP Tool Handlers Package

Organized by domain:
- conversations: list_conversations, search_conversations
- reading: read_messages, get_recent_messages
"""

from . import conversations
from . import reading

__all__ = [
    "conversations",
    "reading",
]
