"""
Read-only query interface over the macOS Messages database.

Covers iMessage, SMS and RCS chats, including mixed group chats with
Android participants whose SMS/RCS copies are stored as separate chat rows.

Each public method opens one read-only connection, does its work and
closes the connection before returning or raising.
"""

import logging
from typing import Optional

from imessage_query.apple_time import AppleTimeCodec
from imessage_query.conversations import ConversationDirectory
from imessage_query.db_access import ChatDatabase
from imessage_query.errors import InvalidArgumentError
from imessage_query.identifiers import IdentifierResolver
from imessage_query.timeline import MessageTimeline

logger = logging.getLogger(__name__)


class MessagesInterface:
    """Composition root for conversation listing, search and message reads."""

    def __init__(
        self,
        messages_db_path: Optional[str] = None,
        time_codec: Optional[AppleTimeCodec] = None,
    ):
        self.db = ChatDatabase(messages_db_path)
        self.time_codec = time_codec or AppleTimeCodec()
        self.directory = ConversationDirectory(self.db)
        self.resolver = IdentifierResolver(self.db)
        self.timeline = MessageTimeline(self.db)

    @property
    def messages_db_path(self):
        return self.db.db_path

    def check_permissions(self) -> dict:
        return self.db.check_permissions()

    def list_conversations(self, limit: int = 50, include_sms: bool = True) -> dict:
        """
        List conversations (individual and group), newest first.

        Args:
            limit: Max logical conversations to return
            include_sms: Include SMS/RCS chats alongside iMessage

        Returns:
            {"count": int, "conversations": [...]}
        """
        with self.db.connect() as conn:
            conversations = self.directory.list(conn, limit=limit, include_non_native=include_sms)

        formatted = [c.to_summary() for c in conversations]
        return {"count": len(formatted), "conversations": formatted}

    def search_conversations(self, query: str, limit: int = 20) -> dict:
        """
        Search conversations by group name, chat identifier or participant.

        Returns:
            {"query": str, "found": int, "results": [...]}
        """
        if query is None or not str(query).strip():
            raise InvalidArgumentError("query cannot be empty")

        with self.db.connect() as conn:
            conversations = self.directory.search(conn, query, limit=limit)

        results = [c.to_search_result() for c in conversations]
        return {"query": query, "found": len(results), "results": results}

    def read_messages(self, identifier: str, limit: int = 50, days_back: float = 30) -> dict:
        """
        Read messages for a chat ROWID or a phone number / email.

        A numeric identifier is always a chat ROWID; its SMS/RCS duplicates
        (same group_id) are read together. Anything else is matched against
        handles.

        Returns:
            {"conversation": {...}, "message_count": int, "messages": [...]}

        Raises:
            NotFoundError: No chat or handle matches ``identifier``
        """
        if identifier is None or not str(identifier).strip():
            raise InvalidArgumentError("identifier is required")

        since = self.time_codec.now_minus(days_back)

        with self.db.connect() as conn:
            target = self.resolver.resolve(conn, str(identifier))
            messages = self.timeline.fetch(conn, target, since, limit)

        logger.info(f"Read {len(messages)} messages for {target.kind} {identifier}")
        formatted = [m.to_dict() for m in messages]
        return {
            "conversation": target.describe(),
            "message_count": len(formatted),
            "messages": formatted,
        }

    def get_recent_messages(self, limit: int = 30, hours_back: float = 24) -> dict:
        """
        Most recent messages across all conversations.

        Returns:
            {"hours_back": hours_back, "count": int, "messages": [...]}
        """
        since = self.time_codec.hours_back(hours_back)

        with self.db.connect() as conn:
            messages = self.timeline.recent(conn, since, limit)

        formatted = [m.to_recent_dict() for m in messages]
        return {"hours_back": hours_back, "count": len(formatted), "messages": formatted}
