"""
Conversation listing and search over chat.db.

A single real-world chat can be stored as several ``chat`` rows (one per
protocol: iMessage, SMS, RCS) that share a ``group_id``. Both listing and
search collapse those rows so each logical conversation appears once.
"""

import logging
import sqlite3
from typing import Dict, Iterable, List

from imessage_query.db_access import ChatDatabase, placeholders
from imessage_query.errors import InvalidArgumentError
from imessage_query.identifiers import escape_like
from imessage_query.models import IMESSAGE_SERVICE, Conversation, Participant

logger = logging.getLogger(__name__)

CHAT_COLUMNS = """
    c.ROWID AS chat_id,
    c.display_name,
    c.chat_identifier,
    c.service_name,
    c.group_id,
    (SELECT COUNT(*) FROM chat_handle_join WHERE chat_id = c.ROWID) AS participant_count,
    (SELECT MAX(m.date) FROM chat_message_join cmj
     JOIN message m ON cmj.message_id = m.ROWID
     WHERE cmj.chat_id = c.ROWID) AS last_message_date
"""


def _row_to_conversation(row: sqlite3.Row) -> Conversation:
    return Conversation(
        record_id=row["chat_id"],
        display_name=row["display_name"],
        conversation_key=row["chat_identifier"],
        service_name=row["service_name"],
        group_key=row["group_id"],
        participant_count=row["participant_count"] or 0,
        last_activity=row["last_message_date"],
    )


def _activity_rank(conversation: Conversation) -> tuple:
    # Latest activity wins; among equals (or no messages) the lowest ROWID.
    has_activity = conversation.last_activity is not None
    return (has_activity, conversation.last_activity or 0, -conversation.record_id)


def collapse_duplicates(conversations: Iterable[Conversation]) -> List[Conversation]:
    """
    Keep one representative per logical conversation.

    Rows sharing a non-null group key merge; the row with the latest
    activity represents the group. Rows without a group key are never
    merged. Input order of first appearance is preserved.
    """
    chosen: Dict[str, Conversation] = {}
    for conversation in conversations:
        key = conversation.logical_key
        current = chosen.get(key)
        if current is None or _activity_rank(conversation) > _activity_rank(current):
            chosen[key] = conversation
    return list(chosen.values())


def sort_by_activity(conversations: List[Conversation]) -> List[Conversation]:
    """Newest activity first, conversations without messages last."""
    return sorted(
        conversations,
        key=lambda c: (c.last_activity is None, -(c.last_activity or 0), c.record_id),
    )


class ConversationDirectory:
    """Lists and searches logical conversations."""

    def __init__(self, db: ChatDatabase):
        self.db = db

    def list(self, conn: sqlite3.Connection, limit: int = 50, include_non_native: bool = True) -> List[Conversation]:
        """
        List conversations, newest activity first.

        Args:
            conn: Open read-only connection
            limit: Maximum number of logical conversations
            include_non_native: Include SMS/RCS chats. When False only
                iMessage rows are considered at all.
        """
        query = f"SELECT {CHAT_COLUMNS} FROM chat c"
        params: list = []
        if not include_non_native:
            query += " WHERE c.service_name = ?"
            params.append(IMESSAGE_SERVICE)

        rows = self.db.fetch_all(conn, query, params)
        conversations = collapse_duplicates(_row_to_conversation(r) for r in rows)
        result = sort_by_activity(conversations)[:limit]

        logger.info("Listed %d conversations (%d chat rows)", len(result), len(rows))
        return result

    def search(self, conn: sqlite3.Connection, query: str, limit: int = 20) -> List[Conversation]:
        """
        Find conversations whose name, identifier or any participant
        handle contains ``query`` (case-insensitive).

        Results carry their full participant list.
        """
        if query is None or not query.strip():
            raise InvalidArgumentError("query cannot be empty")

        pattern = f"%{escape_like(query)}%"
        rows = self.db.fetch_all(conn, f"""
            SELECT {CHAT_COLUMNS}
            FROM chat c
            WHERE c.display_name LIKE ? ESCAPE '\\'
               OR c.chat_identifier LIKE ? ESCAPE '\\'
               OR EXISTS (
                    SELECT 1 FROM chat_handle_join chj
                    JOIN handle h ON chj.handle_id = h.ROWID
                    WHERE chj.chat_id = c.ROWID AND h.id LIKE ? ESCAPE '\\'
               )
            ORDER BY c.ROWID DESC
        """, (pattern, pattern, pattern))

        conversations = collapse_duplicates(_row_to_conversation(r) for r in rows)
        conversations.sort(key=lambda c: c.record_id, reverse=True)
        conversations = conversations[:limit]

        members = self.group_members(conn, conversations)
        participants = self.participants(
            conn, sorted({chat_id for ids in members.values() for chat_id in ids})
        )
        for conversation in conversations:
            # SMS/RCS copies can carry handles the iMessage copy lacks
            identifiers: List[str] = []
            for chat_id in members[conversation.record_id]:
                for participant in participants.get(chat_id, []):
                    if participant.identifier not in identifiers:
                        identifiers.append(participant.identifier)
            conversation.participants = identifiers

        logger.info("Search %r matched %d conversations", query, len(conversations))
        return conversations

    def group_members(self, conn: sqlite3.Connection, conversations: List[Conversation]) -> Dict[int, List[int]]:
        """
        Chat ROWIDs behind each conversation, keyed by its representative.

        The representative comes first, followed by every other row sharing
        its group key in ROWID order.
        """
        members = {c.record_id: [c.record_id] for c in conversations}
        group_keys = sorted({c.group_key for c in conversations if c.group_key})
        if not group_keys:
            return members

        rows = self.db.fetch_all(conn, f"""
            SELECT ROWID, group_id FROM chat
            WHERE group_id IN ({placeholders(group_keys)})
            ORDER BY ROWID
        """, group_keys)

        by_key: Dict[str, List[int]] = {}
        for row in rows:
            by_key.setdefault(row["group_id"], []).append(row["ROWID"])

        for conversation in conversations:
            for chat_id in by_key.get(conversation.group_key, []):
                if chat_id not in members[conversation.record_id]:
                    members[conversation.record_id].append(chat_id)
        return members

    def participants(self, conn: sqlite3.Connection, chat_ids: List[int]) -> Dict[int, List[Participant]]:
        """Participant handles per chat ROWID."""
        if not chat_ids:
            return {}

        rows = self.db.fetch_all(conn, f"""
            SELECT chj.chat_id, h.ROWID AS handle_rowid, h.id AS identifier
            FROM chat_handle_join chj
            JOIN handle h ON chj.handle_id = h.ROWID
            WHERE chj.chat_id IN ({placeholders(chat_ids)})
            ORDER BY chj.chat_id, h.ROWID
        """, chat_ids)

        by_chat: Dict[int, List[Participant]] = {}
        for row in rows:
            by_chat.setdefault(row["chat_id"], []).append(
                Participant(record_id=row["handle_rowid"], identifier=row["identifier"])
            )
        return by_chat
