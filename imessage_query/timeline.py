"""
Message retrieval for resolved chats, handles, or everything.

Messages come back newest first, one row per message even when a message
is joined to several duplicate chat rows, and never with empty text.
"""

import logging
import sqlite3
from typing import List, Sequence

from imessage_query.db_access import ChatDatabase, placeholders
from imessage_query.identifiers import ContactTarget, ConversationTarget, ResolvedTarget
from imessage_query.models import Message

logger = logging.getLogger(__name__)

HAS_TEXT = "m.text IS NOT NULL AND m.text != ''"


def _row_to_message(row: sqlite3.Row) -> Message:
    return Message(
        record_id=row["message_id"],
        timestamp=row["date"],
        text=row["text"],
        is_from_me=bool(row["is_from_me"]),
        sender_identifier=row["sender"],
        service=row["service"],
        conversation_label=row["conversation"] if "conversation" in row.keys() else None,
    )


class MessageTimeline:
    """Fetches ordered message timelines from chat.db."""

    def __init__(self, db: ChatDatabase):
        self.db = db

    def fetch(self, conn: sqlite3.Connection, target: ResolvedTarget, since: int, limit: int) -> List[Message]:
        """Messages for a resolved identifier newer than ``since`` (native)."""
        if isinstance(target, ConversationTarget):
            return self.for_chats(conn, target.record_ids, since, limit)
        if isinstance(target, ContactTarget):
            return self.for_handles(conn, target.record_ids, since, limit)
        raise TypeError(f"Unsupported target: {target!r}")

    def for_chats(self, conn: sqlite3.Connection, chat_ids: Sequence[int], since: int, limit: int) -> List[Message]:
        if not chat_ids:
            return []

        rows = self.db.fetch_all(conn, f"""
            SELECT
                m.ROWID AS message_id,
                m.date,
                m.text,
                m.is_from_me,
                h.id AS sender,
                m.service
            FROM message m
            LEFT JOIN handle h ON m.handle_id = h.ROWID
            WHERE m.ROWID IN (
                    SELECT message_id FROM chat_message_join
                    WHERE chat_id IN ({placeholders(chat_ids)})
                )
              AND m.date > ?
              AND {HAS_TEXT}
            ORDER BY m.date DESC, m.ROWID DESC
            LIMIT ?
        """, [*chat_ids, since, limit])
        return self._finish(rows)

    def for_handles(self, conn: sqlite3.Connection, handle_ids: Sequence[int], since: int, limit: int) -> List[Message]:
        if not handle_ids:
            return []

        rows = self.db.fetch_all(conn, f"""
            SELECT
                m.ROWID AS message_id,
                m.date,
                m.text,
                m.is_from_me,
                h.id AS sender,
                m.service
            FROM message m
            LEFT JOIN handle h ON m.handle_id = h.ROWID
            WHERE m.handle_id IN ({placeholders(handle_ids)})
              AND m.date > ?
              AND {HAS_TEXT}
            ORDER BY m.date DESC, m.ROWID DESC
            LIMIT ?
        """, [*handle_ids, since, limit])
        return self._finish(rows)

    def recent(self, conn: sqlite3.Connection, since: int, limit: int) -> List[Message]:
        """
        Newest messages across every conversation.

        A message joined to several chat rows is labelled with the lowest
        chat ROWID so it is reported once.
        """
        rows = self.db.fetch_all(conn, f"""
            SELECT
                m.ROWID AS message_id,
                m.date,
                m.text,
                m.is_from_me,
                h.id AS sender,
                c.service_name AS service,
                COALESCE(NULLIF(c.display_name, ''), c.chat_identifier) AS conversation
            FROM message m
            LEFT JOIN handle h ON m.handle_id = h.ROWID
            LEFT JOIN chat c ON c.ROWID = (
                SELECT MIN(cmj.chat_id) FROM chat_message_join cmj
                WHERE cmj.message_id = m.ROWID
            )
            WHERE m.date > ?
              AND {HAS_TEXT}
            ORDER BY m.date DESC, m.ROWID DESC
            LIMIT ?
        """, (since, limit))
        return self._finish(rows)

    def _finish(self, rows: List[sqlite3.Row]) -> List[Message]:
        # A payload decoder for attributedBody-only messages would run here,
        # before the text filter.
        messages = [_row_to_message(r) for r in rows]
        messages = [m for m in messages if m.text]
        logger.debug("Fetched %d messages", len(messages))
        return messages
