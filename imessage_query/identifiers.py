"""
Resolve a caller-supplied identifier to the chat.db records it names.

An all-digit identifier is a chat ROWID; anything else is a phone number
or email. The decision is made once, here, and carried downstream as a
``ConversationTarget`` or ``ContactTarget``.
"""

import logging
import re
import sqlite3
from dataclasses import dataclass, field
from typing import List, Union

from imessage_query.db_access import ChatDatabase
from imessage_query.errors import InvalidArgumentError, NotFoundError
from imessage_query.models import Conversation, Handle

logger = logging.getLogger(__name__)

CHAT_ID_PATTERN = re.compile(r"^\d+$")
NON_PHONE_CHARS = re.compile(r"[^0-9+]")

# ROWIDs are signed 64-bit; anything larger cannot name a chat
SQLITE_MAX_ROWID = 2 ** 63 - 1


@dataclass(frozen=True)
class ConversationTarget:
    """A chat plus every protocol duplicate that shares its group_id."""

    record_ids: List[int]
    conversation: Conversation
    kind: str = field(default="conversation", init=False)

    def describe(self) -> dict:
        return {
            "name": self.conversation.name,
            "type": self.conversation.kind,
            "service": self.conversation.service_name,
            "chat_ids": list(self.record_ids),
        }


@dataclass(frozen=True)
class ContactTarget:
    """Every handle row matching a phone number or email."""

    identifier: str
    handles: List[Handle]
    kind: str = field(default="contact", init=False)

    @property
    def record_ids(self) -> List[int]:
        return [h.record_id for h in self.handles]

    def describe(self) -> dict:
        return {
            "name": self.identifier,
            "type": "individual",
            "handles": [h.identifier for h in self.handles],
        }


ResolvedTarget = Union[ConversationTarget, ContactTarget]


def is_chat_id(identifier: str) -> bool:
    return bool(CHAT_ID_PATTERN.match(identifier))


def normalize_phone(identifier: str) -> str:
    """Strip everything but digits and a leading ``+``."""
    cleaned = NON_PHONE_CHARS.sub("", identifier)
    if not cleaned:
        return ""
    return cleaned[0] + cleaned[1:].replace("+", "")


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the value matches literally (ESCAPE '\\')."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def handle_patterns(identifier: str) -> List[str]:
    """
    LIKE patterns for matching ``handle.id`` against a phone/email.

    Phone formatting in chat.db is inconsistent, so the raw input, the
    digits and the ``+``-prefixed digits are all tried. A NANP number with
    its leading country code also matches the bare 10-digit form. Emails
    only match on the raw input.

    Example:
        >>> handle_patterns("+1 (555) 123-4567")
        ['%+1 (555) 123-4567%', '%15551234567%', '%+15551234567%', '%5551234567%']
    """
    candidates = [identifier]

    digits = normalize_phone(identifier).lstrip("+")
    if digits and "@" not in identifier:
        candidates.append(digits)
        candidates.append(f"+{digits}")
        if len(digits) == 11 and digits.startswith("1"):
            candidates.append(digits[1:])

    patterns = []
    for candidate in candidates:
        pattern = f"%{escape_like(candidate)}%"
        if pattern not in patterns:
            patterns.append(pattern)
    return patterns


class IdentifierResolver:
    """Classifies identifiers and expands them to chat / handle ROWIDs."""

    def __init__(self, db: ChatDatabase):
        self.db = db

    def resolve(self, conn: sqlite3.Connection, identifier: str) -> ResolvedTarget:
        if identifier is None or not identifier.strip():
            raise InvalidArgumentError("identifier is required")

        identifier = identifier.strip()
        if is_chat_id(identifier):
            return self.resolve_conversation(conn, int(identifier))
        return self.resolve_contact(conn, identifier)

    def resolve_conversation(self, conn: sqlite3.Connection, chat_id: int) -> ConversationTarget:
        if chat_id > SQLITE_MAX_ROWID:
            raise NotFoundError(f"conversation not found: {chat_id}")

        row = self.db.fetch_one(conn, """
            SELECT
                c.ROWID AS chat_id,
                c.display_name,
                c.chat_identifier,
                c.service_name,
                c.group_id,
                (SELECT COUNT(*) FROM chat_handle_join WHERE chat_id = c.ROWID) AS participant_count
            FROM chat c
            WHERE c.ROWID = ?
        """, (chat_id,))

        if row is None:
            raise NotFoundError(f"conversation not found: {chat_id}")

        conversation = Conversation(
            record_id=row["chat_id"],
            display_name=row["display_name"],
            conversation_key=row["chat_identifier"],
            service_name=row["service_name"],
            group_key=row["group_id"],
            participant_count=row["participant_count"] or 0,
        )

        record_ids = [chat_id]
        if conversation.group_key:
            # SMS/RCS and iMessage copies of one group chat share group_id
            related = self.db.fetch_all(
                conn,
                "SELECT ROWID FROM chat WHERE group_id = ? ORDER BY ROWID",
                (conversation.group_key,),
            )
            record_ids = [r["ROWID"] for r in related] or record_ids

        logger.debug("Resolved chat %s to records %s", chat_id, record_ids)
        return ConversationTarget(record_ids=record_ids, conversation=conversation)

    def resolve_contact(self, conn: sqlite3.Connection, identifier: str) -> ContactTarget:
        patterns = handle_patterns(identifier)
        where = " OR ".join("id LIKE ? ESCAPE '\\'" for _ in patterns)
        rows = self.db.fetch_all(
            conn,
            f"SELECT ROWID, id FROM handle WHERE {where} ORDER BY ROWID",
            patterns,
        )

        if not rows:
            raise NotFoundError(f"contact not found: {identifier}")

        handles = [Handle(record_id=r["ROWID"], identifier=r["id"]) for r in rows]
        logger.debug("Resolved %s to %d handles", identifier, len(handles))
        return ContactTarget(identifier=identifier, handles=handles)
