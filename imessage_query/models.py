"""
Read-only projections of chat.db rows.

None of these are persisted; they are built per query and discarded.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from imessage_query.apple_time import format_local, to_iso

IMESSAGE_SERVICE = "iMessage"


@dataclass
class Handle:
    """A single contact endpoint (phone number or email)."""

    record_id: int
    identifier: str


@dataclass
class Participant:
    record_id: int
    identifier: str


@dataclass
class Conversation:
    """
    One row of the ``chat`` table.

    ``record_id`` is stable per underlying record only. Records sharing a
    non-null ``group_key`` are the same logical conversation across
    protocols.
    """

    record_id: int
    display_name: Optional[str]
    conversation_key: Optional[str]
    service_name: Optional[str]
    group_key: Optional[str] = None
    participant_count: int = 0
    last_activity: Optional[int] = None
    participants: List[str] = field(default_factory=list)

    @property
    def name(self) -> Optional[str]:
        return self.display_name or self.conversation_key

    @property
    def kind(self) -> str:
        return "group" if self.participant_count > 1 else "individual"

    @property
    def logical_key(self) -> str:
        """Grouping key; records without a group key stand alone."""
        if self.group_key:
            return f"group:{self.group_key}"
        return f"chat:{self.record_id}"

    def to_summary(self) -> dict:
        return {
            "chat_id": self.record_id,
            "name": self.name,
            "type": self.kind,
            "service": self.service_name,
            "participants": self.participant_count,
            "last_activity": to_iso(self.last_activity),
        }

    def to_search_result(self) -> dict:
        return {
            "chat_id": self.record_id,
            "name": self.name,
            "type": self.kind,
            "service": self.service_name,
            "participants": list(self.participants),
        }


@dataclass
class Message:
    record_id: int
    timestamp: int
    text: Optional[str]
    is_from_me: bool
    sender_identifier: Optional[str]
    service: Optional[str]
    conversation_label: Optional[str] = None

    @property
    def sender(self) -> str:
        if self.is_from_me:
            return "You"
        return self.sender_identifier or "Unknown"

    def to_dict(self) -> dict:
        return {
            "timestamp": format_local(self.timestamp),
            "sender": self.sender,
            "text": self.text,
            "service": self.service,
        }

    def to_recent_dict(self) -> dict:
        return {
            "timestamp": format_local(self.timestamp),
            "conversation": self.conversation_label or self.sender_identifier or "Unknown",
            "sender": self.sender,
            "text": self.text,
            "service": self.service,
        }
