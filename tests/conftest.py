"""
Shared fixtures: a throwaway SQLite file with the chat.db table layout.
"""

import sqlite3

import pytest

from imessage_query.apple_time import AppleTimeCodec, from_unix_seconds

# 2025-10-09T09:46:40Z
NOW = 1_760_003_200

SCHEMA = """
CREATE TABLE chat (
    ROWID INTEGER PRIMARY KEY AUTOINCREMENT,
    guid TEXT,
    chat_identifier TEXT,
    service_name TEXT,
    display_name TEXT,
    group_id TEXT
);
CREATE TABLE handle (
    ROWID INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL,
    service TEXT
);
CREATE TABLE message (
    ROWID INTEGER PRIMARY KEY AUTOINCREMENT,
    guid TEXT,
    text TEXT,
    handle_id INTEGER DEFAULT 0,
    service TEXT,
    date INTEGER,
    is_from_me INTEGER DEFAULT 0,
    attributedBody BLOB
);
CREATE TABLE chat_handle_join (chat_id INTEGER, handle_id INTEGER);
CREATE TABLE chat_message_join (chat_id INTEGER, message_id INTEGER, message_date INTEGER DEFAULT 0);
"""


def ago(hours: float = 0, minutes: float = 0, days: float = 0) -> int:
    """Native timestamp for a moment before NOW."""
    return from_unix_seconds(NOW - days * 86400 - hours * 3600 - minutes * 60)


class ChatDbBuilder:
    """Writes fixture rows into a chat.db-shaped SQLite file."""

    def __init__(self, path):
        self.path = path
        self.conn = sqlite3.connect(path)
        self.conn.executescript(SCHEMA)

    def add_handle(self, identifier: str, rowid: int = None, service: str = "iMessage") -> int:
        cur = self.conn.execute(
            "INSERT INTO handle (ROWID, id, service) VALUES (?, ?, ?)",
            (rowid, identifier, service),
        )
        self.conn.commit()
        return cur.lastrowid

    def add_chat(
        self,
        chat_identifier: str,
        service: str = "iMessage",
        display_name: str = None,
        group_id: str = None,
        handles=(),
        rowid: int = None,
    ) -> int:
        cur = self.conn.execute(
            "INSERT INTO chat (ROWID, chat_identifier, service_name, display_name, group_id) "
            "VALUES (?, ?, ?, ?, ?)",
            (rowid, chat_identifier, service, display_name, group_id),
        )
        chat_id = cur.lastrowid
        for handle_id in handles:
            self.conn.execute(
                "INSERT INTO chat_handle_join (chat_id, handle_id) VALUES (?, ?)",
                (chat_id, handle_id),
            )
        self.conn.commit()
        return chat_id

    def add_message(
        self,
        text,
        date: int,
        chats=(),
        handle_id: int = 0,
        is_from_me: bool = False,
        service: str = "iMessage",
    ) -> int:
        cur = self.conn.execute(
            "INSERT INTO message (text, handle_id, service, date, is_from_me) VALUES (?, ?, ?, ?, ?)",
            (text, handle_id, service, date, int(is_from_me)),
        )
        message_id = cur.lastrowid
        for chat_id in chats:
            self.conn.execute(
                "INSERT INTO chat_message_join (chat_id, message_id, message_date) VALUES (?, ?, ?)",
                (chat_id, message_id, date),
            )
        self.conn.commit()
        return message_id

    def close(self):
        self.conn.close()


@pytest.fixture
def builder(tmp_path):
    """Empty chat.db-shaped database."""
    b = ChatDbBuilder(tmp_path / "chat.db")
    yield b
    b.close()


@pytest.fixture
def codec():
    return AppleTimeCodec(clock=lambda: NOW)


@pytest.fixture
def sample_db(builder):
    """
    A small mixed-protocol history:

    - chat 7 (iMessage) and chat 8 (SMS) are one group chat, group_id G1
    - chat 9 is a 1:1 SMS thread with an Android contact
    - chat 10 is a 1:1 iMessage thread by email
    """
    alice = builder.add_handle("+15551234567", rowid=1)
    bob = builder.add_handle("bob@example.com", rowid=2)
    carol = builder.add_handle("5559876543", rowid=3, service="SMS")

    builder.add_chat("chat100200300", display_name="Weekend Plans", group_id="G1",
                     handles=[alice, bob, carol], rowid=7)
    builder.add_chat("chat100200300", service="SMS", display_name="Weekend Plans",
                     group_id="G1", handles=[alice, bob, carol], rowid=8)
    builder.add_chat("5559876543", service="SMS", handles=[carol], rowid=9)
    builder.add_chat("bob@example.com", handles=[bob], rowid=10)

    builder.add_message("Who's in for Saturday?", ago(hours=3), chats=[7], handle_id=alice)
    builder.add_message("Me!", ago(hours=2), chats=[8], handle_id=carol, service="SMS")
    builder.add_message("Count me in", ago(hours=1), chats=[7, 8], is_from_me=True)
    builder.add_message(None, ago(minutes=50), chats=[7], handle_id=bob)
    builder.add_message("", ago(minutes=45), chats=[8], handle_id=carol, service="SMS")
    builder.add_message("Running late", ago(minutes=30), chats=[9], handle_id=carol, service="SMS")
    builder.add_message("See you there", ago(days=2), chats=[10], handle_id=bob)
    builder.add_message("Old news", ago(days=40), chats=[10], handle_id=bob)
    return builder.path
