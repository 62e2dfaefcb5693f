"""
Tests for the MessagesInterface query facade.
"""

import sqlite3

import pytest

from imessage_query.errors import DatabaseAccessError, InvalidArgumentError, NotFoundError
from imessage_query.messages_interface import MessagesInterface

from conftest import ago


@pytest.fixture
def interface(sample_db, codec):
    return MessagesInterface(str(sample_db), time_codec=codec)


@pytest.fixture
def closed_connections(monkeypatch):
    """Record every connection close made through sqlite3.connect."""
    closed = []
    real_connect = sqlite3.connect

    class TrackingConnection(sqlite3.Connection):
        def close(self):
            closed.append(self)
            super().close()

    def tracking_connect(*args, **kwargs):
        kwargs["factory"] = TrackingConnection
        return real_connect(*args, **kwargs)

    monkeypatch.setattr(sqlite3, "connect", tracking_connect)
    return closed


class TestListConversations:

    def test_shape(self, interface):
        result = interface.list_conversations()

        assert result["count"] == 3
        assert [c["chat_id"] for c in result["conversations"]] == [9, 8, 10]
        first = result["conversations"][0]
        assert set(first) == {"chat_id", "name", "type", "service", "participants", "last_activity"}
        assert first["last_activity"].endswith("+00:00")

    def test_imessage_only(self, interface):
        result = interface.list_conversations(limit=1, include_sms=False)
        assert result["count"] == 1
        assert result["conversations"][0]["chat_id"] == 7


class TestSearchConversations:

    def test_shape(self, interface):
        result = interface.search_conversations("Weekend")
        assert result["query"] == "Weekend"
        assert result["found"] == 1
        assert result["results"][0]["participants"] == [
            "+15551234567", "bob@example.com", "5559876543",
        ]

    @pytest.mark.parametrize("query", ["", "  ", None])
    def test_empty_query_rejected(self, interface, query):
        with pytest.raises(InvalidArgumentError):
            interface.search_conversations(query)


class TestReadMessages:

    def test_by_chat_id(self, interface):
        result = interface.read_messages("7")

        assert result["conversation"]["chat_ids"] == [7, 8]
        assert result["message_count"] == 3
        assert [m["sender"] for m in result["messages"]] == ["You", "5559876543", "+15551234567"]

    def test_by_phone(self, interface):
        result = interface.read_messages("+1 (555) 987-6543")

        assert result["conversation"] == {
            "name": "+1 (555) 987-6543",
            "type": "individual",
            "handles": ["5559876543"],
        }
        assert [m["text"] for m in result["messages"]] == ["Running late", "Me!"]

    def test_days_back(self, interface):
        assert interface.read_messages("bob@example.com", days_back=1)["message_count"] == 0
        assert interface.read_messages("bob@example.com", days_back=30)["message_count"] == 1
        assert interface.read_messages("bob@example.com", days_back=60)["message_count"] == 2

    def test_unknown_chat(self, interface):
        with pytest.raises(NotFoundError, match="conversation not found: 12345"):
            interface.read_messages("12345")

    def test_oversized_chat_id(self, interface):
        with pytest.raises(NotFoundError, match="conversation not found"):
            interface.read_messages("99999999999999999999")

    def test_unknown_contact(self, interface):
        with pytest.raises(NotFoundError, match="contact not found"):
            interface.read_messages("+44 20 7946 0000")

    def test_missing_identifier(self, interface):
        with pytest.raises(InvalidArgumentError):
            interface.read_messages("")


class TestRecentMessages:

    def test_shape(self, interface):
        result = interface.get_recent_messages()

        assert result["hours_back"] == 24
        assert result["count"] == 4
        assert set(result["messages"][0]) == {"timestamp", "conversation", "sender", "text", "service"}

    def test_hours_window(self, builder, codec):
        chat = builder.add_chat("+15550001111")
        builder.add_message("25 hours ago", ago(hours=25), chats=[chat])
        builder.add_message("1 hour ago", ago(hours=1), chats=[chat])

        result = MessagesInterface(str(builder.path), time_codec=codec).get_recent_messages(
            limit=30, hours_back=24
        )
        assert [m["text"] for m in result["messages"]] == ["1 hour ago"]


class TestHandleLifecycle:

    def test_connection_closed_after_success(self, interface, closed_connections):
        interface.list_conversations()
        interface.get_recent_messages()
        assert len(closed_connections) == 2

    def test_connection_closed_after_not_found(self, interface, closed_connections):
        with pytest.raises(NotFoundError):
            interface.read_messages("12345")
        assert len(closed_connections) == 1

    def test_query_failure_is_database_error_and_closes(self, tmp_path, closed_connections):
        empty = tmp_path / "empty.db"
        sqlite3.connect(empty).close()
        closed_connections.clear()

        interface = MessagesInterface(str(empty))
        with pytest.raises(DatabaseAccessError, match="no such table"):
            interface.list_conversations()
        assert len(closed_connections) == 1

    def test_missing_database(self, tmp_path):
        interface = MessagesInterface(str(tmp_path / "missing.db"))
        with pytest.raises(DatabaseAccessError, match="not found"):
            interface.list_conversations()

    def test_read_only(self, interface):
        with interface.db.connect() as conn:
            with pytest.raises(sqlite3.OperationalError, match="readonly"):
                conn.execute("DELETE FROM message")


class TestCheckPermissions:

    def test_accessible(self, interface):
        assert interface.check_permissions()["messages_db_accessible"] is True

    def test_missing_tables(self, tmp_path):
        empty = tmp_path / "empty.db"
        sqlite3.connect(empty).close()

        permissions = MessagesInterface(str(empty)).check_permissions()
        assert permissions["messages_db_accessible"] is False
        assert "missing required tables" in permissions["error"]

    def test_missing_file(self, tmp_path):
        permissions = MessagesInterface(str(tmp_path / "nope.db")).check_permissions()
        assert permissions["messages_db_accessible"] is False
        assert "not found" in permissions["error"]
