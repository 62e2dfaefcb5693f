"""
Read-only access to the Messages database (chat.db).

Every operation opens its own connection through ``ChatDatabase.connect()``
and the connection is closed on every exit path. Nothing here writes.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence

from imessage_query.errors import DatabaseAccessError

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / "Library" / "Messages" / "chat.db"

REQUIRED_TABLES = {
    "chat",
    "handle",
    "message",
    "chat_handle_join",
    "chat_message_join",
}


class ChatDatabase:
    """Opens scoped, read-only connections to chat.db.

    Usage:
        db = ChatDatabase()
        with db.connect() as conn:
            rows = db.fetch_all(conn, "SELECT ROWID FROM chat")
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = Path(db_path).expanduser() if db_path else DEFAULT_DB_PATH

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Acquire a read-only connection; always released on exit."""
        if not self.db_path.exists():
            raise DatabaseAccessError(f"Messages database not found: {self.db_path}")

        try:
            conn = sqlite3.connect(f"file:{self.db_path}?mode=ro", uri=True)
        except sqlite3.Error as e:
            raise DatabaseAccessError(f"unable to open database {self.db_path}: {e}") from e

        conn.row_factory = sqlite3.Row
        logger.debug("Opened read-only connection to %s", self.db_path)
        try:
            yield conn
        except sqlite3.Error as e:
            raise DatabaseAccessError(str(e)) from e
        finally:
            conn.close()
            logger.debug("Closed connection to %s", self.db_path)

    @staticmethod
    def fetch_all(
        conn: sqlite3.Connection, query: str, params: Sequence[Any] = ()
    ) -> List[sqlite3.Row]:
        return conn.execute(query, tuple(params)).fetchall()

    @staticmethod
    def fetch_one(
        conn: sqlite3.Connection, query: str, params: Sequence[Any] = ()
    ) -> Optional[sqlite3.Row]:
        return conn.execute(query, tuple(params)).fetchone()

    def check_permissions(self) -> dict:
        """
        Report whether chat.db exists and has the expected tables.

        Returns:
            dict with ``messages_db_accessible``, ``path`` and ``error``.
        """
        result = {
            "messages_db_accessible": False,
            "path": str(self.db_path),
            "error": None,
        }
        try:
            with self.connect() as conn:
                rows = self.fetch_all(
                    conn, "SELECT name FROM sqlite_master WHERE type='table'"
                )
        except DatabaseAccessError as e:
            result["error"] = str(e)
            return result

        tables = {row["name"] for row in rows}
        missing = REQUIRED_TABLES - tables
        if missing:
            result["error"] = f"Database missing required tables: {sorted(missing)}"
            return result

        result["messages_db_accessible"] = True
        return result


def placeholders(values: Sequence[Any]) -> str:
    """``?, ?, ?`` for an IN clause."""
    return ", ".join("?" for _ in values)
