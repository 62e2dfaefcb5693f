"""Read-only iMessage / SMS / RCS history queries over chat.db."""

from imessage_query.errors import (
    DatabaseAccessError,
    InvalidArgumentError,
    MessagesQueryError,
    NotFoundError,
)
from imessage_query.messages_interface import MessagesInterface

__version__ = "1.0.0"

__all__ = [
    "MessagesInterface",
    "MessagesQueryError",
    "NotFoundError",
    "InvalidArgumentError",
    "DatabaseAccessError",
]
