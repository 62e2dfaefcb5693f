"""Exceptions raised by the query engine."""


class MessagesQueryError(Exception):
    """Base class for errors surfaced to tool callers."""
    pass


class NotFoundError(MessagesQueryError):
    """An identifier matched no conversation or contact."""
    pass


class InvalidArgumentError(MessagesQueryError):
    """A required argument was missing or degenerate."""
    pass


class DatabaseAccessError(MessagesQueryError):
    """Error accessing the Messages database."""
    pass
