"""Allow `python -m imessage_query.mcp_server` to start the server."""

from .server import run


if __name__ == "__main__":  # pragma: no cover - manual execution path
    run()
