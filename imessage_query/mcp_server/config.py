"""
Configuration for the iMessage query MCP server.

Handles path resolution, logging setup, and configuration loading.
Settings come from an optional JSON file (``IMESSAGE_QUERY_CONFIG``)
layered over defaults, with environment overrides for the database path.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from imessage_query import __version__

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "server_name": "imessage-query",
    "version": __version__,
    "paths": {
        "messages_db": "~/Library/Messages/chat.db",
    },
}

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def resolve_path(path_str: str) -> str:
    """Expand ``~`` and return an absolute path string."""
    path = Path(path_str)
    if path_str.startswith("~"):
        return str(path.expanduser())
    return str(path.resolve())


def load_config(config_path: Optional[str] = None) -> dict:
    """
    Load server configuration.

    Args:
        config_path: JSON file to read. Defaults to ``IMESSAGE_QUERY_CONFIG``;
            when neither is set the built-in defaults are used.

    Returns:
        Merged configuration dict
    """
    config = {
        "server_name": DEFAULT_CONFIG["server_name"],
        "version": DEFAULT_CONFIG["version"],
        "paths": dict(DEFAULT_CONFIG["paths"]),
    }

    config_path = config_path or os.getenv("IMESSAGE_QUERY_CONFIG")
    if config_path:
        with open(resolve_path(config_path)) as f:
            data = json.load(f)
        config["server_name"] = data.get("server_name", config["server_name"])
        config["version"] = data.get("version", config["version"])
        config["paths"].update(data.get("paths", {}))

    db_override = os.getenv("IMESSAGE_DB_PATH")
    if db_override:
        config["paths"]["messages_db"] = db_override

    config["paths"]["messages_db"] = resolve_path(config["paths"]["messages_db"])
    return config


def get_log_dir() -> Path:
    return Path(os.getenv("IMESSAGE_QUERY_LOG_DIR", "~/.imessage-query/logs")).expanduser()


def configure_logging(level: int = logging.INFO) -> None:
    """
    Log to a file and to stderr.

    stdout carries the MCP protocol, so nothing may log there.
    """
    log_dir = get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_dir / 'mcp_server.log'),
            logging.StreamHandler()
        ]
    )
