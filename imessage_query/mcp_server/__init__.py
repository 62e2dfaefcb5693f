"""MCP transport for the iMessage query engine."""
