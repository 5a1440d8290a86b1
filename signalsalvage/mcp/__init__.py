"""MCP playtest server for Signal & Salvage."""
