"""MCP server exposing the wine collection to AI assistants."""
