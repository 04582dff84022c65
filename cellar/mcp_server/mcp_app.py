"""
MCP application instance.

Creates and exports the single FastMCP application object of the cellar MCP
server. Tools and resources register themselves on it from
cellar.mcp_server.tools; the server entry point attaches the token middleware.
"""

from fastmcp import FastMCP

mcp = FastMCP("celly-mcp-server")
