"""
User token resolution for MCP requests.

Over streamable HTTP every request may carry its own `Authorization: Bearer`
header, which is forwarded to the cellar backend as is. Over stdio there are
no headers and the configured USER_AUTH_TOKEN is used instead. The backend
does the actual verification; this layer only refuses calls that have no
token at all.
"""

from typing import Optional

from mcp import McpError
from mcp.types import ErrorData

from fastmcp.exceptions import ToolError
from fastmcp.server.dependencies import get_http_headers
from fastmcp.server.middleware import Middleware, MiddlewareContext

from cellar.app.auth import bearer_token


def request_token(fallback: Optional[str]) -> Optional[str]:
    """Bearer token of the current HTTP request, else `fallback`."""
    headers = get_http_headers(include_all=True) or {}
    token = bearer_token(headers.get("authorization") or headers.get("Authorization"))
    return token or fallback


class UserTokenMiddleware(Middleware):
    def __init__(self, fallback_token: Optional[str]):
        self.fallback_token = fallback_token

    async def __call__(self, context: MiddlewareContext, call_next):
        if not request_token(self.fallback_token):
            return self._deny(
                context,
                "Unauthorized: missing Authorization Bearer token and USER_AUTH_TOKEN is not set",
            )
        return await call_next(context)

    def _deny(self, context: MiddlewareContext, message: str):
        method = getattr(context, "method", "") or ""
        if method == "tools/call":
            raise ToolError(message)

        # list_tools / initialize / ping / resources
        raise McpError(ErrorData(code=-32001, message=message))
