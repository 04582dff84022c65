"""
Cellar backend client for the MCP server.

All calls go through the backend's mcp-server-proxy edge function, which
authenticates the user token and runs the action against that user's
cellar. Only the token travels; no database credentials live here.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class CellarAPIError(Exception):
    """The backend refused or failed an action."""


class CellarClient:
    """
    Async client for the list/get/add wine actions.
    """

    def __init__(
        self,
        api_url: str,
        token: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 15.0,
    ):
        """
        Args:
            api_url:   Base URL of the cellar backend.
            token:     The user's API token, sent as a Bearer token.
            transport: Optional httpx transport (tests plug a mock in here).
        """
        self.proxy_url = f"{api_url.rstrip('/')}/functions/v1/mcp-server-proxy"
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        self._transport = transport
        self._timeout = timeout

    async def _call(self, verb: str, action: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"action": action}
        if params is not None:
            payload["params"] = params

        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            try:
                resp = await client.post(self.proxy_url, json=payload, headers=self.headers)
            except httpx.HTTPError as e:
                raise CellarAPIError(f"Failed to {verb}: {e}") from e

        try:
            result = resp.json()
        except ValueError:
            result = {}

        if resp.status_code >= 400:
            message = result.get("error") if isinstance(result, dict) else None
            raise CellarAPIError(f"Failed to {verb}: {message or resp.reason_phrase}")
        if isinstance(result, dict) and result.get("error"):
            raise CellarAPIError(f"Failed to {verb}: {result['error']}")
        return result

    async def get_wines(self) -> List[Dict[str, Any]]:
        """Fetch all wines of the user, ordered by name."""
        result = await self._call("fetch wines", "list_wines")
        return result.get("wines") or []

    async def get_wine(self, wine_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a single wine with its tasting notes attached under
        `tasting_notes`. Returns None when the backend knows no such wine.
        """
        try:
            result = await self._call("fetch wine", "get_wine", {"wine_id": wine_id})
        except CellarAPIError as e:
            if "Wine not found" in str(e):
                return None
            raise
        wine = result.get("wine")
        if wine is None:
            return None
        return {**wine, "tasting_notes": result.get("tasting_notes") or []}

    async def add_wine(self, params: Dict[str, Any]) -> Dict[str, Any]:
        result = await self._call("add wine", "add_wine", {"wine": params})
        if not result.get("wine"):
            raise CellarAPIError("Failed to add wine: No wine returned")
        return result["wine"]
