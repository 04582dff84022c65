"""
Wine tools and resources of the MCP server.

Tools:
  - list_wines: the collection grouped by drinking status.
  - get_wine:   one wine with its tasting notes.
  - add_wine:   add a wine to the collection.

Resources:
  - celly://wines            the collection (markdown)
  - celly://wines/{wine_id}  one wine (markdown)

Each call builds a CellarClient for the token of the current request, so one
HTTP server can serve several users.
"""

import logging
from typing import Any, Dict, List, Optional

from fastmcp.exceptions import ToolError

from cellar.mcp_server.auth_middleware import request_token
from cellar.mcp_server.client import CellarAPIError, CellarClient
from cellar.mcp_server.config import Config, load_config
from cellar.mcp_server.markdown import render_added_wine, render_collection, render_wine_detail
from cellar.mcp_server.mcp_app import mcp

logger = logging.getLogger(__name__)

_config: Optional[Config] = None


def configure(config: Config) -> None:
    """Set the configuration used by tools and resources."""
    global _config
    _config = config


def get_client() -> CellarClient:
    global _config
    if _config is None:
        _config = load_config(require_token=False)

    token = request_token(_config.user_auth_token)
    if not token:
        raise ToolError("No user token available")
    return CellarClient(_config.api_url, token)


async def collection_text(client: CellarClient) -> str:
    return render_collection(await client.get_wines())


async def wine_detail_text(client: CellarClient, wine_id: str) -> str:
    return render_wine_detail(await client.get_wine(wine_id), wine_id)


async def add_wine_text(client: CellarClient, params: Dict[str, Any]) -> str:
    return render_added_wine(await client.add_wine(params))


def _tool_error(action: str, e: Exception) -> ToolError:
    # API errors already say what failed
    if isinstance(e, CellarAPIError):
        return ToolError(str(e))
    return ToolError(f"Failed to {action}: {e}")


@mcp.tool
async def list_wines() -> str:
    """
    List all wines in the collection, organized by drinking status
    (ready to drink, age further, past peak).
    """
    try:
        return await collection_text(get_client())
    except Exception as e:
        logger.error(f"list_wines failed: {e}")
        raise _tool_error("list wines", e)


@mcp.tool
async def get_wine(wine_id: str) -> str:
    """
    Get detailed information about a specific wine including tasting notes.

    Args:
        wine_id: ID of the wine to retrieve.
    """
    try:
        return await wine_detail_text(get_client(), wine_id)
    except Exception as e:
        logger.error(f"get_wine failed: {e}")
        raise _tool_error("get wine details", e)


@mcp.tool
async def add_wine(
    name: str,
    vintage: Optional[int] = None,
    grapes: Optional[List[str]] = None,
    quantity: Optional[int] = None,
    drink_from: Optional[int] = None,
    drink_until: Optional[int] = None,
    price: Optional[float] = None,
    bottle_size: Optional[int] = None,
    food_pairings: Optional[str] = None,
    winery_id: Optional[str] = None,
) -> str:
    """
    Add a new wine to the collection.

    Args:
        name:          Name of the wine.
        vintage:       Vintage year.
        grapes:        Grape varieties.
        quantity:      Number of bottles (default 1).
        drink_from:    Start of the drinking window (year).
        drink_until:   End of the drinking window (year).
        price:         Price in CHF.
        bottle_size:   Bottle size in ml (default 750).
        food_pairings: Food pairing suggestions.
        winery_id:     ID of the winery.
    """
    params = {
        "name": name,
        "vintage": vintage,
        "grapes": grapes,
        "quantity": quantity,
        "drink_from": drink_from,
        "drink_until": drink_until,
        "price": price,
        "bottle_size": bottle_size,
        "food_pairings": food_pairings,
        "winery_id": winery_id,
    }
    try:
        return await add_wine_text(
            get_client(), {k: v for k, v in params.items() if v is not None}
        )
    except Exception as e:
        logger.error(f"add_wine failed: {e}")
        raise _tool_error("add wine", e)


@mcp.resource("celly://wines", name="Wine Collection", mime_type="text/markdown")
async def wine_collection() -> str:
    """Your complete wine collection with drinking status."""
    return await collection_text(get_client())


@mcp.resource("celly://wines/{wine_id}", name="Wine Details", mime_type="text/markdown")
async def wine_details(wine_id: str) -> str:
    """Detailed information about a specific wine."""
    return await wine_detail_text(get_client(), wine_id)
