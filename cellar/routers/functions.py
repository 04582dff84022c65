"""
Edge functions.

Small authenticated proxies mounted under /functions/v1, kept wire
compatible with the clients that call them:
  - claude-proxy:     AI food pairing and wine enrichment.
  - mcp-server-proxy: list/get/add wine actions for the MCP server.
  - sentry-tunnel:    relays error-telemetry envelopes to the ingest host
                      (also reachable as sentry-proxy).

Errors are answered as {"error": "..."} JSON with CORS headers.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from cellar.ai.enrichment import enrich_wine_data, enrich_wine_from_image
from cellar.ai.llm import get_llm
from cellar.ai.pairing import get_food_pairing
from cellar.app.auth import User, current_user
from cellar.errors import AIConfigError
from cellar.services import tasting_notes as note_service
from cellar.services import wines as wine_service
from cellar.telemetry import UnknownProject, forward_envelope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["functions"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type, x-sentry-auth",
}


def _json(payload: Dict[str, Any], status_code: int = 200) -> JSONResponse:
    return JSONResponse(payload, status_code=status_code, headers=CORS_HEADERS)


def _error(message: str, status_code: int) -> JSONResponse:
    return _json({"error": message}, status_code=status_code)


@router.options("/{function_name}")
async def preflight(function_name: str):
    """CORS preflight for every function."""
    return PlainTextResponse("ok", headers=CORS_HEADERS)


@router.post("/claude-proxy")
async def claude_proxy(request: Request, user: User = Depends(current_user)):
    """
    Dispatch an AI request by its `type`.

    Body types:
        food-pairing:               menu, availableWines, language
        wine-enrichment:            wineName, existingVintage, existingWineries
        wine-enrichment-from-image: base64Image, imageMediaType, existingWineries
    """
    try:
        llm = get_llm()
    except AIConfigError as e:
        return _error(str(e), 500)

    try:
        body = await request.json()
        request_type = body.get("type") if isinstance(body, dict) else None

        if request_type == "food-pairing":
            result = await get_food_pairing(
                llm, body.get("menu", ""), body.get("availableWines") or [], body.get("language")
            )
        elif request_type == "wine-enrichment":
            result = await enrich_wine_data(
                llm, body.get("wineName", ""), body.get("existingVintage"), body.get("existingWineries")
            )
        elif request_type == "wine-enrichment-from-image":
            result = await enrich_wine_from_image(
                llm, body.get("base64Image", ""), body.get("imageMediaType", ""), body.get("existingWineries")
            )
        else:
            return _error("Invalid request type", 400)
    except Exception as e:
        logger.exception("Error in claude-proxy")
        return _error(str(e) or "Internal server error", 500)

    return _json(result)


def _new_wine(params: Dict[str, Any]) -> Dict[str, Any]:
    """Map MCP add_wine parameters onto wine columns."""
    return {
        "name": params.get("name"),
        "vintage": params.get("vintage"),
        "grapes": params.get("grapes"),
        "quantity": params.get("quantity") if params.get("quantity") is not None else 1,
        "drink_window_start": params.get("drink_from", params.get("drink_window_start")),
        "drink_window_end": params.get("drink_until", params.get("drink_window_end")),
        "price": params.get("price"),
        "bottle_size": params.get("bottle_size") or 750,
        "food_pairings": params.get("food_pairings"),
        "winery_id": params.get("winery_id"),
    }


@router.post("/mcp-server-proxy")
async def mcp_server_proxy(request: Request, user: User = Depends(current_user)):
    """
    Run one MCP action on behalf of the authenticated user.

    Body: {"action": "list_wines" | "get_wine" | "add_wine", "params": {...}}
    """
    try:
        body = await request.json()
        action = body.get("action")
        params = body.get("params") or {}

        if action == "list_wines":
            return _json({"wines": await wine_service.list_wines(user.id, order="name")})

        if action == "get_wine":
            wine_id = params.get("wine_id")
            if not wine_id:
                return _error("wine_id parameter required", 400)
            wine = await wine_service.get_wine(user.id, wine_id)
            if wine is None:
                return _error("Wine not found", 404)
            notes = await note_service.list_tasting_notes(user.id, wine_id=wine_id)
            return _json({"wine": wine, "tasting_notes": notes})

        if action == "add_wine":
            if not params.get("wine"):
                return _error("wine parameter required", 400)
            wine = await wine_service.add_wine(user.id, _new_wine(params["wine"]))
            return _json({"wine": wine})

        return _error(f"Unknown action: {action}", 400)
    except ValueError as e:
        return _error(str(e), 400)
    except Exception as e:
        logger.exception("MCP proxy error")
        return _error(str(e) or "Internal server error", 500)


@router.post("/sentry-tunnel")
@router.post("/sentry-proxy")
async def sentry_tunnel(request: Request):
    """Relay a telemetry envelope to the ingest host and mirror its answer."""
    try:
        body = (await request.body()).decode("utf-8")
        status_code, content = await forward_envelope(body, request.headers.get("x-sentry-auth"))
    except UnknownProject:
        return PlainTextResponse("Invalid Project ID", status_code=401)
    except Exception as e:
        logger.error(f"Telemetry tunnel error: {e}")
        return JSONResponse({"error": str(e)}, status_code=500)

    return Response(
        content=content,
        status_code=status_code,
        headers={"Access-Control-Allow-Origin": "*"},
    )
