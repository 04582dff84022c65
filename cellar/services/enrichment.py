"""
AI-backed operations on the user's cellar.

  - pair_menu: food pairing against the bottles the user has.
  - enrich_wine: fill a wine's empty fields from the model's answer.
  - bulk_enrich: enrich many wines one after another.
  - identify_wine_from_image: read a label photo into wine data.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from cellar.ai.enrichment import (
    enrich_wine_data,
    enrich_wine_from_image,
    missing_fields,
    plan_enrichment,
)
from cellar.ai.pairing import get_food_pairing
from cellar.errors import NothingToEnrich
from cellar.services.wineries import add_winery, list_wineries
from cellar.services.wines import get_wine, list_wines, update_wine

logger = logging.getLogger(__name__)


async def matchable_wineries(user_id: str) -> List[Dict[str, str]]:
    """The user's wineries that have a country code, in the shape the model expects."""
    return [
        {"id": w["id"], "name": w["name"], "country_code": w["country_code"]}
        for w in await list_wineries(user_id)
        if w.get("country_code")
    ]


async def pair_menu(
    llm, user_id: str, menu: str, language: Optional[str] = None, in_stock_only: bool = True
) -> Dict[str, Any]:
    wines = await list_wines(user_id)
    if in_stock_only:
        wines = [w for w in wines if (w.get("quantity") or 0) > 0]
    return await get_food_pairing(llm, menu, wines, language)


async def _apply(
    llm,
    user_id: str,
    wine: Dict[str, Any],
    wineries: List[Dict[str, str]],
) -> Dict[str, Any]:
    """
    Enrich one wine. Newly created wineries are appended to `wineries` so
    later wines in the same run can match them.
    """
    result = await enrich_wine_data(llm, wine["name"], wine.get("vintage"), wineries)
    data = result.get("enrichmentData")
    if not data:
        raise RuntimeError(result.get("error") or "No enrichment data returned")

    changes, fields_updated, winery_to_create = plan_enrichment(wine, data)
    winery_created = False
    if winery_to_create:
        try:
            winery = await add_winery(user_id, winery_to_create["name"], winery_to_create["country_code"])
        except Exception:
            # A failed winery insert must not lose the other fields
            logger.exception(f"Failed to create winery for wine {wine['id']}")
        else:
            changes["winery_id"] = winery["id"]
            fields_updated.append("winery")
            winery_created = True
            wineries.append(
                {"id": winery["id"], "name": winery["name"], "country_code": winery["country_code"]}
            )

    if not changes:
        raise NothingToEnrich("The AI returned no new information for this wine")

    updated = await update_wine(user_id, wine["id"], changes)
    return {
        "wine": updated,
        "fieldsUpdated": fields_updated,
        "wineryCreated": winery_created,
        "confidence": data["confidence"],
        "explanation": data["explanation"],
    }


async def enrich_wine(llm, user_id: str, wine_id: str) -> Optional[Dict[str, Any]]:
    """
    Fill the empty fields of one wine.

    Returns:
        dict with the updated wine, fieldsUpdated, wineryCreated and the
        model's confidence, or None when the wine does not exist.

    Raises:
        NothingToEnrich: When nothing is missing or nothing could be filled.
        RuntimeError: When the model answer was unusable.
    """
    wine = await get_wine(user_id, wine_id)
    if wine is None:
        return None
    if not missing_fields(wine):
        raise NothingToEnrich("All fields are already filled")

    result = await _apply(llm, user_id, wine, await matchable_wineries(user_id))
    if result["confidence"] == "low":
        logger.warning(f"Low-confidence enrichment for wine {wine_id}")
    logger.info(f"Enriched wine {wine_id}: {', '.join(result['fieldsUpdated'])}")
    return result


async def bulk_enrich(llm, user_id: str, wine_ids: Sequence[str]) -> Dict[str, Any]:
    """
    Enrich several wines sequentially (to stay within provider rate limits).

    Wines with nothing missing, or for which the model had nothing new,
    count as skipped; unknown ids and model failures count as failed.
    """
    summary: Dict[str, Any] = {
        "total": len(wine_ids),
        "successful": 0,
        "failed": 0,
        "skipped": 0,
        "errors": [],
    }
    wineries = await matchable_wineries(user_id)

    for index, wine_id in enumerate(wine_ids):
        logger.info(f"Bulk enrichment {index + 1}/{len(wine_ids)}")
        wine = await get_wine(user_id, wine_id)
        if wine is None:
            summary["failed"] += 1
            summary["errors"].append({"wineName": wine_id, "error": "Wine not found"})
            continue
        if not missing_fields(wine):
            summary["skipped"] += 1
            continue

        try:
            await _apply(llm, user_id, wine, wineries)
        except NothingToEnrich:
            summary["skipped"] += 1
        except Exception as e:
            logger.error(f"Enrichment failed for wine {wine_id}: {e}")
            summary["failed"] += 1
            summary["errors"].append({"wineName": wine["name"], "error": str(e)})
        else:
            summary["successful"] += 1

    return summary


async def identify_wine_from_image(
    llm, user_id: str, base64_image: str, media_type: str
) -> Dict[str, Any]:
    return await enrich_wine_from_image(
        llm, base64_image, media_type, await matchable_wineries(user_id)
    )
