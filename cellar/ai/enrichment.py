"""
Wine enrichment.

Asks the model to identify a wine (from its name or a label photo) and
return structured data: grapes, vintage, drinking window, winery, price and
food pairings. The answer is untrusted, so `validate_enrichment` keeps only
well-formed fields before anything is written to the cellar.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from cellar.app.settings import settings
from cellar.ai.llm import extract_json_object
from cellar.errors import NothingToEnrich

logger = logging.getLogger(__name__)

WINE_COUNTRIES = (
    "FR", "IT", "ES", "US", "AU", "AR", "CL", "DE", "PT", "NZ", "ZA", "AT",
    "GR", "HU", "RO", "BG", "HR", "SI", "CH", "GB", "CA", "BR", "UY", "MX",
    "CN", "JP", "IN", "IL", "LB", "TR", "MA", "TN", "EG", "GE", "AM", "CY",
)

VINTAGE_MIN = 1800
VINTAGE_MAX = 2030
PRICE_MAX = 100000
CONFIDENCE_LEVELS = ("high", "medium", "low")

_RESPONSE_SHAPE = """{
  "name": "Château Example Grand Vin",
  "grapes": ["Cabernet Sauvignon", "Merlot"],
  "vintage": 2015,
  "drinkingWindow": {
    "start": 2020,
    "end": 2035
  },
  "winery": {
    "name": "Château Example",
    "countryCode": "FR",
    "matchedExistingId": "uuid-if-matched-existing-winery"
  },
  "price": 150.00,
  "foodPairings": "Gegrilltes Rindfleisch, gereifter Käse wie Gruyère oder Comté, Lammbraten, Schmorgerichte, Pilzrisotto",
  "confidence": "high",
  "explanation": "Brief explanation of your identification and confidence level"
}"""


def _wineries_text(existing_wineries: Optional[Sequence[Dict[str, Any]]]) -> str:
    if not existing_wineries:
        return ""
    lines = [
        f'{idx}. "{w["name"]}" ({w["country_code"]}) [ID: {w["id"]}]'
        for idx, w in enumerate(existing_wineries, start=1)
    ]
    return "\n\nExisting wineries in the user's collection:\n" + "\n".join(lines)


def _guidelines(year: int) -> str:
    return f"""Please provide:
1. Grape varieties used in this wine
2. Vintage year (if not already provided and if it's a specific wine)
3. Recommended drinking window (earliest and latest year to drink this wine, considering the current year is {year})
4. Winery name and country of origin (use ISO 3166-1 alpha-2 country code)
5. Approximate retail price per bottle in USD (only if you can provide a reasonable estimate)
6. Food pairing recommendations IN SWISS STANDARD GERMAN (Schweizer Hochdeutsch), as a comma-separated list of dishes and ingredients
7. IMPORTANT: If the winery matches one of the existing wineries above (considering variations like "Château" vs "Chateau", "&" vs "and", etc.), include the matchedExistingId field with that winery's ID

Return your response as a JSON object with this exact structure:
{_RESPONSE_SHAPE}

Important guidelines:
- Only include fields you can confidently identify
- If the wine is too generic (e.g., just "Merlot") or you cannot identify it, set confidence to "low"
- Vintage should be between {VINTAGE_MIN} and {VINTAGE_MAX}
- Drinking window start must be less than end
- Valid country codes: {", ".join(WINE_COUNTRIES)}
- Price should be a positive retail price estimate in USD
- foodPairings MUST be in Swiss Standard German, NOT dialect; use "ss" instead of "ß"
- Confidence should be "high" for specific, well-known wines, "medium" for regional wines, "low" for generic varieties
- Only include matchedExistingId if you're confident the winery is the same, accounting for spelling variations"""


def build_enrichment_prompt(
    wine_name: str,
    existing_vintage: Optional[int],
    existing_wineries: Optional[Sequence[Dict[str, Any]]],
    year: int,
) -> str:
    vintage = f" (vintage: {existing_vintage})" if existing_vintage else ""
    return (
        "You are a wine expert. I need you to identify this wine and provide structured data about it.\n\n"
        f"Wine name: {wine_name}{vintage}{_wineries_text(existing_wineries)}\n\n"
        + _guidelines(year)
    )


def build_image_prompt(existing_wineries: Optional[Sequence[Dict[str, Any]]], year: int) -> str:
    return (
        "You are a wine expert. The attached photo shows a wine bottle or its label. "
        "Identify the wine, including its full name in the \"name\" field, and provide "
        f"structured data about it.{_wineries_text(existing_wineries)}\n\n"
        + _guidelines(year)
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_enrichment(
    parsed: Dict[str, Any],
    existing_wineries: Optional[Sequence[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """
    Keep only the well-formed fields of a model answer.

    Returns:
        dict with `confidence` and `explanation` always present, plus any of
        name, grapes, vintage, drinkingWindow, winery, price and
        foodPairings that passed validation.
    """
    confidence = parsed.get("confidence")
    data: Dict[str, Any] = {
        "confidence": confidence if confidence in CONFIDENCE_LEVELS else "low",
        "explanation": parsed.get("explanation") or "No explanation provided",
    }

    name = parsed.get("name")
    if isinstance(name, str) and name.strip():
        data["name"] = name.strip()

    grapes = parsed.get("grapes")
    if isinstance(grapes, list):
        grapes = [g.strip() for g in grapes if isinstance(g, str) and g.strip()]
        if grapes:
            data["grapes"] = grapes

    vintage = parsed.get("vintage")
    if _is_number(vintage) and VINTAGE_MIN <= vintage <= VINTAGE_MAX:
        data["vintage"] = int(vintage)

    window = parsed.get("drinkingWindow")
    if (
        isinstance(window, dict)
        and _is_number(window.get("start"))
        and _is_number(window.get("end"))
        and window["start"] < window["end"]
    ):
        data["drinkingWindow"] = {"start": int(window["start"]), "end": int(window["end"])}

    winery = parsed.get("winery")
    if isinstance(winery, dict) and winery.get("name") and isinstance(winery.get("countryCode"), str):
        country = winery["countryCode"].upper()
        if country in WINE_COUNTRIES:
            data["winery"] = {"name": winery["name"], "countryCode": country}
            matched = winery.get("matchedExistingId")
            known_ids = {w["id"] for w in existing_wineries or []}
            if matched and matched in known_ids:
                data["winery"]["matchedExistingId"] = matched

    price = parsed.get("price")
    if _is_number(price) and 0 < price <= PRICE_MAX:
        data["price"] = price

    pairings = parsed.get("foodPairings")
    if isinstance(pairings, str) and pairings.strip():
        data["foodPairings"] = pairings.strip()

    return data


def _response_from_text(
    text: str, existing_wineries: Optional[Sequence[Dict[str, Any]]]
) -> Dict[str, Any]:
    try:
        parsed = extract_json_object(text)
    except ValueError:
        parsed = None
    if parsed is None:
        return {"enrichmentData": None, "error": "Failed to parse enrichment response"}
    return {"enrichmentData": validate_enrichment(parsed, existing_wineries)}


async def enrich_wine_data(
    llm,
    wine_name: str,
    existing_vintage: Optional[int] = None,
    existing_wineries: Optional[Sequence[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """
    Identify a wine by name.

    Returns:
        {"enrichmentData": {...}} on success, or
        {"enrichmentData": None, "error": "..."} when the answer is unusable.
    """
    if not (wine_name or "").strip():
        raise ValueError("wineName is required")

    text = await llm.complete(
        build_enrichment_prompt(wine_name, existing_vintage, existing_wineries, date.today().year),
        max_tokens=settings.LLM_MAX_TOKENS_ENRICHMENT,
    )
    return _response_from_text(text, existing_wineries)


async def enrich_wine_from_image(
    llm,
    base64_image: str,
    image_media_type: str,
    existing_wineries: Optional[Sequence[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Identify a wine from a base64-encoded label photo."""
    if not base64_image:
        raise ValueError("base64Image is required")
    if not (image_media_type or "").startswith("image/"):
        raise ValueError("imageMediaType must be an image type")

    text = await llm.complete(
        build_image_prompt(existing_wineries, date.today().year),
        max_tokens=settings.LLM_MAX_TOKENS_ENRICHMENT,
        image_base64=base64_image,
        image_media_type=image_media_type,
    )
    return _response_from_text(text, existing_wineries)


def missing_fields(wine: Dict[str, Any]) -> List[str]:
    """Names of enrichable fields the wine does not have yet."""
    missing = []
    if not wine.get("grapes"):
        missing.append("grapes")
    if wine.get("vintage") is None:
        missing.append("vintage")
    if wine.get("drink_window_start") is None or wine.get("drink_window_end") is None:
        missing.append("drinking_window")
    if wine.get("winery_id") is None:
        missing.append("winery")
    if wine.get("price") is None:
        missing.append("price")
    if not (wine.get("food_pairings") or "").strip():
        missing.append("food_pairings")
    return missing


def plan_enrichment(
    wine: Dict[str, Any], data: Dict[str, Any]
) -> Tuple[Dict[str, Any], List[str], Optional[Dict[str, str]]]:
    """
    Decide which enrichment values fill which empty wine fields.

    Existing values are never overwritten.

    Returns:
        (changes, fields_updated, winery_to_create). `winery_to_create` is
        set when the model named a winery that matched none of the user's;
        the caller creates it, sets `winery_id` and reports the "winery" field.

    Raises:
        NothingToEnrich: If the wine has no empty enrichable field.
    """
    missing = missing_fields(wine)
    if not missing:
        raise NothingToEnrich("All fields are already filled")

    changes: Dict[str, Any] = {}
    fields_updated: List[str] = []
    winery_to_create: Optional[Dict[str, str]] = None

    if "grapes" in missing and data.get("grapes"):
        changes["grapes"] = data["grapes"]
        fields_updated.append("grapes")

    if "vintage" in missing and data.get("vintage"):
        changes["vintage"] = data["vintage"]
        fields_updated.append("vintage")

    if "drinking_window" in missing and data.get("drinkingWindow"):
        changes["drink_window_start"] = data["drinkingWindow"]["start"]
        changes["drink_window_end"] = data["drinkingWindow"]["end"]
        fields_updated.append("drinking_window")

    if "price" in missing and data.get("price"):
        changes["price"] = data["price"]
        fields_updated.append("price")

    if "food_pairings" in missing and data.get("foodPairings"):
        changes["food_pairings"] = data["foodPairings"]
        fields_updated.append("food_pairings")

    if "winery" in missing and data.get("winery"):
        winery = data["winery"]
        if winery.get("matchedExistingId"):
            changes["winery_id"] = winery["matchedExistingId"]
            fields_updated.append("winery")
        else:
            winery_to_create = {"name": winery["name"], "country_code": winery["countryCode"]}

    return changes, fields_updated, winery_to_create
