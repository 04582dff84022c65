"""
Food pairing: ask the model to pick the best bottles from the user's
cellar for a given menu, then map its numbered picks back to wines.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from cellar.app.settings import settings
from cellar.ai.llm import extract_json_object
from cellar.errors import AIResponseError

logger = logging.getLogger(__name__)

LANGUAGES = ("en", "de-CH")

_LANGUAGE_INSTRUCTIONS = {
    "de-CH": (
        "IMPORTANT: Write all explanations in Swiss Standard German (Schweizer Hochdeutsch), "
        "NOT dialect. Use standard German grammar and vocabulary as used in Switzerland. "
        'Key differences: use "ss" instead of "ß", prefer Swiss terminology.'
    ),
    "en": "Write all explanations in English.",
}


def pairing_wine(wine: Dict[str, Any]) -> Dict[str, Any]:
    """The subset of a wine row sent to the model."""
    return {
        "id": wine["id"],
        "name": wine["name"],
        "vintage": wine.get("vintage"),
        "grapes": wine.get("grapes") or [],
        "quantity": wine.get("quantity"),
        "price": wine.get("price"),
    }


def format_wine_list(wines: Sequence[Dict[str, Any]]) -> str:
    lines = []
    for idx, w in enumerate(wines, start=1):
        line = f"{idx}. {w['name']}"
        if w.get("vintage"):
            line += f" ({w['vintage']})"
        grapes = ", ".join(w.get("grapes") or []) or "Not specified"
        line += f" - Grapes: {grapes}, Quantity: {w.get('quantity')}"
        if w.get("price"):
            line += f", Price: ${w['price']}"
        lines.append(line)
    return "\n".join(lines)


def build_pairing_prompt(menu: str, wines: Sequence[Dict[str, Any]], language: str) -> str:
    return f"""You are an expert sommelier. Given this menu/dish and available wines from the user's cellar, suggest the best wine pairings.

Menu/Dish: {menu}

Available wines in cellar:
{format_wine_list(wines)}

Please provide your top 3 wine recommendations. For each wine, explain why it pairs well with the dish, highlighting specific flavor interactions, complementary characteristics, or traditional pairing principles.

{_LANGUAGE_INSTRUCTIONS[language]}

Return your response as a JSON object with this exact structure:
{{
  "recommendations": [
    {{
      "wineIndex": 1,
      "rank": 1,
      "pairingScore": 95,
      "explanation": "Detailed explanation of why this wine pairs well..."
    }}
  ]
}}

Important:
- wineIndex should match the number from the wine list above (1-indexed)
- pairingScore should be between 1-100
- rank should be 1, 2, or 3
- explanation should be 2-4 sentences explaining the pairing
- Only recommend wines that are actually in the list
- Consider the wine's grape varieties, typical characteristics, and how they complement the food"""


def parse_pairing_response(text: str, wines: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Map the model's numbered recommendations back onto `wines`.

    Recommendations pointing outside the list are dropped.

    Raises:
        AIResponseError: If the answer holds no usable JSON.
    """
    try:
        parsed = extract_json_object(text)
    except ValueError as e:
        raise AIResponseError(f"Failed to parse pairing response: {e}") from e
    if parsed is None or not isinstance(parsed.get("recommendations"), list):
        raise AIResponseError("Failed to parse pairing response")

    recommendations: List[Dict[str, Any]] = []
    for rec in parsed["recommendations"]:
        index = rec.get("wineIndex") if isinstance(rec, dict) else None
        if not isinstance(index, int) or not 1 <= index <= len(wines):
            logger.warning(f"Dropping pairing recommendation with wineIndex={index!r}")
            continue
        wine = wines[index - 1]
        recommendations.append(
            {
                "wineId": wine["id"],
                "wineName": wine["name"],
                "vintage": wine.get("vintage"),
                "grapes": wine.get("grapes") or [],
                "rank": rec.get("rank"),
                "pairingScore": rec.get("pairingScore"),
                "explanation": rec.get("explanation"),
            }
        )
    return {"recommendations": recommendations}


async def get_food_pairing(
    llm,
    menu: str,
    wines: Sequence[Dict[str, Any]],
    language: Optional[str] = "de-CH",
) -> Dict[str, Any]:
    """
    Recommend up to three wines from `wines` for `menu`.

    Raises:
        ValueError: If the menu is empty, no wines are given or the language
            is not supported.
        AIResponseError: If the model answer cannot be parsed.
    """
    language = language or "de-CH"
    if language not in LANGUAGES:
        raise ValueError(f"language must be one of {', '.join(LANGUAGES)}")
    if not (menu or "").strip():
        raise ValueError("menu is required")
    if not wines:
        raise ValueError("No wines available in your cellar for pairing")

    available = [pairing_wine(w) for w in wines]
    logger.info(f"Requesting food pairing ({len(available)} wines, language={language})")
    text = await llm.complete(
        build_pairing_prompt(menu, available, language),
        max_tokens=settings.LLM_MAX_TOKENS_PAIRING,
    )
    return parse_pairing_response(text, available)
