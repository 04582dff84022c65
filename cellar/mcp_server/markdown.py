"""
Markdown rendering of wines for MCP clients.

The assistant reads these texts verbatim, so they stay short and regular:
one heading per wine, one bullet per known attribute.
"""

from typing import Any, Dict, List, Optional, Tuple

from cellar.domain.drinking import FUTURE, NO_WINDOW, PAST, READY, current_year, drinking_status

SECTIONS = (
    (READY, "Ready to Drink"),
    (PAST, "Past Peak (Drink Soon)"),
    (FUTURE, "Age Further"),
    (NO_WINDOW, "No Drinking Window Set"),
)


def drinking_window(wine: Dict[str, Any]) -> Tuple[Optional[int], Optional[int]]:
    """(start, end) of a wine, accepting the drink_from/drink_until aliases."""
    start = wine.get("drink_window_start") or wine.get("drink_from")
    end = wine.get("drink_window_end") or wine.get("drink_until")
    return start, end


def _window_text(start, end, sep: str) -> str:
    return f"{start or 'now'}{sep}{end or 'indefinitely'}"


def _price_text(price) -> str:
    return f"CHF {float(price):.2f}"


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" + ("" if n == 1 else "s")


def format_wine_list(wines: List[Dict[str, Any]]) -> str:
    out = ""
    for wine in wines:
        out += f"### {wine['name']}"
        if wine.get("vintage"):
            out += f" ({wine['vintage']})"
        out += "\n"

        if wine.get("grapes"):
            out += f"- Grapes: {', '.join(wine['grapes'])}\n"
        out += f"- Quantity: {wine.get('quantity', 0)}\n"

        start, end = drinking_window(wine)
        if start or end:
            out += f"- Drinking window: {_window_text(start, end, '-')}\n"
        if wine.get("price"):
            out += f"- Price: {_price_text(wine['price'])}\n"
        out += "\n"
    return out


def render_collection(wines: List[Dict[str, Any]], year: Optional[int] = None) -> str:
    """
    Render the whole cellar grouped by drinking status.

    Empty groups are left out.
    """
    if not wines:
        return "No wines in your cellar yet."

    year = year or current_year()
    groups: Dict[str, List[Dict[str, Any]]] = {status: [] for status, _ in SECTIONS}
    for wine in wines:
        groups[drinking_status(*drinking_window(wine), year)].append(wine)

    out = "# Wine Collection\n\n"
    out += f"Total wines: {len(wines)}\n\n"
    for status, title in SECTIONS:
        if groups[status]:
            out += f"## {title}\n\n"
            out += format_wine_list(groups[status])
    return out


def render_wine_detail(
    wine: Optional[Dict[str, Any]],
    wine_id: str,
    year: Optional[int] = None,
) -> str:
    """
    Render one wine with its tasting notes.

    Args:
        wine:    The wine, with its notes under `tasting_notes`, or None.
        wine_id: Requested id, used in the not-found message.
        year:    Reference year for the drinking status (default: this year).
    """
    if wine is None:
        return f"Wine with ID {wine_id} not found."

    year = year or current_year()
    out = f"# {wine['name']}\n\n"

    if wine.get("vintage"):
        out += f"**Vintage:** {wine['vintage']}\n"
    if wine.get("grapes"):
        out += f"**Grapes:** {', '.join(wine['grapes'])}\n"

    quantity = wine.get("quantity", 0)
    out += f"**Quantity:** {_plural(quantity, 'bottle')}\n"

    if wine.get("bottle_size") and wine["bottle_size"] != 750:
        out += f"**Bottle Size:** {wine['bottle_size']}ml\n"

    start, end = drinking_window(wine)
    if start or end:
        out += f"**Drinking Window:** {_window_text(start, end, ' - ')}\n"
        status = drinking_status(start, end, year)
        if status == FUTURE:
            out += f"*Status: Age further (ready in {_plural(start - year, 'year')})*\n"
        elif status == PAST:
            out += "*Status: Past peak - drink soon!*\n"
        else:
            out += "*Status: Ready to drink*\n"

    if wine.get("price"):
        out += f"**Price:** {_price_text(wine['price'])}\n"
    out += "\n"

    if wine.get("food_pairings"):
        out += f"## Food Pairings\n\n{wine['food_pairings']}\n\n"

    notes = wine.get("tasting_notes") or []
    if notes:
        out += "## Tasting Notes\n\n"
        for note in notes:
            out += f"### {note.get('tasted_at')} - {'⭐' * int(note['rating'])}\n\n"
            if note.get("notes"):
                out += f"{note['notes']}\n\n"
    return out


def render_added_wine(wine: Dict[str, Any]) -> str:
    """Confirmation text after add_wine."""
    out = f"Successfully added wine: {wine['name']}"
    if wine.get("vintage"):
        out += f" ({wine['vintage']})"

    out += "\n\n**Details:**\n"
    out += f"- ID: {wine['id']}\n"
    out += f"- Quantity: {wine.get('quantity', 0)}\n"

    if wine.get("grapes"):
        out += f"- Grapes: {', '.join(wine['grapes'])}\n"
    start, end = drinking_window(wine)
    if start or end:
        out += f"- Drinking window: {_window_text(start, end, '-')}\n"
    if wine.get("price"):
        out += f"- Price: {_price_text(wine['price'])}\n"
    if wine.get("bottle_size") and wine["bottle_size"] != 750:
        out += f"- Bottle size: {wine['bottle_size']}ml\n"
    return out
