"""
Drinking-window helpers and wine list filtering.

Wines may carry a drinking window (`drink_window_start`, `drink_window_end`,
both years). These helpers classify a wine against the current year and
apply the list filters offered by the wine overview.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

READY = "ready"
FUTURE = "future"
PAST = "past"
NO_WINDOW = "none"

DRINKING_WINDOW_CHOICES = ("all", READY, FUTURE, PAST)


def current_year() -> int:
    return date.today().year


def drinking_status(start: Optional[int], end: Optional[int], year: int) -> str:
    """
    Classify a drinking window against `year`.

    A single bound is enough to decide: a start in the future means the wine
    should age further, an end in the past means it is past its peak.
    Anything else is ready to drink.
    """
    if start is None and end is None:
        return NO_WINDOW
    if start is not None and start > year:
        return FUTURE
    if end is not None and end < year:
        return PAST
    return READY


def is_ready_to_drink(wine: Dict[str, Any], year: int) -> bool:
    """True only when both bounds are set and `year` lies within them."""
    start = wine.get("drink_window_start")
    end = wine.get("drink_window_end")
    return start is not None and end is not None and start <= year <= end


@dataclass
class WineFilters:
    search: str = ""
    grapes: List[str] = field(default_factory=list)
    vintage_min: Optional[int] = None
    vintage_max: Optional[int] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    drinking_window: str = "all"

    def __post_init__(self):
        if self.drinking_window not in DRINKING_WINDOW_CHOICES:
            raise ValueError(
                f"drinking_window must be one of {', '.join(DRINKING_WINDOW_CHOICES)}"
            )


def _matches(wine: Dict[str, Any], filters: WineFilters, year: int) -> bool:
    if filters.search and filters.search.lower() not in (wine.get("name") or "").lower():
        return False

    if filters.grapes:
        grapes = wine.get("grapes") or []
        if not any(g in grapes for g in filters.grapes):
            return False

    # Range filters only apply to wines that have the value at all
    vintage = wine.get("vintage")
    if vintage is not None:
        if filters.vintage_min is not None and vintage < filters.vintage_min:
            return False
        if filters.vintage_max is not None and vintage > filters.vintage_max:
            return False

    price = wine.get("price")
    if price is not None:
        if filters.price_min is not None and price < filters.price_min:
            return False
        if filters.price_max is not None and price > filters.price_max:
            return False

    if filters.drinking_window != "all":
        start = wine.get("drink_window_start")
        end = wine.get("drink_window_end")
        if start is None or end is None:
            return False
        if drinking_status(start, end, year) != filters.drinking_window:
            return False

    return True


def filter_wines(
    wines: Iterable[Dict[str, Any]],
    filters: WineFilters,
    year: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Return the wines matching every active filter, preserving order."""
    year = current_year() if year is None else year
    return [w for w in wines if _matches(w, filters, year)]


def active_filter_count(filters: WineFilters) -> int:
    count = 0
    if filters.search:
        count += 1
    if filters.grapes:
        count += 1
    if filters.vintage_min is not None or filters.vintage_max is not None:
        count += 1
    if filters.price_min is not None or filters.price_max is not None:
        count += 1
    if filters.drinking_window != "all":
        count += 1
    return count
