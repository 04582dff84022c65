"""Cellar statistics shown on the dashboard."""

from collections import Counter
from typing import Any, Dict, List, Sequence

from cellar.domain.drinking import is_ready_to_drink

TOP_GRAPES = 5


def dashboard_stats(
    wines: Sequence[Dict[str, Any]],
    recent_notes: Sequence[Dict[str, Any]],
    year: int,
) -> Dict[str, Any]:
    """
    Compute dashboard figures from the user's wines and latest tasting notes.

    Missing quantities and prices count as zero. `recent_notes` is expected
    newest-first and already limited by the caller.
    """
    total_bottles = sum(w.get("quantity") or 0 for w in wines)
    total_value = sum((w.get("price") or 0) * (w.get("quantity") or 0) for w in wines)
    ready = sum(1 for w in wines if is_ready_to_drink(w, year))

    # Counter.most_common keeps first-seen order for ties
    grape_count: Counter = Counter()
    for wine in wines:
        for grape in wine.get("grapes") or []:
            grape_count[grape] += 1
    top_grapes = [
        {"grape": grape, "count": count}
        for grape, count in grape_count.most_common(TOP_GRAPES)
    ]

    names = {w["id"]: w.get("name") for w in wines}
    recent_tastings: List[Dict[str, Any]] = [
        {
            "id": note["id"],
            "wine_name": names.get(note.get("wine_id")) or "Unknown",
            "rating": note.get("rating"),
            "tasted_at": note.get("tasted_at"),
        }
        for note in recent_notes
    ]

    return {
        "total_bottles": total_bottles,
        "total_value": round(float(total_value), 2),
        "total_wines": len(wines),
        "ready_to_drink": ready,
        "tasting_notes_count": len(recent_notes),
        "top_grapes": top_grapes,
        "recent_tastings": recent_tastings,
    }
