"""
Cellar grid layout.

Turns a cellar's wine locations into a shelf -> row -> column grid the
client can render directly. Dimensions grow to the largest coordinate in
use (at least 1 each); locations missing a coordinate are reported as
unplaced instead of being dropped.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

RED_GRAPES = ("pinot noir", "cabernet", "merlot")
WHITE_GRAPES = ("chardonnay", "riesling", "sauvignon")


def wine_color(grapes: Optional[Sequence[str]]) -> str:
    """Colour class for a bottle, decided by its first grape."""
    main = (grapes[0] if grapes else "").lower()
    if any(g in main for g in RED_GRAPES):
        return "red"
    if any(g in main for g in WHITE_GRAPES):
        return "white"
    if "rosé" in main:
        return "rose"
    return "other"


def _is_placed(loc: Dict[str, Any]) -> bool:
    return all(loc.get(k) is not None for k in ("shelf", "row", "column"))


def build_cellar_grid(locations: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Lay wine locations out on a grid.

    Args:
        locations: wine_locations rows, each with an embedded `wine` dict.

    Returns:
        dict with `dimensions`, `shelves` (each a list of rows of cells) and
        `unplaced` locations. A cell is either empty or holds the location
        id, wine id/name/vintage, bottle count and colour class.
    """
    # Partially placed locations count towards the size as well
    max_shelf = max([loc.get("shelf") or 0 for loc in locations] + [1])
    max_row = max([loc.get("row") or 0 for loc in locations] + [1])
    max_column = max([loc.get("column") or 0 for loc in locations] + [1])

    cells: Dict[Tuple[int, int, int], Dict[str, Any]] = {}
    unplaced: List[Dict[str, Any]] = []
    for loc in locations:
        if _is_placed(loc):
            # Last location wins when two share a slot
            cells[(loc["shelf"], loc["row"], loc["column"])] = loc
        else:
            unplaced.append(loc)

    shelves = []
    for shelf in range(1, max_shelf + 1):
        rows = []
        for row in range(1, max_row + 1):
            line = []
            for column in range(1, max_column + 1):
                loc = cells.get((shelf, row, column))
                line.append(_cell(shelf, row, column, loc))
            rows.append(line)
        occupied = sum(1 for line in rows for cell in line if cell["occupied"])
        shelves.append({"shelf": shelf, "occupied": occupied, "rows": rows})

    return {
        "dimensions": {"shelves": max_shelf, "rows": max_row, "columns": max_column},
        "shelves": shelves,
        "unplaced": [_summary(loc) for loc in unplaced],
    }


def _summary(loc: Dict[str, Any]) -> Dict[str, Any]:
    wine = loc.get("wine") or {}
    return {
        "location_id": loc.get("id"),
        "wine_id": wine.get("id", loc.get("wine_id")),
        "wine_name": wine.get("name"),
        "vintage": wine.get("vintage"),
        "quantity": loc.get("quantity"),
    }


def _cell(shelf: int, row: int, column: int, loc: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    cell = {"shelf": shelf, "row": row, "column": column, "occupied": loc is not None}
    if loc is None:
        cell["color"] = "empty"
        return cell
    cell.update(_summary(loc))
    cell["color"] = wine_color((loc.get("wine") or {}).get("grapes"))
    return cell
