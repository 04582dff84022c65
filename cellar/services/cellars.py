"""
Cellars and wine locations.

A cellar is a named storage place; a wine location says how many bottles
of a wine sit at which shelf/row/column of which cellar.
"""

import logging
from typing import Any, Dict, List, Optional

from cellar.app.db import get_pool, record_to_dict

logger = logging.getLogger(__name__)

LOCATION_FIELDS = ("shelf", "row", "column", "quantity")

# Location rows joined with their cellar name and wine summary
_LOCATION_SELECT = """
    SELECT l.*,
           c.name AS cellar_name,
           w.name AS wine_name,
           w.vintage AS wine_vintage,
           w.grapes AS wine_grapes,
           w.quantity AS wine_quantity,
           wy.name AS winery_name
    FROM wine_locations l
    JOIN cellars c ON c.id = l.cellar_id
    JOIN wines w ON w.id = l.wine_id
    LEFT JOIN wineries wy ON wy.id = w.winery_id
"""


def _nest_location(row: Dict[str, Any]) -> Dict[str, Any]:
    loc = {k: v for k, v in row.items() if not k.startswith(("wine_", "cellar_name", "winery_name"))}
    loc["wine_id"] = row["wine_id"]
    loc["cellar_id"] = row["cellar_id"]
    loc["cellar"] = {"name": row.get("cellar_name")}
    loc["wine"] = {
        "id": row["wine_id"],
        "name": row.get("wine_name"),
        "vintage": row.get("wine_vintage"),
        "grapes": row.get("wine_grapes") or [],
        "quantity": row.get("wine_quantity"),
        "winery": {"name": row["winery_name"]} if row.get("winery_name") else None,
    }
    return loc


def _validate_location(values: Dict[str, Any]) -> None:
    for key in ("shelf", "row", "column"):
        value = values.get(key)
        if value is not None and value < 1:
            raise ValueError(f"{key} must be >= 1")
    if "quantity" in values and (values["quantity"] is None or values["quantity"] < 1):
        raise ValueError("quantity must be >= 1")


async def list_cellars(user_id: str) -> List[Dict[str, Any]]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            "SELECT * FROM cellars WHERE user_id = $1::uuid ORDER BY name ASC;",
            user_id,
        )
    return [record_to_dict(r) for r in rows]


async def get_cellar(user_id: str, cellar_id: str) -> Optional[Dict[str, Any]]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            "SELECT * FROM cellars WHERE id = $1::uuid AND user_id = $2::uuid;",
            cellar_id,
            user_id,
        )
    return record_to_dict(row)


async def add_cellar(user_id: str, name: str, description: Optional[str] = None) -> Dict[str, Any]:
    if not (name or "").strip():
        raise ValueError("name is required")

    pool = await get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            """
            INSERT INTO cellars (user_id, name, description)
            VALUES ($1::uuid, $2, $3)
            RETURNING *;
            """,
            user_id,
            name.strip(),
            description,
        )
    logger.info(f"Added cellar {row['id']}")
    return record_to_dict(row)


async def list_wine_locations(
    user_id: str, wine_id: Optional[str] = None, cellar_id: Optional[str] = None
) -> List[Dict[str, Any]]:
    sql = _LOCATION_SELECT + " WHERE l.user_id = $1::uuid"
    args: List[Any] = [user_id]
    if wine_id:
        args.append(wine_id)
        sql += f" AND l.wine_id = ${len(args)}::uuid"
    if cellar_id:
        args.append(cellar_id)
        sql += f" AND l.cellar_id = ${len(args)}::uuid"

    pool = await get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(sql + " ORDER BY l.created_at ASC;", *args)
    return [_nest_location(record_to_dict(r)) for r in rows]


async def add_wine_location(
    user_id: str, wine_id: str, cellar_id: str, data: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    """
    Place bottles of a wine in a cellar.

    Returns None if either the wine or the cellar is not the user's.
    """
    values = {k: data.get(k) for k in LOCATION_FIELDS}
    if values["quantity"] is None:
        values["quantity"] = 1
    _validate_location(values)

    pool = await get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            """
            INSERT INTO wine_locations (user_id, wine_id, cellar_id, shelf, "row", "column", quantity)
            SELECT $1::uuid, w.id, c.id, $4, $5, $6, $7
            FROM wines w, cellars c
            WHERE w.id = $2::uuid AND w.user_id = $1::uuid
              AND c.id = $3::uuid AND c.user_id = $1::uuid
            RETURNING *;
            """,
            user_id,
            wine_id,
            cellar_id,
            values["shelf"],
            values["row"],
            values["column"],
            values["quantity"],
        )
    return record_to_dict(row)


async def update_wine_location(
    user_id: str, location_id: str, changes: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    values = {k: changes[k] for k in LOCATION_FIELDS if k in changes}
    if "cellar_id" in changes:
        values["cellar_id"] = changes["cellar_id"]
    _validate_location(values)

    pool = await get_pool()
    async with pool.acquire() as conn:
        if not values:
            row = await conn.fetchrow(
                "SELECT * FROM wine_locations WHERE id = $1::uuid AND user_id = $2::uuid;",
                location_id,
                user_id,
            )
            return record_to_dict(row)

        if "cellar_id" in values:
            owned = await conn.fetchval(
                "SELECT 1 FROM cellars WHERE id = $1::uuid AND user_id = $2::uuid;",
                values["cellar_id"],
                user_id,
            )
            if not owned:
                return None

        assignments = []
        for i, col in enumerate(values, start=3):
            cast = "::uuid" if col == "cellar_id" else ""
            assignments.append(f'"{col}" = ${i}{cast}')
        row = await conn.fetchrow(
            f"""
            UPDATE wine_locations
            SET {", ".join(assignments)}
            WHERE id = $1::uuid AND user_id = $2::uuid
            RETURNING *;
            """,
            location_id,
            user_id,
            *values.values(),
        )
    return record_to_dict(row)


async def delete_wine_location(user_id: str, location_id: str) -> Optional[str]:
    """Remove a location; returns its wine id, or None if it did not exist."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        wine_id = await conn.fetchval(
            """
            DELETE FROM wine_locations
            WHERE id = $1::uuid AND user_id = $2::uuid
            RETURNING wine_id;
            """,
            location_id,
            user_id,
        )
    return str(wine_id) if wine_id else None
