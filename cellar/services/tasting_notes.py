"""Tasting notes: dated 1-5 star ratings with optional free text."""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from cellar.app.db import get_pool, record_to_dict

logger = logging.getLogger(__name__)


def _check_rating(rating: Any) -> int:
    if not isinstance(rating, int) or isinstance(rating, bool) or not 1 <= rating <= 5:
        raise ValueError("rating must be an integer between 1 and 5")
    return rating


def _as_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


async def list_tasting_notes(
    user_id: str, wine_id: Optional[str] = None, limit: Optional[int] = None
) -> List[Dict[str, Any]]:
    """Notes of the user (optionally for one wine), most recent tasting first."""
    sql = "SELECT * FROM tasting_notes WHERE user_id = $1::uuid"
    args: List[Any] = [user_id]
    if wine_id:
        args.append(wine_id)
        sql += f" AND wine_id = ${len(args)}::uuid"
    sql += " ORDER BY tasted_at DESC, created_at DESC"
    if limit:
        args.append(int(limit))
        sql += f" LIMIT ${len(args)}"

    pool = await get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(sql + ";", *args)
    return [record_to_dict(r) for r in rows]


async def add_tasting_note(
    user_id: str,
    wine_id: str,
    rating: int,
    notes: Optional[str] = None,
    tasted_at: Any = None,
) -> Optional[Dict[str, Any]]:
    """
    Record a tasting of one of the user's wines.

    Returns None when the wine does not belong to the user.
    """
    _check_rating(rating)
    tasted = _as_date(tasted_at) if tasted_at else date.today()

    pool = await get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            """
            INSERT INTO tasting_notes (wine_id, user_id, rating, notes, tasted_at)
            SELECT w.id, w.user_id, $3, $4, $5
            FROM wines w
            WHERE w.id = $1::uuid AND w.user_id = $2::uuid
            RETURNING *;
            """,
            wine_id,
            user_id,
            rating,
            notes,
            tasted,
        )
    if row:
        logger.info(f"Added tasting note for wine {wine_id} (rating={rating})")
    return record_to_dict(row)


async def update_tasting_note(
    user_id: str, note_id: str, changes: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    values: Dict[str, Any] = {}
    if "rating" in changes:
        values["rating"] = _check_rating(changes["rating"])
    if "notes" in changes:
        values["notes"] = changes["notes"]
    if changes.get("tasted_at"):
        values["tasted_at"] = _as_date(changes["tasted_at"])

    pool = await get_pool()
    async with pool.acquire() as conn:
        if not values:
            row = await conn.fetchrow(
                "SELECT * FROM tasting_notes WHERE id = $1::uuid AND user_id = $2::uuid;",
                note_id,
                user_id,
            )
        else:
            assignments = [f"{col} = ${i}" for i, col in enumerate(values, start=3)]
            row = await conn.fetchrow(
                f"""
                UPDATE tasting_notes
                SET {", ".join(assignments)}
                WHERE id = $1::uuid AND user_id = $2::uuid
                RETURNING *;
                """,
                note_id,
                user_id,
                *values.values(),
            )
    return record_to_dict(row)


async def delete_tasting_note(user_id: str, note_id: str) -> bool:
    pool = await get_pool()
    async with pool.acquire() as conn:
        result = await conn.execute(
            "DELETE FROM tasting_notes WHERE id = $1::uuid AND user_id = $2::uuid;",
            note_id,
            user_id,
        )
    return result.endswith(" 1")
