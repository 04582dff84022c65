"""
Wine management.

Provides the data-access operations for a user's wines:
  - list_wines / get_wine: read wines, newest first or by name.
  - add_wine / update_wine / delete_wine: mutations.
  - upload_wine_photo: store a bottle photo and link it to the wine.

Every query is scoped to the calling user's id.
"""

import glob
import logging
import os
from typing import Any, Dict, List, Optional

from cellar.app import config
from cellar.app.db import get_pool, record_to_dict

logger = logging.getLogger(__name__)

# Columns a caller may set; anything else in the payload is ignored.
WINE_FIELDS = (
    "name",
    "winery_id",
    "grapes",
    "vintage",
    "quantity",
    "price",
    "bottle_size",
    "drink_window_start",
    "drink_window_end",
    "food_pairings",
    "photo_url",
)

_ORDERINGS = {
    "created_at": "created_at DESC",
    "name": "name ASC",
}

PHOTO_EXTENSIONS = {"jpg", "jpeg", "png", "webp", "heic", "gif"}


def validate_wine(data: Dict[str, Any], partial: bool = False) -> None:
    """
    Check wine fields for consistency.

    Raises:
        ValueError: when the name is missing (full payloads only), the
            quantity is negative, the vintage is out of range, or the
            drinking window ends before it starts.
    """
    if not partial or "name" in data:
        if not (data.get("name") or "").strip():
            raise ValueError("name is required")

    quantity = data.get("quantity")
    if quantity is not None and quantity < 0:
        raise ValueError("quantity must be >= 0")

    vintage = data.get("vintage")
    if vintage is not None and not 1800 <= vintage <= 2100:
        raise ValueError("vintage must be between 1800 and 2100")

    price = data.get("price")
    if price is not None and price < 0:
        raise ValueError("price must be >= 0")

    start = data.get("drink_window_start")
    end = data.get("drink_window_end")
    if start is not None and end is not None and start > end:
        raise ValueError("drink_window_start must not be after drink_window_end")


async def _check_winery(conn, user_id: str, winery_id: Optional[str]) -> None:
    """Refuse a winery_id that is not one of the user's wineries."""
    if winery_id is None:
        return
    owned = await conn.fetchval(
        "SELECT 1 FROM wineries WHERE id = $1::uuid AND user_id = $2::uuid;",
        winery_id,
        user_id,
    )
    if not owned:
        raise ValueError("winery not found")


async def list_wines(user_id: str, order: str = "created_at") -> List[Dict[str, Any]]:
    """
    Return all wines of the user.

    Args:
        user_id: Owner of the wines.
        order: "created_at" (newest first) or "name" (alphabetical).
    """
    if order not in _ORDERINGS:
        raise ValueError(f"order must be one of {', '.join(_ORDERINGS)}")

    pool = await get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            f"SELECT * FROM wines WHERE user_id = $1::uuid ORDER BY {_ORDERINGS[order]};",
            user_id,
        )
    return [record_to_dict(r) for r in rows]


async def get_wine(user_id: str, wine_id: str) -> Optional[Dict[str, Any]]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            "SELECT * FROM wines WHERE id = $1::uuid AND user_id = $2::uuid;",
            wine_id,
            user_id,
        )
    return record_to_dict(row)


async def add_wine(user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Insert a new wine.

    Defaults follow the cellar conventions: one bottle of 750 ml, no grapes.

    Returns:
        dict: The stored wine row.
    """
    values = {k: data[k] for k in WINE_FIELDS if data.get(k) is not None}
    values.setdefault("quantity", 1)
    values.setdefault("bottle_size", 750)
    values.setdefault("grapes", [])
    validate_wine(values)
    values["name"] = values["name"].strip()

    columns = ["user_id"] + list(values)
    placeholders = ["$1::uuid"] + [f"${i}" for i in range(2, len(columns) + 1)]

    pool = await get_pool()
    async with pool.acquire() as conn:
        await _check_winery(conn, user_id, values.get("winery_id"))
        row = await conn.fetchrow(
            f"""
            INSERT INTO wines ({", ".join(columns)})
            VALUES ({", ".join(placeholders)})
            RETURNING *;
            """,
            user_id,
            *values.values(),
        )

    logger.info(
        f"Added wine {row['id']} (winery={values.get('winery_id') is not None}, "
        f"grapes={len(values['grapes'])})"
    )
    return record_to_dict(row)


async def update_wine(
    user_id: str, wine_id: str, changes: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    """
    Apply a partial update to a wine.

    Only keys present in `changes` are written, so a key mapped to None
    clears that column. Returns None if the wine does not exist.
    """
    values = {k: changes[k] for k in WINE_FIELDS if k in changes}
    if values.get("grapes", []) is None:
        values["grapes"] = []
    validate_wine(values, partial=True)

    if not values:
        return await get_wine(user_id, wine_id)

    pool = await get_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            await _check_winery(conn, user_id, values.get("winery_id"))

            # The window is validated against the stored bound when only one side changes
            if ("drink_window_start" in values) != ("drink_window_end" in values):
                current = await conn.fetchrow(
                    """
                    SELECT drink_window_start, drink_window_end
                    FROM wines WHERE id = $1::uuid AND user_id = $2::uuid;
                    """,
                    wine_id,
                    user_id,
                )
                if current:
                    merged = dict(current)
                    merged.update(values)
                    validate_wine(merged, partial=True)

            assignments = [f"{col} = ${i}" for i, col in enumerate(values, start=3)]
            row = await conn.fetchrow(
                f"""
                UPDATE wines
                SET {", ".join(assignments)}, updated_at = now()
                WHERE id = $1::uuid AND user_id = $2::uuid
                RETURNING *;
                """,
                wine_id,
                user_id,
                *values.values(),
            )

    if row:
        logger.info(f"Updated wine {wine_id}: {', '.join(values)}")
    return record_to_dict(row)


async def delete_wine(user_id: str, wine_id: str) -> bool:
    pool = await get_pool()
    async with pool.acquire() as conn:
        result = await conn.execute(
            "DELETE FROM wines WHERE id = $1::uuid AND user_id = $2::uuid;",
            wine_id,
            user_id,
        )
    deleted = result.endswith(" 1")
    if deleted:
        logger.info(f"Deleted wine {wine_id}")
    return deleted


def photo_path(user_id: str, wine_id: str, filename: str) -> str:
    """
    Relative storage path for a wine photo: `<user_id>/<wine_id>.<ext>`.

    Raises:
        ValueError: If the file extension is not an image type.
    """
    ext = os.path.splitext(filename or "")[1].lstrip(".").lower()
    if ext not in PHOTO_EXTENSIONS:
        raise ValueError(f"unsupported photo type: {ext or 'none'}")
    return f"{user_id}/{wine_id}.{ext}"


async def upload_wine_photo(
    user_id: str, wine_id: str, filename: str, content: bytes
) -> Optional[str]:
    """
    Store a wine photo and set the wine's `photo_url`.

    Any earlier photo of the wine is replaced, whatever its extension.

    Returns:
        The public URL of the photo, or None if the wine does not exist.
    """
    if await get_wine(user_id, wine_id) is None:
        return None

    relative = photo_path(user_id, wine_id, filename)
    target = os.path.join(config.PHOTO_DIR, relative)
    os.makedirs(os.path.dirname(target), exist_ok=True)
    for stale in glob.glob(os.path.join(glob.escape(os.path.dirname(target)), f"{wine_id}.*")):
        if stale != target:
            os.remove(stale)
    with open(target, "wb") as fh:
        fh.write(content)

    url = f"{config.PUBLIC_BASE_URL}/photos/{relative}"
    await update_wine(user_id, wine_id, {"photo_url": url})
    logger.info(f"Uploaded photo for wine {wine_id} ({len(content)} bytes)")
    return url
