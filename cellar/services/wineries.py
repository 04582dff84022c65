"""
Winery management.

Wineries group wines by producer. A winery cannot be deleted while any of
the user's wines still reference it.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from cellar.app.db import get_pool, record_to_dict
from cellar.errors import WineryInUse

logger = logging.getLogger(__name__)

_COUNTRY_CODE = re.compile(r"^[A-Z]{2}$")


def normalize_country_code(code: Optional[str]) -> Optional[str]:
    """Upper-case an ISO 3166-1 alpha-2 code; empty values become None."""
    if code is None or not code.strip():
        return None
    code = code.strip().upper()
    if not _COUNTRY_CODE.match(code):
        raise ValueError("country_code must be a two-letter ISO 3166-1 code")
    return code


async def list_wineries(user_id: str) -> List[Dict[str, Any]]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            "SELECT * FROM wineries WHERE user_id = $1::uuid ORDER BY name ASC;",
            user_id,
        )
    return [record_to_dict(r) for r in rows]


async def get_winery(user_id: str, winery_id: str) -> Optional[Dict[str, Any]]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            "SELECT * FROM wineries WHERE id = $1::uuid AND user_id = $2::uuid;",
            winery_id,
            user_id,
        )
    return record_to_dict(row)


async def add_winery(
    user_id: str, name: str, country_code: Optional[str] = None
) -> Dict[str, Any]:
    if not (name or "").strip():
        raise ValueError("name is required")

    pool = await get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            """
            INSERT INTO wineries (user_id, name, country_code)
            VALUES ($1::uuid, $2, $3)
            RETURNING *;
            """,
            user_id,
            name.strip(),
            normalize_country_code(country_code),
        )
    logger.info(f"Added winery {row['id']}")
    return record_to_dict(row)


async def update_winery(
    user_id: str, winery_id: str, changes: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    values: Dict[str, Any] = {}
    if "name" in changes:
        if not (changes["name"] or "").strip():
            raise ValueError("name is required")
        values["name"] = changes["name"].strip()
    if "country_code" in changes:
        values["country_code"] = normalize_country_code(changes["country_code"])

    if not values:
        return await get_winery(user_id, winery_id)

    assignments = [f"{col} = ${i}" for i, col in enumerate(values, start=3)]
    pool = await get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            f"""
            UPDATE wineries
            SET {", ".join(assignments)}, updated_at = now()
            WHERE id = $1::uuid AND user_id = $2::uuid
            RETURNING *;
            """,
            winery_id,
            user_id,
            *values.values(),
        )
    return record_to_dict(row)


async def count_wines(user_id: str, winery_id: str) -> int:
    pool = await get_pool()
    async with pool.acquire() as conn:
        count = await conn.fetchval(
            "SELECT count(*) FROM wines WHERE winery_id = $1::uuid AND user_id = $2::uuid;",
            winery_id,
            user_id,
        )
    return int(count or 0)


async def delete_winery(user_id: str, winery_id: str) -> bool:
    """
    Delete a winery that no wine references any more.

    Raises:
        WineryInUse: If wines still point at the winery.
    """
    pool = await get_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            count = await conn.fetchval(
                "SELECT count(*) FROM wines WHERE winery_id = $1::uuid AND user_id = $2::uuid;",
                winery_id,
                user_id,
            )
            if count:
                raise WineryInUse(int(count))

            result = await conn.execute(
                "DELETE FROM wineries WHERE id = $1::uuid AND user_id = $2::uuid;",
                winery_id,
                user_id,
            )
    return result.endswith(" 1")
