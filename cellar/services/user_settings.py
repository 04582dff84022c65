"""Per-user key/value settings (language, currency, display preferences)."""

import logging
from typing import Any, Dict, List

from cellar.app.db import get_pool, record_to_dict

logger = logging.getLogger(__name__)


async def list_settings(user_id: str) -> List[Dict[str, Any]]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            "SELECT key, value, updated_at FROM user_settings WHERE user_id = $1::uuid ORDER BY key;",
            user_id,
        )
    return [record_to_dict(r) for r in rows]


async def get_setting(user_id: str, key: str) -> Any:
    """Value stored under `key`, or None when the user never set it."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        return await conn.fetchval(
            "SELECT value FROM user_settings WHERE user_id = $1::uuid AND key = $2;",
            user_id,
            key,
        )


async def set_setting(user_id: str, key: str, value: Any) -> Dict[str, Any]:
    """Create or replace the value of a setting."""
    if not (key or "").strip():
        raise ValueError("key is required")

    pool = await get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            """
            INSERT INTO user_settings (user_id, key, value, updated_at)
            VALUES ($1::uuid, $2, $3, now())
            ON CONFLICT (user_id, key) DO UPDATE SET
              value = EXCLUDED.value,
              updated_at = now()
            RETURNING key, value, updated_at;
            """,
            user_id,
            key.strip(),
            value,
        )
    logger.info(f"Updated user setting {key}")
    return record_to_dict(row)
