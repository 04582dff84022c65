"""
Database access for the cellar backend.

One asyncpg pool is shared by every service module: `get_pool()` opens it
on first use, `close_pool()` releases it on shutdown and `init_schema()`
creates the tables on a fresh database. Rows leave this layer as plain
dicts via `record_to_dict()`.
"""

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

import asyncpg

from cellar.app.config import (
    DB_HOST,
    DB_NAME,
    DB_PASSWORD,
    DB_POOL_MAX,
    DB_POOL_MIN,
    DB_PORT,
    DB_USER,
)
from cellar.app.schema import SCHEMA_SQL

logger = logging.getLogger(__name__)

# Shared pool, created by the first get_pool() call.
_pool: Optional[asyncpg.Pool] = None


async def _init_connection(conn: asyncpg.Connection) -> None:
    # user_settings.value is jsonb; decode it to Python values
    await conn.set_type_codec(
        "jsonb",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog",
    )


async def get_pool() -> asyncpg.Pool:
    """
    Return the shared pool, opening it on the first call.

    Returns:
        asyncpg.Pool: The active connection pool.
    """
    global _pool

    if _pool is None:
        logger.info(f"Opening database pool to {DB_HOST}:{DB_PORT}/{DB_NAME}")
        _pool = await asyncpg.create_pool(
            host=DB_HOST,
            port=DB_PORT,
            database=DB_NAME,
            user=DB_USER,
            password=DB_PASSWORD,
            min_size=DB_POOL_MIN,
            max_size=DB_POOL_MAX,
            init=_init_connection,
        )

    return _pool


async def close_pool() -> None:
    """
    Close the shared connection pool and release all database connections.
    Safe to call even if the pool was never created.
    """
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


async def init_schema() -> None:
    """Create all tables and indexes if they do not exist yet."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        await conn.execute(SCHEMA_SQL)
    logger.info("Database schema is up to date")


def _plain(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def record_to_dict(row: Optional[asyncpg.Record]) -> Optional[Dict[str, Any]]:
    """
    Convert an asyncpg record into a JSON-friendly dict.

    UUIDs become strings, numerics become floats and timestamps become
    ISO-8601 strings, so rows can be returned from routers and MCP tools
    without further conversion.
    """
    if row is None:
        return None
    return {key: _plain(value) for key, value in dict(row).items()}
