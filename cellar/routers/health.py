"""Health-check endpoints."""

from fastapi import APIRouter

from cellar.app.db import get_pool

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    """
    Return a simple health-check response.

    Returns:
        dict: A dictionary with "ok" set to True and the service name.
    """
    return {"ok": True, "service": "cellar-api"}


@router.get("/health/db")
async def db_ping():
    """Check that the database answers a trivial query."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        value = await conn.fetchval("SELECT 1;")
    return {"ok": value == 1}
