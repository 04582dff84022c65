"""
Stock movement tools.

Provides operations for recording bottles entering and leaving the cellar:
  - list_stock_movements: movement history, newest first.
  - add_stock_movement: record an 'in' or 'out' movement and adjust the
    wine's quantity accordingly.
  - update_stock_movement / delete_stock_movement: revise or undo a
    movement, re-balancing the wine's quantity.

Every change to a wine's quantity happens in the same transaction as the
movement row, with the wine row locked FOR UPDATE, and is refused if the
quantity would go below zero.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import asyncpg

from cellar.app.db import get_pool, record_to_dict
from cellar.errors import InsufficientStock

logger = logging.getLogger(__name__)

MOVEMENT_TYPES = ("in", "out")


def movement_delta(movement_type: str, quantity: int) -> int:
    """
    Signed effect of a movement on the wine's quantity.

    Raises:
        ValueError: If the type is unknown or the quantity is not positive.
    """
    if movement_type not in MOVEMENT_TYPES:
        raise ValueError("movement_type must be 'in' or 'out'")
    if not isinstance(quantity, int) or quantity <= 0:
        raise ValueError("quantity must be > 0")
    return quantity if movement_type == "in" else -quantity


def _as_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


async def _adjust_quantity(
    conn: asyncpg.Connection, user_id: str, wine_id: str, delta: int
) -> Optional[Dict[str, int]]:
    """
    Add `delta` to a wine's quantity inside the caller's transaction.

    Returns:
        dict with quantity_before/quantity_after, or None if the wine is
        not the user's.

    Raises:
        InsufficientStock: If the quantity would become negative.
    """
    # Lock the wine row to prevent concurrent modifications
    row = await conn.fetchrow(
        """
        SELECT quantity
        FROM wines
        WHERE id = $1::uuid AND user_id = $2::uuid
        FOR UPDATE;
        """,
        wine_id,
        user_id,
    )
    if row is None:
        return None

    current_qty = row["quantity"] or 0
    new_qty = current_qty + delta
    if new_qty < 0:
        raise InsufficientStock(current_qty, delta)

    if delta:
        await conn.execute(
            "UPDATE wines SET quantity = $2, updated_at = now() WHERE id = $1::uuid;",
            wine_id,
            new_qty,
        )
    return {"quantity_before": current_qty, "quantity_after": new_qty}


async def list_stock_movements(
    user_id: str, wine_id: Optional[str] = None
) -> List[Dict[str, Any]]:
    sql = "SELECT * FROM stock_movements WHERE user_id = $1::uuid"
    args: List[Any] = [user_id]
    if wine_id:
        args.append(wine_id)
        sql += " AND wine_id = $2::uuid"

    pool = await get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(sql + " ORDER BY movement_date DESC;", *args)
    return [record_to_dict(r) for r in rows]


async def add_stock_movement(
    user_id: str,
    wine_id: str,
    movement_type: str,
    quantity: int,
    notes: Optional[str] = None,
    movement_date: Any = None,
) -> Optional[Dict[str, Any]]:
    """
    Record a stock movement and apply it to the wine's quantity.

    Args:
        user_id: Owner of the wine.
        wine_id: The wine that moved.
        movement_type: 'in' (bottles added) or 'out' (bottles removed).
        quantity: Number of bottles, must be > 0.
        notes: Optional free text (e.g. "drank at dinner").
        movement_date: When it happened; defaults to now.

    Returns:
        dict: The movement row plus quantity_before/quantity_after, or
              None if the wine does not exist.

    Raises:
        InsufficientStock: If an 'out' movement exceeds the bottles on hand.
    """
    delta = movement_delta(movement_type, quantity)

    pool = await get_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            balance = await _adjust_quantity(conn, user_id, wine_id, delta)
            if balance is None:
                return None

            row = await conn.fetchrow(
                """
                INSERT INTO stock_movements
                    (wine_id, user_id, movement_type, quantity, notes, movement_date)
                VALUES ($1::uuid, $2::uuid, $3, $4, $5, coalesce($6, now()))
                RETURNING *;
                """,
                wine_id,
                user_id,
                movement_type,
                quantity,
                notes,
                _as_datetime(movement_date),
            )

    logger.info(f"Stock movement {movement_type} x{quantity} for wine {wine_id}")
    return {**record_to_dict(row), **balance}


async def update_stock_movement(
    user_id: str, movement_id: str, changes: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    """
    Revise a movement. The old effect on the wine is reverted and the new
    one applied as a single net change.
    """
    pool = await get_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            old = await conn.fetchrow(
                """
                SELECT * FROM stock_movements
                WHERE id = $1::uuid AND user_id = $2::uuid
                FOR UPDATE;
                """,
                movement_id,
                user_id,
            )
            if old is None:
                return None

            # An explicit value (even 0) replaces the stored one and is validated below
            movement_type = (
                changes["movement_type"]
                if changes.get("movement_type") is not None
                else old["movement_type"]
            )
            quantity = changes["quantity"] if changes.get("quantity") is not None else old["quantity"]
            net = movement_delta(movement_type, quantity) - movement_delta(
                old["movement_type"], old["quantity"]
            )
            balance = await _adjust_quantity(conn, user_id, str(old["wine_id"]), net)

            row = await conn.fetchrow(
                """
                UPDATE stock_movements
                SET movement_type = $2,
                    quantity = $3,
                    notes = $4,
                    movement_date = coalesce($5, movement_date)
                WHERE id = $1::uuid
                RETURNING *;
                """,
                movement_id,
                movement_type,
                quantity,
                changes["notes"] if "notes" in changes else old["notes"],
                _as_datetime(changes.get("movement_date")),
            )

    logger.info(f"Updated stock movement {movement_id} (net change {net})")
    return {**record_to_dict(row), **(balance or {})}


async def delete_stock_movement(user_id: str, movement_id: str) -> Optional[str]:
    """
    Delete a movement and undo its effect on the wine's quantity.

    Returns:
        The wine id the movement belonged to, or None if it did not exist.
    """
    pool = await get_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            old = await conn.fetchrow(
                """
                DELETE FROM stock_movements
                WHERE id = $1::uuid AND user_id = $2::uuid
                RETURNING wine_id, movement_type, quantity;
                """,
                movement_id,
                user_id,
            )
            if old is None:
                return None

            wine_id = str(old["wine_id"])
            await _adjust_quantity(
                conn, user_id, wine_id, -movement_delta(old["movement_type"], old["quantity"])
            )

    logger.info(f"Deleted stock movement {movement_id}")
    return wine_id
