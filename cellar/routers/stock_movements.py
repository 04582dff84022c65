"""Stock movement endpoints. Each movement also moves the wine's quantity."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from cellar.app.auth import User, current_user
from cellar.errors import InsufficientStock
from cellar.schemas import StockMovementIn, StockMovementUpdate, changes_of
from cellar.services import stock as stock_service

router = APIRouter(prefix="/api/stock-movements", tags=["stock"])


@router.get("")
async def list_movements(wine_id: Optional[UUID] = None, user: User = Depends(current_user)):
    return await stock_service.list_stock_movements(user.id, wine_id=str(wine_id) if wine_id else None)


@router.post("", status_code=201)
async def add_movement(payload: StockMovementIn, user: User = Depends(current_user)):
    try:
        movement = await stock_service.add_stock_movement(
            user.id,
            str(payload.wine_id),
            payload.movement_type,
            payload.quantity,
            payload.notes,
            payload.movement_date,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InsufficientStock as e:
        raise HTTPException(status_code=409, detail=str(e))
    if movement is None:
        raise HTTPException(status_code=404, detail="Wine not found")
    return movement


@router.patch("/{movement_id}")
async def update_movement(
    movement_id: UUID, payload: StockMovementUpdate, user: User = Depends(current_user)
):
    try:
        movement = await stock_service.update_stock_movement(user.id, str(movement_id), changes_of(payload))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InsufficientStock as e:
        raise HTTPException(status_code=409, detail=str(e))
    if movement is None:
        raise HTTPException(status_code=404, detail="Stock movement not found")
    return movement


@router.delete("/{movement_id}")
async def delete_movement(movement_id: UUID, user: User = Depends(current_user)):
    try:
        wine_id = await stock_service.delete_stock_movement(user.id, str(movement_id))
    except InsufficientStock as e:
        raise HTTPException(status_code=409, detail=str(e))
    if wine_id is None:
        raise HTTPException(status_code=404, detail="Stock movement not found")
    return {"ok": True, "wine_id": wine_id}
