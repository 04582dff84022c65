"""Winery endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from cellar.app.auth import User, current_user
from cellar.errors import WineryInUse
from cellar.schemas import WineryIn, WineryUpdate, changes_of
from cellar.services import wineries as winery_service

router = APIRouter(prefix="/api/wineries", tags=["wineries"])


@router.get("")
async def list_wineries(user: User = Depends(current_user)):
    return await winery_service.list_wineries(user.id)


@router.get("/{winery_id}")
async def get_winery(winery_id: UUID, user: User = Depends(current_user)):
    winery = await winery_service.get_winery(user.id, str(winery_id))
    if winery is None:
        raise HTTPException(status_code=404, detail="Winery not found")
    winery["wine_count"] = await winery_service.count_wines(user.id, str(winery_id))
    return winery


@router.post("", status_code=201)
async def add_winery(payload: WineryIn, user: User = Depends(current_user)):
    try:
        return await winery_service.add_winery(user.id, payload.name, payload.country_code)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/{winery_id}")
async def update_winery(winery_id: UUID, payload: WineryUpdate, user: User = Depends(current_user)):
    try:
        winery = await winery_service.update_winery(user.id, str(winery_id), changes_of(payload))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if winery is None:
        raise HTTPException(status_code=404, detail="Winery not found")
    return winery


@router.delete("/{winery_id}", status_code=204)
async def delete_winery(winery_id: UUID, user: User = Depends(current_user)):
    try:
        deleted = await winery_service.delete_winery(user.id, str(winery_id))
    except WineryInUse as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Winery not found")
