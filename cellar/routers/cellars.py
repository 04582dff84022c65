"""Cellar, wine location and cellar grid endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from cellar.app.auth import User, current_user
from cellar.domain.cellar_grid import build_cellar_grid
from cellar.schemas import CellarIn, WineLocationIn, WineLocationUpdate, changes_of
from cellar.services import cellars as cellar_service

router = APIRouter(prefix="/api", tags=["cellars"])


@router.get("/cellars")
async def list_cellars(user: User = Depends(current_user)):
    return await cellar_service.list_cellars(user.id)


@router.post("/cellars", status_code=201)
async def add_cellar(payload: CellarIn, user: User = Depends(current_user)):
    try:
        return await cellar_service.add_cellar(user.id, payload.name, payload.description)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/cellars/{cellar_id}/grid")
async def cellar_grid(cellar_id: UUID, user: User = Depends(current_user)):
    """The cellar's bottles laid out shelf by shelf, row by row."""
    cellar = await cellar_service.get_cellar(user.id, str(cellar_id))
    if cellar is None:
        raise HTTPException(status_code=404, detail="Cellar not found")
    locations = await cellar_service.list_wine_locations(user.id, cellar_id=str(cellar_id))
    return {"cellar": cellar, **build_cellar_grid(locations)}


@router.get("/wine-locations")
async def list_locations(
    wine_id: Optional[UUID] = None,
    cellar_id: Optional[UUID] = None,
    user: User = Depends(current_user),
):
    return await cellar_service.list_wine_locations(
        user.id,
        wine_id=str(wine_id) if wine_id else None,
        cellar_id=str(cellar_id) if cellar_id else None,
    )


@router.post("/wine-locations", status_code=201)
async def add_location(payload: WineLocationIn, user: User = Depends(current_user)):
    try:
        location = await cellar_service.add_wine_location(
            user.id, str(payload.wine_id), str(payload.cellar_id), payload.model_dump()
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if location is None:
        raise HTTPException(status_code=404, detail="Wine or cellar not found")
    return location


@router.patch("/wine-locations/{location_id}")
async def update_location(
    location_id: UUID, payload: WineLocationUpdate, user: User = Depends(current_user)
):
    try:
        location = await cellar_service.update_wine_location(user.id, str(location_id), changes_of(payload))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if location is None:
        raise HTTPException(status_code=404, detail="Wine location not found")
    return location


@router.delete("/wine-locations/{location_id}")
async def delete_location(location_id: UUID, user: User = Depends(current_user)):
    wine_id = await cellar_service.delete_wine_location(user.id, str(location_id))
    if wine_id is None:
        raise HTTPException(status_code=404, detail="Wine location not found")
    return {"ok": True, "wine_id": wine_id}
