"""Wine endpoints: CRUD, list filters and photo upload."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from cellar.app.auth import User, current_user
from cellar.domain.drinking import WineFilters, active_filter_count, filter_wines
from cellar.schemas import WineIn, WineUpdate, changes_of
from cellar.services import wines as wine_service

router = APIRouter(prefix="/api/wines", tags=["wines"])


@router.get("")
async def list_wines(
    search: str = "",
    grapes: List[str] = Query(default=[]),
    vintage_min: Optional[int] = None,
    vintage_max: Optional[int] = None,
    price_min: Optional[float] = None,
    price_max: Optional[float] = None,
    drinking_window: str = "all",
    order: str = "created_at",
    user: User = Depends(current_user),
):
    """
    List the user's wines, optionally filtered.

    Returns the filtered wines together with the unfiltered total and the
    number of active filters, so clients can show "N of M wines".
    """
    try:
        filters = WineFilters(
            search=search,
            grapes=grapes,
            vintage_min=vintage_min,
            vintage_max=vintage_max,
            price_min=price_min,
            price_max=price_max,
            drinking_window=drinking_window,
        )
        wines = await wine_service.list_wines(user.id, order=order)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "wines": filter_wines(wines, filters),
        "total": len(wines),
        "active_filters": active_filter_count(filters),
    }


@router.get("/{wine_id}")
async def get_wine(wine_id: UUID, user: User = Depends(current_user)):
    wine = await wine_service.get_wine(user.id, str(wine_id))
    if wine is None:
        raise HTTPException(status_code=404, detail="Wine not found")
    return wine


@router.post("", status_code=201)
async def add_wine(payload: WineIn, user: User = Depends(current_user)):
    try:
        return await wine_service.add_wine(user.id, payload.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/{wine_id}")
async def update_wine(wine_id: UUID, payload: WineUpdate, user: User = Depends(current_user)):
    try:
        wine = await wine_service.update_wine(user.id, str(wine_id), changes_of(payload))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if wine is None:
        raise HTTPException(status_code=404, detail="Wine not found")
    return wine


@router.delete("/{wine_id}", status_code=204)
async def delete_wine(wine_id: UUID, user: User = Depends(current_user)):
    if not await wine_service.delete_wine(user.id, str(wine_id)):
        raise HTTPException(status_code=404, detail="Wine not found")


@router.post("/{wine_id}/photo")
async def upload_photo(
    wine_id: UUID,
    file: UploadFile = File(...),
    user: User = Depends(current_user),
):
    """Upload (or replace) the bottle photo of a wine."""
    content = await file.read()
    try:
        url = await wine_service.upload_wine_photo(user.id, str(wine_id), file.filename or "", content)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if url is None:
        raise HTTPException(status_code=404, detail="Wine not found")
    return {"photo_url": url}
