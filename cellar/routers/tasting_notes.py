"""Tasting note endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from cellar.app.auth import User, current_user
from cellar.schemas import TastingNoteIn, TastingNoteUpdate, changes_of
from cellar.services import tasting_notes as note_service

router = APIRouter(prefix="/api/tasting-notes", tags=["tasting-notes"])


@router.get("")
async def list_notes(wine_id: Optional[UUID] = None, user: User = Depends(current_user)):
    return await note_service.list_tasting_notes(user.id, wine_id=str(wine_id) if wine_id else None)


@router.post("", status_code=201)
async def add_note(payload: TastingNoteIn, user: User = Depends(current_user)):
    try:
        note = await note_service.add_tasting_note(
            user.id, str(payload.wine_id), payload.rating, payload.notes, payload.tasted_at
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if note is None:
        raise HTTPException(status_code=404, detail="Wine not found")
    return note


@router.patch("/{note_id}")
async def update_note(note_id: UUID, payload: TastingNoteUpdate, user: User = Depends(current_user)):
    try:
        note = await note_service.update_tasting_note(user.id, str(note_id), changes_of(payload))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if note is None:
        raise HTTPException(status_code=404, detail="Tasting note not found")
    return note


@router.delete("/{note_id}", status_code=204)
async def delete_note(note_id: UUID, user: User = Depends(current_user)):
    if not await note_service.delete_tasting_note(user.id, str(note_id)):
        raise HTTPException(status_code=404, detail="Tasting note not found")
