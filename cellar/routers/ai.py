"""
AI endpoints for signed-in users: food pairing against their own cellar,
enrichment of stored wines and label-photo identification.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from cellar.ai.llm import get_llm
from cellar.app.auth import User, current_user
from cellar.errors import NothingToEnrich
from cellar.schemas import BulkEnrichIn, ImageIdentifyIn, PairingIn
from cellar.services import enrichment as enrichment_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.post("/pairing")
async def pairing(payload: PairingIn, user: User = Depends(current_user), llm=Depends(get_llm)):
    """Recommend up to three bottles in stock for the given menu."""
    try:
        return await enrichment_service.pair_menu(llm, user.id, payload.menu, payload.language)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/enrich/{wine_id}")
async def enrich(wine_id: UUID, user: User = Depends(current_user), llm=Depends(get_llm)):
    """Fill the empty fields of a wine from the model's identification."""
    try:
        result = await enrichment_service.enrich_wine(llm, user.id, str(wine_id))
    except NothingToEnrich as e:
        raise HTTPException(status_code=409, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=502, detail=str(e))
    if result is None:
        raise HTTPException(status_code=404, detail="Wine not found")
    return result


@router.post("/enrich-bulk")
async def enrich_bulk(payload: BulkEnrichIn, user: User = Depends(current_user), llm=Depends(get_llm)):
    return await enrichment_service.bulk_enrich(llm, user.id, [str(i) for i in payload.wine_ids])


@router.post("/identify")
async def identify(payload: ImageIdentifyIn, user: User = Depends(current_user), llm=Depends(get_llm)):
    """Identify a wine from a base64 label photo; nothing is stored."""
    try:
        result = await enrichment_service.identify_wine_from_image(
            llm, user.id, payload.base64Image, payload.imageMediaType
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if result.get("enrichmentData") is None:
        raise HTTPException(status_code=502, detail=result.get("error") or "Failed to identify wine from photo")
    return result
