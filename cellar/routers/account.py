"""User settings and dashboard endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from cellar.app.auth import User, current_user
from cellar.schemas import SettingIn
from cellar.services import user_settings as settings_service
from cellar.services.dashboard import get_dashboard

router = APIRouter(prefix="/api", tags=["account"])


@router.get("/me")
async def me(user: User = Depends(current_user)):
    return user


@router.get("/dashboard")
async def dashboard(user: User = Depends(current_user)):
    return await get_dashboard(user.id)


@router.get("/settings")
async def list_settings(user: User = Depends(current_user)):
    return await settings_service.list_settings(user.id)


@router.get("/settings/{key}")
async def get_setting(key: str, user: User = Depends(current_user)):
    return {"key": key, "value": await settings_service.get_setting(user.id, key)}


@router.put("/settings/{key}")
async def set_setting(key: str, payload: SettingIn, user: User = Depends(current_user)):
    try:
        return await settings_service.set_setting(user.id, key, payload.value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
