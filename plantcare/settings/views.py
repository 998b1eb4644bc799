"""App settings API routes."""

from fastapi import APIRouter, Depends

from plantcare.core.dependencies import get_store
from plantcare.settings.models import AppSettings, AppSettingsUpdate
from plantcare.store.data_store import DataStore


router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=AppSettings)
async def get_app_settings(store: DataStore = Depends(get_store)):
    return store.settings.model_copy(deep=True)


@router.put("", response_model=AppSettings)
async def update_app_settings(updates: AppSettingsUpdate, store: DataStore = Depends(get_store)):
    """Update settings. Ids in custom_room_order that match no room are ignored by the routine."""
    settings = store.settings.model_copy(update=updates.model_dump(exclude_none=True), deep=True)
    return await store.update_settings(settings)
