"""Backup API routes."""

from fastapi import APIRouter, Depends, Request

from plantcare.core.dependencies import get_store
from plantcare.store.data_store import DataStore
from plantcare.store.models import Snapshot


router = APIRouter(prefix="/backup", tags=["Backup"])


@router.get("", response_model=Snapshot)
async def export_backup(store: DataStore = Depends(get_store)):
    """Everything the app stores, as one snapshot."""
    return store.snapshot()


@router.post("/restore", response_model=Snapshot)
async def restore_backup(snapshot: Snapshot, request: Request, store: DataStore = Depends(get_store)):
    """
    Replace all rooms, zones, plants and settings with a backup.

    Any running care routine is dropped. Snapshots without metadata are
    migrated like a legacy data file.
    """
    request.app.state.routine = None
    await store.restore(snapshot)
    return store.snapshot()
