"""Snapshot schema shared by every persistence backend."""

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field

from plantcare.plants.models import Plant
from plantcare.settings.models import AppSettings
from plantcare.spaces.models import Room, Zone

SNAPSHOT_VERSION = "1.0"


class SnapshotMetadata(BaseModel):
    version: str = SNAPSHOT_VERSION
    saved_at: datetime
    plant_count: int = 0
    room_count: int = 0
    zone_count: int = 0


class Snapshot(BaseModel):
    """Everything the app persists. Snapshots without metadata predate versioning."""
    metadata: Optional[SnapshotMetadata] = None
    rooms: List[Room] = Field(default_factory=list)
    zones: List[Zone] = Field(default_factory=list)
    plants: List[Plant] = Field(default_factory=list)
    settings: AppSettings = Field(default_factory=AppSettings)
