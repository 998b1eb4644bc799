"""User-adjustable application settings (persisted with the snapshot)."""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class AppSettings(BaseModel):
    early_warning_days: int = Field(2, ge=0, description="Days ahead a step counts as due soon")
    custom_room_order: List[UUID] = Field(
        default_factory=list,
        description="Room ids in care-routine order; rooms not listed follow by order index",
    )


class AppSettingsUpdate(BaseModel):
    early_warning_days: Optional[int] = Field(None, ge=0)
    custom_room_order: Optional[List[UUID]] = None
