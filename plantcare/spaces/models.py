"""Space models: indoor rooms with windows, and outdoor zones."""

from enum import Enum
from typing import Optional, List, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from plantcare.plants.models import Direction


class Window(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    direction: Direction
    notes: Optional[str] = None


class Room(BaseModel):
    """Indoor space. ``order_index`` drives list order and the care routine."""
    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1)
    windows: List[Window] = Field(default_factory=list)
    order_index: int = 0

    def get_window(self, window_id: UUID) -> Optional[Window]:
        return next((w for w in self.windows if w.id == window_id), None)


class ZoneAspect(str, Enum):
    OPEN = "Open"
    SOUTH_WALL = "South Wall"
    NORTH_WALL = "North Wall"
    EAST_WALL = "East Wall"
    WEST_WALL = "West Wall"


class SunPeriod(str, Enum):
    AM = "AM"
    PM = "PM"
    ALL = "ALL"


class WindExposure(str, Enum):
    SHELTERED = "Sheltered"
    EXPOSED = "Exposed"


class SunHours(str, Enum):
    ZERO_TO_TWO = "0-2"
    TWO_TO_FOUR = "2-4"
    FOUR_TO_SIX = "4-6"
    SIX_PLUS = "6+"


class Zone(BaseModel):
    """Outdoor space."""
    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1)
    aspect: ZoneAspect = ZoneAspect.OPEN
    sun_period: SunPeriod = SunPeriod.ALL
    wind: WindExposure = WindExposure.SHELTERED
    sun_hours: Optional[SunHours] = None
    order_index: int = 0

    @property
    def inferred_sun_hours(self) -> SunHours:
        """Explicit sun hours, else an estimate from aspect and sun period."""
        if self.sun_hours is not None:
            return self.sun_hours

        if self.aspect == ZoneAspect.NORTH_WALL:
            return SunHours.ZERO_TO_TWO
        if self.aspect == ZoneAspect.SOUTH_WALL and self.sun_period == SunPeriod.ALL:
            return SunHours.SIX_PLUS
        if self.aspect == ZoneAspect.EAST_WALL and self.sun_period == SunPeriod.AM:
            return SunHours.TWO_TO_FOUR
        if self.aspect == ZoneAspect.WEST_WALL and self.sun_period == SunPeriod.PM:
            return SunHours.TWO_TO_FOUR
        if self.aspect == ZoneAspect.OPEN:
            return SunHours.SIX_PLUS if self.sun_period == SunPeriod.ALL else SunHours.FOUR_TO_SIX
        return SunHours.TWO_TO_FOUR


Space = Union[Room, Zone]


def is_indoor(space: Space) -> bool:
    return isinstance(space, Room)


# ==================== API Schemas ====================


class WindowCreate(BaseModel):
    direction: Direction
    notes: Optional[str] = None


class RoomCreate(BaseModel):
    name: str = Field(..., min_length=1)
    windows: List[WindowCreate] = Field(default_factory=list)


class RoomUpdate(BaseModel):
    """Replace a room's name and/or windows. Window ids are kept when given."""
    name: Optional[str] = Field(None, min_length=1)
    windows: Optional[List[Window]] = None


class ZoneCreate(BaseModel):
    name: str = Field(..., min_length=1)
    aspect: ZoneAspect = ZoneAspect.OPEN
    sun_period: SunPeriod = SunPeriod.ALL
    wind: WindExposure = WindExposure.SHELTERED
    sun_hours: Optional[SunHours] = None


class ZoneUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    aspect: Optional[ZoneAspect] = None
    sun_period: Optional[SunPeriod] = None
    wind: Optional[WindExposure] = None
    sun_hours: Optional[SunHours] = None


class SpaceOrder(BaseModel):
    """New manual order, as the full list of ids."""
    ids: List[UUID]


class SpaceSummary(BaseModel):
    id: UUID
    name: str
    kind: str  # "indoor" | "outdoor"
    plant_count: int
    order_index: int
