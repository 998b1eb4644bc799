"""Plant-related models and schemas."""

from datetime import datetime, tzinfo
from enum import Enum
from typing import Optional, List
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from plantcare.plants import care_engine
from plantcare.plants.care_engine import CareStatus


class Direction(str, Enum):
    """Compass direction of a window or a plant's preferred light."""
    NORTH = "North"
    NORTHEAST = "Northeast"
    EAST = "East"
    SOUTHEAST = "Southeast"
    SOUTH = "South"
    SOUTHWEST = "Southwest"
    WEST = "West"
    NORTHWEST = "Northwest"


class LightType(str, Enum):
    DIRECT = "Direct"
    INDIRECT = "Indirect"
    LOW = "Low"


class HumidityPreference(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class CareStepType(str, Enum):
    """Kinds of recurring care."""
    WATERING = "Watering"
    MISTING = "Misting"
    DUSTING = "Dusting"
    ROTATION = "Rotation"
    CUSTOM = "Custom"


class CareStep(BaseModel):
    """
    One recurring care obligation for a plant.

    Due-date values are never stored; they are derived from
    ``last_completed_date`` and ``frequency_days`` on every call.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: UUID = Field(default_factory=uuid4)
    type: CareStepType
    custom_name: Optional[str] = Field(None, description="Required for custom steps only")
    instructions: str = ""
    frequency_days: int = Field(..., gt=0, description="Days between occurrences")
    last_completed_date: Optional[datetime] = None
    is_enabled: bool = True

    @model_validator(mode="after")
    def _check_custom_name(self) -> "CareStep":
        if self.type == CareStepType.CUSTOM:
            if not self.custom_name or not self.custom_name.strip():
                raise ValueError("Custom care steps require a name")
        elif self.custom_name is not None:
            raise ValueError(f"{self.type.value} care steps cannot have a custom name")
        return self

    @property
    def display_name(self) -> str:
        if self.type == CareStepType.CUSTOM:
            return self.custom_name
        return self.type.value

    def next_due_date(self, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> datetime:
        return care_engine.next_due_date(self.last_completed_date, self.frequency_days, now, tz)

    def is_overdue(self, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> bool:
        return care_engine.is_overdue(self.last_completed_date, self.frequency_days, now, tz)

    def is_due_today(self, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> bool:
        return care_engine.is_due_today(self.last_completed_date, self.frequency_days, now, tz)

    def days_since_last_completed(
        self, now: Optional[datetime] = None, tz: Optional[tzinfo] = None
    ) -> Optional[int]:
        return care_engine.days_since_last_completed(self.last_completed_date, now, tz)

    def days_until_due(self, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> Optional[int]:
        return care_engine.days_until_due(self.last_completed_date, self.frequency_days, now, tz)

    def status(
        self,
        now: Optional[datetime] = None,
        early_warning_days: int = 2,
        tz: Optional[tzinfo] = None,
    ) -> CareStatus:
        return care_engine.classify_care_step(
            self.last_completed_date, self.frequency_days, now, early_warning_days, tz
        )


class Plant(BaseModel):
    """
    A plant and the care steps it owns.

    A plant sits in at most one space: a room (optionally at one of its
    windows) or an outdoor zone. Unassigned plants have neither.
    """
    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1)
    latin_name: Optional[str] = None
    assigned_room_id: Optional[UUID] = None
    assigned_zone_id: Optional[UUID] = None
    assigned_window_id: Optional[UUID] = None
    preferred_light_direction: Direction = Direction.EAST
    light_type: LightType = LightType.INDIRECT
    general_notes: str = ""
    humidity_preference: Optional[HumidityPreference] = None
    care_steps: List[CareStep] = Field(default_factory=list)
    last_health_check_feedback: Optional[str] = None
    last_health_check_date: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_placement(self) -> "Plant":
        if self.assigned_room_id is not None and self.assigned_zone_id is not None:
            raise ValueError("A plant cannot be assigned to both a room and a zone")
        if self.assigned_window_id is not None and self.assigned_room_id is None:
            raise ValueError("A window can only be assigned together with its room")
        return self

    # ---- Placement ---------------------------------------------------------

    def assign_to_room(self, room_id: UUID, window_id: Optional[UUID] = None) -> None:
        self.assigned_zone_id = None
        self.assigned_room_id = room_id
        self.assigned_window_id = window_id

    def assign_to_zone(self, zone_id: UUID) -> None:
        self.assigned_room_id = None
        self.assigned_window_id = None
        self.assigned_zone_id = zone_id

    def unassign(self) -> None:
        self.assigned_room_id = None
        self.assigned_window_id = None
        self.assigned_zone_id = None

    # ---- Derived care state -------------------------------------------------

    @property
    def watering_step(self) -> Optional[CareStep]:
        """First enabled watering step; disabled steps do not schedule anything."""
        return next((s for s in self.enabled_care_steps if s.type == CareStepType.WATERING), None)

    @property
    def enabled_care_steps(self) -> List[CareStep]:
        return [s for s in self.care_steps if s.is_enabled]

    def overdue_care_steps(self, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> List[CareStep]:
        now = care_engine.resolve_now(now, tz)
        return [s for s in self.enabled_care_steps if s.is_overdue(now, tz)]

    def due_today_care_steps(self, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> List[CareStep]:
        now = care_engine.resolve_now(now, tz)
        return [s for s in self.enabled_care_steps if s.is_due_today(now, tz)]

    def has_any_overdue_care_steps(self, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> bool:
        return len(self.overdue_care_steps(now, tz)) > 0

    def next_due_care_step(self, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> Optional[CareStep]:
        """
        Enabled step with the earliest due date.

        Exact ties go to the step listed first in ``care_steps``.
        """
        now = care_engine.resolve_now(now, tz)
        candidates = [
            (care_engine.to_aware(step.next_due_date(now, tz), tz), index, step)
            for index, step in enumerate(self.enabled_care_steps)
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda item: (item[0], item[1]))[2]

    # ---- Mutations -----------------------------------------------------------

    def get_care_step(self, care_step_id: UUID) -> Optional[CareStep]:
        return next((s for s in self.care_steps if s.id == care_step_id), None)

    def add_care_step(self, care_step: CareStep) -> None:
        if self.get_care_step(care_step.id) is not None:
            raise ValueError(f"Care step {care_step.id} already exists on this plant")
        self.care_steps.append(care_step)

    def remove_care_step(self, care_step_id: UUID) -> None:
        self.care_steps = [s for s in self.care_steps if s.id != care_step_id]

    def update_care_step(self, updated_step: CareStep) -> None:
        """Replace the step with the same id; unknown ids are ignored."""
        for index, step in enumerate(self.care_steps):
            if step.id == updated_step.id:
                self.care_steps[index] = updated_step
                return

    def mark_care_step_completed(self, care_step_id: UUID, date: Optional[datetime] = None) -> None:
        step = self.get_care_step(care_step_id)
        if step is not None:
            step.last_completed_date = date or care_engine.resolve_now()

    def unmark_care_step_completed(self, care_step_id: UUID) -> None:
        """
        Clear a completion.

        This is a hard reset to "never completed"; any earlier completion date
        is not restored.
        """
        step = self.get_care_step(care_step_id)
        if step is not None:
            step.last_completed_date = None


class CompletedCareStep(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    plant_id: UUID
    care_step_id: UUID
    completed_date: datetime


class CareSession(BaseModel):
    """In-memory bookkeeping for a running care routine."""
    id: UUID = Field(default_factory=uuid4)
    date: datetime = Field(default_factory=care_engine.resolve_now)
    completed_care_steps: List[CompletedCareStep] = Field(default_factory=list)

    def is_plant_completed(self, plant_id: UUID) -> bool:
        return any(c.plant_id == plant_id for c in self.completed_care_steps)

    def completed_steps_for_plant(self, plant_id: UUID) -> List[CompletedCareStep]:
        return [c for c in self.completed_care_steps if c.plant_id == plant_id]

    def mark_care_step_completed(self, plant_id: UUID, care_step_id: UUID, date: Optional[datetime] = None) -> None:
        """Record a completion; marking the same step again replaces the earlier entry."""
        self.unmark_care_step_completed(plant_id, care_step_id)
        self.completed_care_steps.append(
            CompletedCareStep(
                plant_id=plant_id,
                care_step_id=care_step_id,
                completed_date=date or care_engine.resolve_now(),
            )
        )

    def unmark_care_step_completed(self, plant_id: UUID, care_step_id: UUID) -> None:
        self.completed_care_steps = [
            c for c in self.completed_care_steps
            if not (c.plant_id == plant_id and c.care_step_id == care_step_id)
        ]


# ==================== API Schemas ====================


class CareStepCreate(BaseModel):
    """Schema to add a care step to a plant."""
    type: CareStepType
    custom_name: Optional[str] = None
    instructions: str = ""
    frequency_days: int = Field(..., gt=0)
    is_enabled: bool = True


class PlantCreate(BaseModel):
    """Schema to add a plant."""
    name: str = Field(..., min_length=1)
    latin_name: Optional[str] = None
    assigned_room_id: Optional[UUID] = None
    assigned_zone_id: Optional[UUID] = None
    assigned_window_id: Optional[UUID] = None
    preferred_light_direction: Direction = Direction.EAST
    light_type: LightType = LightType.INDIRECT
    general_notes: str = ""
    humidity_preference: Optional[HumidityPreference] = None
    care_steps: List[CareStepCreate] = Field(default_factory=list)


class PlantUpdate(BaseModel):
    """Schema to update a plant's descriptive fields."""
    name: Optional[str] = Field(None, min_length=1)
    latin_name: Optional[str] = None
    preferred_light_direction: Optional[Direction] = None
    light_type: Optional[LightType] = None
    general_notes: Optional[str] = None
    humidity_preference: Optional[HumidityPreference] = None


class PlantMove(BaseModel):
    """Schema to move a plant; all ids empty means unassigned."""
    room_id: Optional[UUID] = None
    window_id: Optional[UUID] = None
    zone_id: Optional[UUID] = None


class CompleteCareStepRequest(BaseModel):
    completed_at: Optional[datetime] = None


class CareStepStatusResponse(BaseModel):
    care_step_id: UUID
    display_name: str
    is_enabled: bool
    urgency: str
    label: str
    next_due_date: datetime
    days_until_due: Optional[int] = None
    days_overdue: int = 0
    days_since_last_completed: Optional[int] = None


class PlantStatusResponse(BaseModel):
    plant_id: UUID
    name: str
    space_name: str
    has_any_overdue_care_steps: bool
    next_due_care_step_id: Optional[UUID] = None
    steps: List[CareStepStatusResponse]


class DueCareItem(BaseModel):
    plant_id: UUID
    plant_name: str
    space_name: str
    care_step_id: UUID
    display_name: str
    urgency: str
    label: str
    days_overdue: int = 0


class DueCareResponse(BaseModel):
    """Today's care list: overdue first (most overdue first), then due today."""
    overdue: List[DueCareItem]
    due_today: List[DueCareItem]
    plants_needing_care: List[UUID]
