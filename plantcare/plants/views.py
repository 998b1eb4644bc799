"""Plants and care-step API routes."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import ValidationError

from plantcare.core.dependencies import get_store
from plantcare.core.exceptions import BadRequestException
from plantcare.notifications.models import DailyReminder
from plantcare.notifications.reminder_service import ReminderService
from plantcare.plants import care_engine
from plantcare.plants.models import (
    CareStep,
    CareStepCreate,
    CareStepStatusResponse,
    CompleteCareStepRequest,
    DueCareItem,
    DueCareResponse,
    Plant,
    PlantCreate,
    PlantMove,
    PlantStatusResponse,
    PlantUpdate,
)
from plantcare.spaces.sorting import PlantsSortOption, sort_plants
from plantcare.store.data_store import DataStore


router = APIRouter(prefix="/plants", tags=["Plants"])


def build_care_step(data: CareStepCreate, **extra) -> CareStep:
    try:
        return CareStep(**data.model_dump(), **extra)
    except ValidationError as e:
        raise BadRequestException(f"Invalid care step: {e}")


@router.get("", response_model=List[Plant])
async def list_plants(
    sort: Optional[PlantsSortOption] = Query(default=None),
    store: DataStore = Depends(get_store),
):
    """Get all plants, optionally sorted."""
    plants = store.list_plants()
    if sort is None:
        return plants
    return sort_plants(plants, sort, store.resolver, tz=store.tz)


@router.post("", response_model=Plant, status_code=status.HTTP_201_CREATED)
async def create_plant(plant_data: PlantCreate, store: DataStore = Depends(get_store)):
    """Add a plant with its care steps."""
    steps = [build_care_step(s) for s in plant_data.care_steps]
    try:
        plant = Plant(**plant_data.model_dump(exclude={"care_steps"}), care_steps=steps)
    except ValidationError as e:
        raise BadRequestException(f"Invalid plant: {e}")
    return await store.add_plant(plant)


@router.get("/{plant_id}", response_model=Plant)
async def get_plant(plant_id: UUID, store: DataStore = Depends(get_store)):
    return store.get_plant(plant_id)


@router.patch("/{plant_id}", response_model=Plant)
async def update_plant(plant_id: UUID, updates: PlantUpdate, store: DataStore = Depends(get_store)):
    """Update a plant's name, light, humidity or notes."""
    plant = store.get_plant(plant_id)
    for field, value in updates.model_dump(exclude_none=True).items():
        setattr(plant, field, value)
    return await store.update_plant(plant)


@router.delete("/{plant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_plant(plant_id: UUID, store: DataStore = Depends(get_store)):
    await store.delete_plant(plant_id)


@router.post("/{plant_id}/move", response_model=Plant)
async def move_plant(plant_id: UUID, move: PlantMove, store: DataStore = Depends(get_store)):
    """Move a plant to a room/window or zone. Omit all ids to unassign."""
    return await store.move_plant(plant_id, move.room_id, move.window_id, move.zone_id)


@router.get("/{plant_id}/status", response_model=PlantStatusResponse)
async def get_plant_status(plant_id: UUID, store: DataStore = Depends(get_store)):
    """Due-date state of every care step of a plant."""
    plant = store.get_plant(plant_id)
    early_warning_days = store.settings.early_warning_days
    next_step = plant.next_due_care_step(tz=store.tz)

    steps = []
    for step in plant.care_steps:
        care_status = step.status(early_warning_days=early_warning_days, tz=store.tz)
        steps.append(
            CareStepStatusResponse(
                care_step_id=step.id,
                display_name=step.display_name,
                is_enabled=step.is_enabled,
                urgency=care_status.urgency,
                label=care_status.label,
                next_due_date=care_status.next_due_date,
                days_until_due=care_status.days_until_due,
                days_overdue=care_status.days_overdue,
                days_since_last_completed=step.days_since_last_completed(tz=store.tz),
            )
        )

    return PlantStatusResponse(
        plant_id=plant.id,
        name=plant.name,
        space_name=store.resolver.space_name_for_plant(plant),
        has_any_overdue_care_steps=plant.has_any_overdue_care_steps(tz=store.tz),
        next_due_care_step_id=next_step.id if next_step else None,
        steps=steps,
    )


# ==================== Care Steps ====================


@router.post("/{plant_id}/care-steps", response_model=Plant, status_code=status.HTTP_201_CREATED)
async def add_care_step(plant_id: UUID, step_data: CareStepCreate, store: DataStore = Depends(get_store)):
    return await store.add_care_step(plant_id, build_care_step(step_data))


@router.put("/{plant_id}/care-steps/{care_step_id}", response_model=Plant)
async def update_care_step(
    plant_id: UUID,
    care_step_id: UUID,
    step_data: CareStepCreate,
    store: DataStore = Depends(get_store),
):
    """Replace a care step's definition. Its completion history is kept."""
    plant = store.get_plant(plant_id)
    current = plant.get_care_step(care_step_id)
    last_completed = current.last_completed_date if current else None
    step = build_care_step(step_data, id=care_step_id, last_completed_date=last_completed)
    return await store.update_care_step(plant_id, step)


@router.delete("/{plant_id}/care-steps/{care_step_id}", response_model=Plant)
async def remove_care_step(plant_id: UUID, care_step_id: UUID, store: DataStore = Depends(get_store)):
    return await store.remove_care_step(plant_id, care_step_id)


@router.post("/{plant_id}/care-steps/{care_step_id}/complete", response_model=Plant)
async def complete_care_step(
    plant_id: UUID,
    care_step_id: UUID,
    request: Optional[CompleteCareStepRequest] = None,
    store: DataStore = Depends(get_store),
):
    """Mark a care step as done (now, unless completed_at is given)."""
    completed_at = request.completed_at if request else None
    return await store.mark_care_step_completed(plant_id, care_step_id, completed_at)


# ==================== Due Care ====================


care_router = APIRouter(prefix="/care", tags=["Care"])


@care_router.get("/due", response_model=DueCareResponse)
async def get_due_care(store: DataStore = Depends(get_store)):
    """Overdue and due-today care steps across all plants."""
    now = care_engine.resolve_now(tz=store.tz)
    resolver = store.resolver
    early_warning_days = store.settings.early_warning_days

    def to_item(plant: Plant, step: CareStep) -> DueCareItem:
        care_status = step.status(now, early_warning_days, store.tz)
        return DueCareItem(
            plant_id=plant.id,
            plant_name=plant.name,
            space_name=resolver.space_name_for_plant(plant),
            care_step_id=step.id,
            display_name=step.display_name,
            urgency=care_status.urgency,
            label=care_status.label,
            days_overdue=care_status.days_overdue,
        )

    overdue = [to_item(p, s) for p, s in store.all_overdue_care_steps(now)]
    overdue.sort(key=lambda item: -item.days_overdue)
    due_today = [to_item(p, s) for p, s in store.all_due_today_care_steps(now)]

    return DueCareResponse(
        overdue=overdue,
        due_today=due_today,
        plants_needing_care=[p.id for p in store.plants_needing_care(now)],
    )


@care_router.get("/reminder", response_model=Optional[DailyReminder])
async def preview_reminder(store: DataStore = Depends(get_store)):
    """The daily reminder the current overdue steps would produce (null if none)."""
    return ReminderService.build_reminder(store.all_overdue_care_steps())
