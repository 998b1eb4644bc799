"""Care routine API schemas."""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from plantcare.plants import care_engine
from plantcare.routine.session import CareRoutine, RoutineState
from plantcare.spaces.models import is_indoor


class RoutineCareStep(BaseModel):
    care_step_id: UUID
    display_name: str
    instructions: str
    label: str
    completed: bool


class RoutinePlant(BaseModel):
    plant_id: UUID
    name: str
    care_steps: List[RoutineCareStep]


class RoutineSpace(BaseModel):
    id: UUID
    name: str
    kind: str
    plants: List[RoutinePlant]


class RoutineSummaryResponse(BaseModel):
    completed_count: int
    total_count: int
    remaining_count: int


class RoutineResponse(BaseModel):
    state: RoutineState
    current_space_index: int
    total_spaces: int
    current_space: Optional[RoutineSpace] = None
    completed_count: int
    total_count: int
    can_go_back: bool
    can_go_next: bool
    summary: Optional[RoutineSummaryResponse] = None


class ToggleCareStepRequest(BaseModel):
    plant_id: UUID
    care_step_id: UUID


class ToggleCareStepResponse(BaseModel):
    completed: bool
    routine: RoutineResponse


def routine_response(routine: CareRoutine) -> RoutineResponse:
    """Snapshot of a routine's progress, with the current space's plants."""
    store = routine.store
    early_warning_days = store.settings.early_warning_days
    now = care_engine.resolve_now(tz=store.tz)

    current_space = None
    space = routine.current_space
    if space is not None and routine.state == RoutineState.IN_PROGRESS:
        plants = []
        for plant in routine.plants_in_current_space():
            steps = [
                RoutineCareStep(
                    care_step_id=step.id,
                    display_name=step.display_name,
                    instructions=step.instructions,
                    label=step.status(now, early_warning_days, store.tz).label,
                    completed=routine.is_care_step_completed(plant.id, step.id),
                )
                for step in plant.enabled_care_steps
            ]
            plants.append(RoutinePlant(plant_id=plant.id, name=plant.name, care_steps=steps))
        current_space = RoutineSpace(
            id=space.id,
            name=space.name,
            kind="indoor" if is_indoor(space) else "outdoor",
            plants=plants,
        )

    summary = None
    if routine.summary is not None:
        summary = RoutineSummaryResponse(
            completed_count=routine.summary.completed_count,
            total_count=routine.summary.total_count,
            remaining_count=routine.summary.remaining_count,
        )

    return RoutineResponse(
        state=routine.state,
        current_space_index=routine.current_space_index,
        total_spaces=len(routine.spaces),
        current_space=current_space,
        completed_count=routine.completed_count,
        total_count=routine.total_care_steps,
        can_go_back=routine.can_go_back,
        can_go_next=routine.can_go_next,
        summary=summary,
    )
