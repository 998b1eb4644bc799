"""Guided care routine API routes."""

from fastapi import APIRouter, Depends, Request

from plantcare.core.dependencies import get_routine, get_store
from plantcare.routine.models import (
    RoutineResponse,
    ToggleCareStepRequest,
    ToggleCareStepResponse,
    routine_response,
)
from plantcare.routine.session import CareRoutine
from plantcare.store.data_store import DataStore


router = APIRouter(prefix="/routine", tags=["Care Routine"])


@router.post("/start", response_model=RoutineResponse)
async def start_routine(request: Request, store: DataStore = Depends(get_store)):
    """
    Start a new care routine over every space that has plants.

    Any routine already in progress is dropped; completions it ticked stay saved.
    """
    previous = getattr(request.app.state, "routine", None)
    if previous is not None:
        store.end_care_session()

    routine = CareRoutine(store)
    routine.start()
    request.app.state.routine = routine
    return routine_response(routine)


@router.get("", response_model=RoutineResponse)
async def get_routine_state(routine: CareRoutine = Depends(get_routine)):
    return routine_response(routine)


@router.post("/toggle", response_model=ToggleCareStepResponse)
async def toggle_care_step(body: ToggleCareStepRequest, routine: CareRoutine = Depends(get_routine)):
    """Tick or untick a care step. The change is saved immediately."""
    completed = await routine.toggle_care_step(body.plant_id, body.care_step_id)
    return ToggleCareStepResponse(completed=completed, routine=routine_response(routine))


@router.post("/next", response_model=RoutineResponse)
async def next_space(routine: CareRoutine = Depends(get_routine)):
    routine.next_space()
    return routine_response(routine)


@router.post("/previous", response_model=RoutineResponse)
async def previous_space(routine: CareRoutine = Depends(get_routine)):
    routine.previous_space()
    return routine_response(routine)


@router.post("/complete", response_model=RoutineResponse)
async def complete_routine(routine: CareRoutine = Depends(get_routine)):
    """Show the summary of ticked versus total care steps."""
    routine.complete_routine()
    return routine_response(routine)


@router.post("/finish", response_model=RoutineResponse)
async def finish_routine(routine: CareRoutine = Depends(get_routine)):
    routine.finish()
    return routine_response(routine)


@router.post("/cancel", response_model=RoutineResponse)
async def cancel_routine(routine: CareRoutine = Depends(get_routine)):
    """Stop early. Steps already ticked are not reverted."""
    routine.cancel()
    return routine_response(routine)
