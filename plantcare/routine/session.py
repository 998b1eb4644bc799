"""Guided care routine.

Walks every occupied space (rooms first, then outdoor zones) and lets the user
tick off each plant's enabled care steps. Ticks persist immediately through
the data store; the routine itself only keeps progress bookkeeping, so
cancelling never reverts a completion.

States::

    not_started -> in_progress -> reviewing -> committed
                          |             |
                          +-------------+--> discarded
    not_started -> empty   (no space has plants)
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Set, Tuple
from uuid import UUID

from plantcare.core.exceptions import BadRequestException, NotFoundException, RoutineStateError
from plantcare.plants.models import Plant
from plantcare.spaces.models import Space
from plantcare.store.data_store import DataStore

logger = logging.getLogger(__name__)


class RoutineState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    REVIEWING = "reviewing"
    COMMITTED = "committed"
    DISCARDED = "discarded"
    EMPTY = "empty"


@dataclass(frozen=True)
class RoutineSummary:
    completed_count: int
    total_count: int

    @property
    def remaining_count(self) -> int:
        return max(self.total_count - self.completed_count, 0)


class CareRoutine:
    """One run of the guided care routine over a data store."""

    def __init__(self, store: DataStore):
        self.store = store
        self.state = RoutineState.NOT_STARTED
        self.spaces: List[Space] = []
        self.current_space_index = 0
        self.total_care_steps = 0
        self.completed: Set[Tuple[UUID, UUID]] = set()
        self.summary: Optional[RoutineSummary] = None

    def _require(self, *states: RoutineState) -> None:
        if self.state not in states:
            raise RoutineStateError(f"Care routine is {self.state.value}")

    def start(self) -> RoutineState:
        """
        Build the traversal and open a care session.

        The space list and the total step count are fixed here; later edits
        to care steps do not change them.
        """
        self._require(RoutineState.NOT_STARTED)
        rooms = self.store.ordered_rooms_for_care_routine()
        zones = self.store.ordered_zones_for_care_routine()
        self.spaces = [s.model_copy(deep=True) for s in [*rooms, *zones]]

        if not self.spaces:
            self.state = RoutineState.EMPTY
            logger.info("Care routine has no spaces with plants")
            return self.state

        resolver = self.store.resolver
        self.total_care_steps = sum(
            len(plant.enabled_care_steps)
            for space in self.spaces
            for plant in resolver.plants_in_space(space)
        )
        self.store.start_care_session()
        self.state = RoutineState.IN_PROGRESS
        logger.info(
            f"Care routine started: {len(self.spaces)} spaces, {self.total_care_steps} care steps"
        )
        return self.state

    # ---- Current space --------------------------------------------------------

    @property
    def current_space(self) -> Optional[Space]:
        if self.current_space_index < len(self.spaces):
            return self.spaces[self.current_space_index]
        return None

    def plants_in_current_space(self) -> List[Plant]:
        space = self.current_space
        if space is None:
            return []
        return [p.model_copy(deep=True) for p in self.store.resolver.plants_in_space(space)]

    @property
    def can_go_back(self) -> bool:
        return self.current_space_index > 0

    @property
    def can_go_next(self) -> bool:
        return self.current_space_index < len(self.spaces) - 1

    @property
    def completed_count(self) -> int:
        return len(self.completed)

    def is_care_step_completed(self, plant_id: UUID, care_step_id: UUID) -> bool:
        return (plant_id, care_step_id) in self.completed

    def _check_tickable(self, plant_id: UUID, care_step_id: UUID) -> None:
        plant = self.store.get_plant(plant_id)
        space_ids = {space.id for space in self.spaces}
        if plant.assigned_room_id not in space_ids and plant.assigned_zone_id not in space_ids:
            raise BadRequestException("Plant is not part of this care routine")
        step = plant.get_care_step(care_step_id)
        if step is None:
            raise NotFoundException("Care step not found")
        if not step.is_enabled:
            raise BadRequestException("Disabled care steps cannot be completed in a routine")

    # ---- Actions --------------------------------------------------------------

    async def toggle_care_step(
        self, plant_id: UUID, care_step_id: UUID, now: Optional[datetime] = None
    ) -> bool:
        """
        Tick or untick a care step. Returns True if the step is now ticked.

        Ticking sets the step's last completion to ``now``. Unticking resets it
        to never completed rather than to its previous date.

        Only enabled steps of plants in the routine's spaces can be ticked.
        """
        self._require(RoutineState.IN_PROGRESS)
        key = (plant_id, care_step_id)
        if key in self.completed:
            await self.store.unmark_care_step_completed(plant_id, care_step_id)
            self.completed.discard(key)
            return False
        self._check_tickable(plant_id, care_step_id)
        await self.store.mark_care_step_completed(plant_id, care_step_id, now)
        self.completed.add(key)
        return True

    def previous_space(self) -> None:
        self._require(RoutineState.IN_PROGRESS)
        self.current_space_index = max(0, self.current_space_index - 1)

    def next_space(self) -> None:
        self._require(RoutineState.IN_PROGRESS)
        self.current_space_index = min(len(self.spaces) - 1, self.current_space_index + 1)

    def complete_routine(self) -> RoutineSummary:
        """Move to the summary of ticked vs total steps across all spaces."""
        self._require(RoutineState.IN_PROGRESS)
        self.summary = RoutineSummary(
            completed_count=self.completed_count,
            total_count=self.total_care_steps,
        )
        self.state = RoutineState.REVIEWING
        return self.summary

    def finish(self) -> RoutineSummary:
        self._require(RoutineState.REVIEWING)
        self.store.end_care_session()
        self.state = RoutineState.COMMITTED
        logger.info(
            f"Care routine finished: {self.summary.completed_count}/{self.summary.total_count} steps"
        )
        return self.summary

    def cancel(self) -> None:
        """End the routine early. Completions already ticked stay persisted."""
        self._require(RoutineState.IN_PROGRESS, RoutineState.REVIEWING)
        self.store.end_care_session()
        self.state = RoutineState.DISCARDED
        logger.info(f"Care routine cancelled with {self.completed_count} steps ticked")
