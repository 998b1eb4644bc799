"""Sort options for plant and space lists."""

from __future__ import annotations

from datetime import datetime, tzinfo
from enum import Enum
from typing import List, Optional, Sequence

from plantcare.plants import care_engine
from plantcare.plants.models import Plant
from plantcare.spaces.models import Space
from plantcare.spaces.resolver import SpaceResolver


class PlantsSortOption(str, Enum):
    NAME_ASCENDING = "A-Z"
    NAME_DESCENDING = "Z-A"
    NEXT_WATERING_DUE = "Next Watering Due"
    LAST_WATERING_DUE = "Last Watering Due"
    GROUP_BY_SPACE_ASCENDING = "Group by Space (A-Z)"
    GROUP_BY_SPACE_DESCENDING = "Group by Space (Z-A)"


class SpacesSortOption(str, Enum):
    NAME_ASCENDING = "A-Z"
    NAME_DESCENDING = "Z-A"
    MOST_PLANTS = "Most Plants"
    FEWEST_PLANTS = "Fewest Plants"


def _name_key(name: str) -> str:
    return name.casefold()


def sort_plants(
    plants: Sequence[Plant],
    option: PlantsSortOption,
    resolver: SpaceResolver,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> List[Plant]:
    """
    Sort plants for display.

    Plants without an enabled watering step go last in both watering-due
    orders.
    Space grouping falls back to plant name inside a space.
    """
    now = care_engine.resolve_now(now, tz)

    if option == PlantsSortOption.NAME_ASCENDING:
        return sorted(plants, key=lambda p: _name_key(p.name))
    if option == PlantsSortOption.NAME_DESCENDING:
        return sorted(plants, key=lambda p: _name_key(p.name), reverse=True)

    if option in (PlantsSortOption.NEXT_WATERING_DUE, PlantsSortOption.LAST_WATERING_DUE):
        scheduled = [p for p in plants if p.watering_step is not None]
        unscheduled = [p for p in plants if p.watering_step is None]
        scheduled.sort(
            key=lambda p: care_engine.to_aware(p.watering_step.next_due_date(now, tz), tz),
            reverse=option == PlantsSortOption.LAST_WATERING_DUE,
        )
        return scheduled + unscheduled

    descending = option == PlantsSortOption.GROUP_BY_SPACE_DESCENDING
    # Two stable passes: plant name ascending inside each space group.
    by_name = sorted(plants, key=lambda p: _name_key(p.name))
    return sorted(
        by_name,
        key=lambda p: _name_key(resolver.space_name_for_plant(p)),
        reverse=descending,
    )


def sort_spaces(
    spaces: Sequence[Space],
    option: SpacesSortOption,
    resolver: SpaceResolver,
) -> List[Space]:
    if option == SpacesSortOption.NAME_ASCENDING:
        return sorted(spaces, key=lambda s: _name_key(s.name))
    if option == SpacesSortOption.NAME_DESCENDING:
        return sorted(spaces, key=lambda s: _name_key(s.name), reverse=True)
    if option == SpacesSortOption.MOST_PLANTS:
        return sorted(spaces, key=lambda s: len(resolver.plants_in_space(s)), reverse=True)
    return sorted(spaces, key=lambda s: len(resolver.plants_in_space(s)))
