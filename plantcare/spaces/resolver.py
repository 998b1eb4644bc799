"""Plant <-> space membership lookups.

Relationships are foreign-key ids on ``Plant`` resolved on demand against the
current room and zone collections. A key pointing at a deleted room, zone or
window resolves to ``None``; lookups never raise.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence
from uuid import UUID

from plantcare.plants.models import Plant
from plantcare.spaces.models import Room, Window, Zone, Space

UNASSIGNED = "Unassigned"


class SpaceResolver:
    """Read-only view over rooms, zones and plants."""

    def __init__(self, rooms: Sequence[Room], zones: Sequence[Zone], plants: Sequence[Plant]):
        self.rooms = list(rooms)
        self.zones = list(zones)
        self.plants = list(plants)
        self._rooms_by_id: Dict[UUID, Room] = {r.id: r for r in self.rooms}
        self._zones_by_id: Dict[UUID, Zone] = {z.id: z for z in self.zones}

    def room_for_plant(self, plant: Plant) -> Optional[Room]:
        if plant.assigned_room_id is None:
            return None
        return self._rooms_by_id.get(plant.assigned_room_id)

    def zone_for_plant(self, plant: Plant) -> Optional[Zone]:
        if plant.assigned_zone_id is None:
            return None
        return self._zones_by_id.get(plant.assigned_zone_id)

    def window_for_plant(self, plant: Plant) -> Optional[Window]:
        if plant.assigned_window_id is None:
            return None
        room = self.room_for_plant(plant)
        if room is None:
            return None
        return room.get_window(plant.assigned_window_id)

    def plants_in_room(self, room: Room) -> List[Plant]:
        return [p for p in self.plants if p.assigned_room_id == room.id]

    def plants_in_zone(self, zone: Zone) -> List[Plant]:
        return [p for p in self.plants if p.assigned_zone_id == zone.id]

    def plants_in_space(self, space: Space) -> List[Plant]:
        if isinstance(space, Room):
            return self.plants_in_room(space)
        return self.plants_in_zone(space)

    def unassigned_plants(self) -> List[Plant]:
        return [p for p in self.plants if self.room_for_plant(p) is None and self.zone_for_plant(p) is None]

    def space_name_for_plant(self, plant: Plant) -> str:
        room = self.room_for_plant(plant)
        if room is not None:
            return room.name
        zone = self.zone_for_plant(plant)
        if zone is not None:
            return zone.name
        return UNASSIGNED
