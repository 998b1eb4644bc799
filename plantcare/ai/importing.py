"""Bulk plant import from JSON exported by an AI chat.

The imported records are loose: light, direction and care frequency arrive
as free text and are mapped onto the plant model with keyword heuristics.
Pure functions: nothing here touches the store.
"""

from typing import Dict, Iterable, List, Optional, Sequence
from uuid import UUID

from pydantic import BaseModel, Field

from plantcare.ai.models import CamelModel
from plantcare.plants.models import CareStep, CareStepType, Direction, HumidityPreference, LightType, Plant
from plantcare.spaces.models import Room, Window


class ImportedPlant(CamelModel):
    name: str = Field(..., min_length=1)
    room: str = ""
    window_direction: str = ""
    preferred_light_direction: str = ""
    light_type: str = ""
    watering_instructions: str = ""
    care_notes: str = ""


class RoomMapping(BaseModel):
    """Where plants listing an unknown room name should go."""
    unmatched_room: str
    matched_room_id: Optional[UUID] = None
    create_new: bool = False


class ImportPlantsRequest(BaseModel):
    plants: List[ImportedPlant] = Field(..., min_length=1)
    room_mappings: List[RoomMapping] = Field(default_factory=list)


class ImportPreviewResponse(BaseModel):
    plant_count: int
    unmatched_rooms: List[str]


class ImportPlantsResponse(BaseModel):
    plants: List[Plant]
    created_rooms: List[Room]


_LIGHT_TYPES = {
    "direct": LightType.DIRECT,
    "indirect": LightType.INDIRECT,
    "low": LightType.LOW,
}

# Combined answers ("east or southeast") map to one direction.
_PREFERRED_DIRECTIONS = {
    "north": Direction.NORTH,
    "northeast": Direction.NORTHEAST,
    "east or northeast": Direction.NORTHEAST,
    "east": Direction.EAST,
    "east or southeast": Direction.EAST,
    "southeast": Direction.SOUTHEAST,
    "south": Direction.SOUTH,
    "south or west": Direction.SOUTH,
    "south or southeast": Direction.SOUTH,
    "southwest": Direction.SOUTHWEST,
    "southeast or southwest": Direction.SOUTHWEST,
    "west": Direction.WEST,
    "northwest": Direction.NORTHWEST,
}

_WINDOW_DIRECTIONS = {d.value.lower(): d for d in Direction}

_WATERING_KEYWORDS = [
    (("daily",), 1),
    (("every other day",), 2),
    (("twice a week",), 3),
    (("weekly", "once a week"), 7),
    (("every 2 weeks", "every two weeks"), 14),
    (("every 3 weeks", "every three weeks"), 21),
    (("monthly", "once a month"), 30),
]

_ROTATION_KEYWORDS = [
    (("weekly", "every week"), 7, "Rotate weekly for even growth"),
    (("every 2 weeks", "every two weeks"), 14, "Rotate every 2 weeks for even growth"),
    (("every 3 weeks",), 21, "Rotate every 3 weeks for even growth"),
    (("monthly", "every month"), 30, "Rotate monthly for even growth"),
]

DEFAULT_ROTATION_DAYS = 14


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(k in text for k in keywords)


def parse_light_type(text: str) -> LightType:
    return _LIGHT_TYPES.get(text.strip().lower(), LightType.INDIRECT)


def parse_preferred_direction(text: str) -> Direction:
    return _PREFERRED_DIRECTIONS.get(text.strip().lower(), Direction.EAST)


def parse_window_direction(text: str) -> Direction:
    return _WINDOW_DIRECTIONS.get(text.strip().lower(), Direction.NORTH)


def estimate_watering_frequency(watering_instructions: str, light_type: str) -> int:
    """
    Days between waterings.

    Frequency words in the instructions win; otherwise brighter light means
    more frequent watering (direct 7, indirect 10, low 14).
    """
    instructions = watering_instructions.lower()
    for keywords, days in _WATERING_KEYWORDS:
        if _contains_any(instructions, keywords):
            return days
    return {"direct": 7, "indirect": 10, "low": 14}.get(light_type.strip().lower(), 10)


def estimate_humidity_preference(care_notes: str) -> HumidityPreference:
    notes = care_notes.lower()
    if _contains_any(notes, ("high humidity", "mist", "humid")):
        return HumidityPreference.HIGH
    if _contains_any(notes, ("low humidity", "dry")):
        return HumidityPreference.LOW
    return HumidityPreference.MEDIUM


def rotation_step(care_notes: str) -> Optional[CareStep]:
    """A rotation step when the notes mention rotating, else None."""
    notes = care_notes.lower()
    if "rotate" not in notes:
        return None
    for keywords, days, instructions in _ROTATION_KEYWORDS:
        if _contains_any(notes, keywords):
            return CareStep(type=CareStepType.ROTATION, instructions=instructions, frequency_days=days)
    return CareStep(
        type=CareStepType.ROTATION,
        instructions="Rotate periodically for even growth",
        frequency_days=DEFAULT_ROTATION_DAYS,
    )


def imported_plant_to_plant(
    imported: ImportedPlant, room_id: Optional[UUID] = None, window_id: Optional[UUID] = None
) -> Plant:
    plant = Plant(
        name=imported.name,
        assigned_room_id=room_id,
        assigned_window_id=window_id if room_id is not None else None,
        preferred_light_direction=parse_preferred_direction(imported.preferred_light_direction),
        light_type=parse_light_type(imported.light_type),
        general_notes=imported.care_notes,
        humidity_preference=estimate_humidity_preference(imported.care_notes),
    )
    plant.add_care_step(
        CareStep(
            type=CareStepType.WATERING,
            instructions=imported.watering_instructions,
            frequency_days=estimate_watering_frequency(imported.watering_instructions, imported.light_type),
        )
    )
    rotation = rotation_step(imported.care_notes)
    if rotation is not None:
        plant.add_care_step(rotation)
    return plant


def unmatched_room_names(imported: Sequence[ImportedPlant], rooms: Sequence[Room]) -> List[str]:
    """Imported room names with no existing room (case-insensitive), sorted."""
    existing = {r.name.lower() for r in rooms}
    names = {p.room for p in imported if p.room.strip()}
    return sorted(n for n in names if n.lower() not in existing)


def window_for_import(imported: ImportedPlant, room: Room) -> Optional[Window]:
    """The room's window facing the imported direction, else its first window."""
    direction = parse_window_direction(imported.window_direction)
    for window in room.windows:
        if window.direction == direction:
            return window
    return room.windows[0] if room.windows else None


def rooms_to_create(mappings: Sequence[RoomMapping], next_order_index: int) -> Dict[str, Room]:
    """New rooms for mappings flagged ``create_new``, keyed by imported name."""
    created: Dict[str, Room] = {}
    for mapping in mappings:
        if mapping.create_new and mapping.unmatched_room not in created:
            created[mapping.unmatched_room] = Room(
                name=mapping.unmatched_room,
                windows=[Window(direction=Direction.NORTH)],
                order_index=next_order_index + len(created),
            )
    return created


def plants_from_import(
    imported: Sequence[ImportedPlant],
    rooms: Sequence[Room],
    mappings: Sequence[RoomMapping] = (),
) -> List[Plant]:
    """
    Build plants for an import.

    A room is found by case-insensitive name first, then through the
    mappings; ``rooms`` must already include any newly created rooms.
    Plants whose room cannot be resolved are imported unassigned.
    """
    rooms_by_name = {}
    for room in rooms:
        rooms_by_name.setdefault(room.name.lower(), room)
    rooms_by_id = {r.id: r for r in rooms}
    mapped = {m.unmatched_room: m.matched_room_id for m in mappings}

    plants = []
    for item in imported:
        room = rooms_by_name.get(item.room.lower())
        if room is None and mapped.get(item.room) is not None:
            room = rooms_by_id.get(mapped[item.room])
        window = window_for_import(item, room) if room is not None else None
        plants.append(
            imported_plant_to_plant(
                item,
                room_id=room.id if room is not None else None,
                window_id=window.id if window is not None else None,
            )
        )
    return plants
