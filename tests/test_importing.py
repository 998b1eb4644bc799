"""
tests/test_importing.py - Tests for bulk plant import.

Tests cover:
- Light, direction and humidity mapping from free text
- Watering and rotation frequency estimates
- Room matching, room mappings and window choice
"""

import pytest

from plantcare.ai.importing import (
    ImportedPlant,
    RoomMapping,
    estimate_humidity_preference,
    estimate_watering_frequency,
    imported_plant_to_plant,
    parse_preferred_direction,
    plants_from_import,
    rooms_to_create,
    rotation_step,
    unmatched_room_names,
)
from plantcare.plants.models import CareStepType, Direction, HumidityPreference, LightType
from plantcare.spaces.models import Room, Window


def imported(name="Pothos", room="Living Room", **fields):
    return ImportedPlant(name=name, room=room, **fields)


@pytest.mark.parametrize(
    "instructions, light, expected",
    [
        ("Water daily in summer", "direct", 1),
        ("Water every other day", "low", 2),
        ("Water twice a week", "indirect", 3),
        ("Water once a week", "low", 7),
        ("Water every two weeks", "direct", 14),
        ("Water every 3 weeks", "direct", 21),
        ("Water monthly", "direct", 30),
        ("When the top inch is dry", "direct", 7),
        ("When the top inch is dry", "Indirect", 10),
        ("When the top inch is dry", "low", 14),
        ("When the top inch is dry", "", 10),
    ],
)
def test_watering_frequency_estimate(instructions, light, expected):
    assert estimate_watering_frequency(instructions, light) == expected


def test_humidity_from_notes():
    assert estimate_humidity_preference("Mist the leaves often") == HumidityPreference.HIGH
    assert estimate_humidity_preference("Prefers dry air") == HumidityPreference.LOW
    assert estimate_humidity_preference("Easy going") == HumidityPreference.MEDIUM


def test_rotation_only_when_mentioned():
    assert rotation_step("Feed in spring") is None

    weekly = rotation_step("Rotate weekly toward the light")
    assert (weekly.type, weekly.frequency_days) == (CareStepType.ROTATION, 7)
    assert weekly.instructions == "Rotate weekly for even growth"

    assert rotation_step("Rotate every month").frequency_days == 30
    periodic = rotation_step("Rotate now and then")
    assert periodic.frequency_days == 14
    assert periodic.instructions == "Rotate periodically for even growth"


def test_preferred_direction_handles_combined_answers():
    assert parse_preferred_direction("East or Southeast") == Direction.EAST
    assert parse_preferred_direction("southeast or southwest") == Direction.SOUTHWEST
    assert parse_preferred_direction("somewhere bright") == Direction.EAST


def test_imported_plant_to_plant():
    plant = imported_plant_to_plant(
        imported(
            lightType="low",
            preferredLightDirection="north",
            wateringInstructions="Water every 2 weeks",
            careNotes="Likes high humidity, rotate monthly",
        )
    )

    assert plant.light_type == LightType.LOW
    assert plant.preferred_light_direction == Direction.NORTH
    assert plant.humidity_preference == HumidityPreference.HIGH
    assert plant.general_notes == "Likes high humidity, rotate monthly"
    assert [(s.type, s.frequency_days) for s in plant.care_steps] == [
        (CareStepType.WATERING, 14),
        (CareStepType.ROTATION, 30),
    ]
    assert plant.care_steps[0].instructions == "Water every 2 weeks"
    assert plant.assigned_room_id is None


def test_unmatched_rooms_ignore_case_and_blanks():
    rooms = [Room(name="Living Room")]
    plants = [imported(room="living room"), imported(room="Office"), imported(room="Office"), imported(room=" ")]

    assert unmatched_room_names(plants, rooms) == ["Office"]


def test_plants_follow_rooms_and_mappings():
    south = Window(direction=Direction.SOUTH)
    east = Window(direction=Direction.EAST)
    living = Room(name="Living Room", windows=[south, east])
    study = Room(name="Study")
    mappings = [
        RoomMapping(unmatched_room="Lounge", matched_room_id=living.id),
        RoomMapping(unmatched_room="Sunroom", create_new=True),
        RoomMapping(unmatched_room="Garage"),
    ]
    created = rooms_to_create(mappings, next_order_index=2)
    assert list(created) == ["Sunroom"]
    assert created["Sunroom"].order_index == 2
    assert created["Sunroom"].windows[0].direction == Direction.NORTH

    plants = plants_from_import(
        [
            imported("A", room="LIVING ROOM", windowDirection="east"),
            imported("B", room="Lounge", windowDirection="west"),
            imported("C", room="Sunroom"),
            imported("D", room="Garage"),
            imported("E", room="Study"),
        ],
        [living, study, *created.values()],
        mappings,
    )

    a, b, c, d, e = plants
    assert (a.assigned_room_id, a.assigned_window_id) == (living.id, east.id)
    assert (b.assigned_room_id, b.assigned_window_id) == (living.id, south.id)
    assert (c.assigned_room_id, c.assigned_window_id) == (created["Sunroom"].id, created["Sunroom"].windows[0].id)
    assert (d.assigned_room_id, d.assigned_window_id) == (None, None)
    assert (e.assigned_room_id, e.assigned_window_id) == (study.id, None)
