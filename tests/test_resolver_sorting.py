"""
tests/test_resolver_sorting.py - Tests for space membership and list sorting.

Tests cover:
- Room/zone/window lookups, including dangling foreign keys
- Space membership and the "Unassigned" name
- Plant and space sort options
"""

from uuid import uuid4

from plantcare.plants.models import Plant
from plantcare.spaces.models import Room, SunHours, SunPeriod, Window, Zone, ZoneAspect
from plantcare.spaces.resolver import UNASSIGNED, SpaceResolver
from plantcare.spaces.sorting import PlantsSortOption, SpacesSortOption, sort_plants, sort_spaces
from tests.conftest import NOW, days_ago, watering


def test_lookups_by_foreign_key(living_room, balcony):
    window = living_room.windows[0]
    indoor = Plant(name="Fern", assigned_room_id=living_room.id, assigned_window_id=window.id)
    outdoor = Plant(name="Rosemary", assigned_zone_id=balcony.id)
    resolver = SpaceResolver([living_room], [balcony], [indoor, outdoor])

    assert resolver.room_for_plant(indoor) == living_room
    assert resolver.window_for_plant(indoor) == window
    assert resolver.zone_for_plant(indoor) is None
    assert resolver.zone_for_plant(outdoor) == balcony
    assert resolver.space_name_for_plant(indoor) == "Living Room"
    assert resolver.space_name_for_plant(outdoor) == "Balcony"


def test_dangling_keys_resolve_to_none(living_room):
    ghost_room = Plant(name="Fern", assigned_room_id=uuid4(), assigned_window_id=uuid4())
    ghost_zone = Plant(name="Mint", assigned_zone_id=uuid4())
    ghost_window = Plant(
        name="Ivy", assigned_room_id=living_room.id, assigned_window_id=uuid4()
    )
    resolver = SpaceResolver([living_room], [], [ghost_room, ghost_zone, ghost_window])

    assert resolver.room_for_plant(ghost_room) is None
    assert resolver.window_for_plant(ghost_room) is None
    assert resolver.zone_for_plant(ghost_zone) is None
    assert resolver.window_for_plant(ghost_window) is None
    assert resolver.space_name_for_plant(ghost_room) == UNASSIGNED
    assert resolver.unassigned_plants() == [ghost_room, ghost_zone]


def test_membership_keeps_input_order(living_room, bedroom, balcony):
    a = Plant(name="B plant", assigned_room_id=living_room.id)
    b = Plant(name="A plant", assigned_room_id=living_room.id)
    c = Plant(name="Tomato", assigned_zone_id=balcony.id)
    resolver = SpaceResolver([living_room, bedroom], [balcony], [a, b, c])

    assert resolver.plants_in_room(living_room) == [a, b]
    assert resolver.plants_in_room(bedroom) == []
    assert resolver.plants_in_space(balcony) == [c]


def test_sort_plants_by_name_ignores_case():
    plants = [Plant(name="monstera"), Plant(name="Aloe"), Plant(name="basil")]
    resolver = SpaceResolver([], [], plants)

    ascending = sort_plants(plants, PlantsSortOption.NAME_ASCENDING, resolver, NOW)
    assert [p.name for p in ascending] == ["Aloe", "basil", "monstera"]

    descending = sort_plants(plants, PlantsSortOption.NAME_DESCENDING, resolver, NOW)
    assert [p.name for p in descending] == ["monstera", "basil", "Aloe"]


def test_sort_plants_by_watering_due():
    soon = Plant(name="Soon", care_steps=[watering(last_completed=days_ago(6))])
    later = Plant(name="Later", care_steps=[watering(last_completed=days_ago(1))])
    no_water = Plant(name="Dry", care_steps=[])
    plants = [later, no_water, soon]
    resolver = SpaceResolver([], [], plants)

    next_due = sort_plants(plants, PlantsSortOption.NEXT_WATERING_DUE, resolver, NOW)
    assert [p.name for p in next_due] == ["Soon", "Later", "Dry"]

    last_due = sort_plants(plants, PlantsSortOption.LAST_WATERING_DUE, resolver, NOW)
    assert [p.name for p in last_due] == ["Later", "Soon", "Dry"]


def test_sort_by_watering_due_skips_disabled_watering_steps():
    paused_then_active = Plant(
        name="Paused",
        care_steps=[
            watering(last_completed=days_ago(30), is_enabled=False),
            watering(last_completed=days_ago(1)),
        ],
    )
    only_paused = Plant(name="Off", care_steps=[watering(last_completed=days_ago(30), is_enabled=False)])
    soon = Plant(name="Soon", care_steps=[watering(last_completed=days_ago(5))])
    plants = [only_paused, paused_then_active, soon]
    resolver = SpaceResolver([], [], plants)

    next_due = sort_plants(plants, PlantsSortOption.NEXT_WATERING_DUE, resolver, NOW)
    assert [p.name for p in next_due] == ["Soon", "Paused", "Off"]
    assert only_paused.watering_step is None


def test_sort_plants_grouped_by_space(living_room, balcony):
    plants = [
        Plant(name="Zebra", assigned_room_id=living_room.id),
        Plant(name="Chives", assigned_zone_id=balcony.id),
        Plant(name="Orphan"),
        Plant(name="Alocasia", assigned_room_id=living_room.id),
    ]
    resolver = SpaceResolver([living_room], [balcony], plants)

    grouped = sort_plants(plants, PlantsSortOption.GROUP_BY_SPACE_ASCENDING, resolver, NOW)
    assert [p.name for p in grouped] == ["Chives", "Alocasia", "Zebra", "Orphan"]

    grouped = sort_plants(plants, PlantsSortOption.GROUP_BY_SPACE_DESCENDING, resolver, NOW)
    assert [p.name for p in grouped] == ["Orphan", "Alocasia", "Zebra", "Chives"]


def test_sort_spaces(living_room, bedroom, balcony):
    plants = [
        Plant(name="A", assigned_room_id=bedroom.id),
        Plant(name="B", assigned_room_id=bedroom.id),
        Plant(name="C", assigned_zone_id=balcony.id),
    ]
    spaces = [living_room, bedroom, balcony]
    resolver = SpaceResolver([living_room, bedroom], [balcony], plants)

    by_name = sort_spaces(spaces, SpacesSortOption.NAME_ASCENDING, resolver)
    assert [s.name for s in by_name] == ["Balcony", "Bedroom", "Living Room"]

    most = sort_spaces(spaces, SpacesSortOption.MOST_PLANTS, resolver)
    assert [s.name for s in most] == ["Bedroom", "Balcony", "Living Room"]

    fewest = sort_spaces(spaces, SpacesSortOption.FEWEST_PLANTS, resolver)
    assert [s.name for s in fewest] == ["Living Room", "Balcony", "Bedroom"]


def test_zone_sun_hours_inference():
    assert Zone(name="N", aspect=ZoneAspect.NORTH_WALL).inferred_sun_hours == SunHours.ZERO_TO_TWO
    assert Zone(name="S", aspect=ZoneAspect.SOUTH_WALL).inferred_sun_hours == SunHours.SIX_PLUS
    assert (
        Zone(name="E", aspect=ZoneAspect.EAST_WALL, sun_period=SunPeriod.AM).inferred_sun_hours
        == SunHours.TWO_TO_FOUR
    )
    assert Zone(name="O", sun_period=SunPeriod.PM).inferred_sun_hours == SunHours.FOUR_TO_SIX
    explicit = Zone(name="X", aspect=ZoneAspect.NORTH_WALL, sun_hours=SunHours.SIX_PLUS)
    assert explicit.inferred_sun_hours == SunHours.SIX_PLUS


def test_room_window_lookup():
    window = Window(direction="North")
    room = Room(name="Office", windows=[window])
    assert room.get_window(window.id) == window
    assert room.get_window(uuid4()) is None
