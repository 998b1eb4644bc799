"""Data store - the single writer for rooms, zones, plants and settings."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone, tzinfo
from typing import AsyncIterator, Optional, List, Sequence, Tuple
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from plantcare.core.config import get_settings
from plantcare.core.exceptions import NotFoundException, BadRequestException
from plantcare.notifications.reminder_service import ReminderService
from plantcare.plants import care_engine
from plantcare.plants.models import CareSession, CareStep, CareStepType, Plant
from plantcare.settings.models import AppSettings
from plantcare.spaces.models import Room, Zone
from plantcare.spaces.resolver import SpaceResolver
from plantcare.store.models import Snapshot, SnapshotMetadata
from plantcare.store.persistence import SnapshotStore

logger = logging.getLogger(__name__)


def get_tzinfo(tz_name: Optional[str]) -> tzinfo:
    if not tz_name:
        return timezone.utc
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {tz_name!r}, falling back to UTC")
        return timezone.utc


def default_watering_step() -> CareStep:
    return CareStep(type=CareStepType.WATERING, instructions="Water when needed", frequency_days=7)


class DataStore:
    """
    In-process store of the app snapshot.

    Entities are values: reads hand out deep copies and every change goes
    through a store method. A change is applied in memory and then the whole
    snapshot is persisted; if persisting fails the in-memory state is rolled
    back and the error propagates, so memory never runs ahead of storage.
    """

    def __init__(
        self,
        persistence: SnapshotStore,
        reminders: Optional[ReminderService] = None,
        tz: Optional[tzinfo] = None,
    ):
        self._persistence = persistence
        self._reminders = reminders
        config = get_settings()
        self.tz = tz or get_tzinfo(config.TIMEZONE)
        self.rooms: List[Room] = []
        self.zones: List[Zone] = []
        self.plants: List[Plant] = []
        self.settings = AppSettings(early_warning_days=config.EARLY_WARNING_DAYS)
        self.current_care_session: Optional[CareSession] = None

    # ==================== Persistence ====================

    async def load(self) -> None:
        """Load the stored snapshot. A missing snapshot leaves the store empty."""
        snapshot = await self._persistence.load()
        if snapshot is None:
            logger.info("No saved snapshot found, starting with an empty store")
            return

        self.rooms = snapshot.rooms
        self.zones = snapshot.zones
        self.plants = snapshot.plants
        self.settings = snapshot.settings
        logger.info(
            f"Loaded {len(self.plants)} plants, {len(self.rooms)} rooms, {len(self.zones)} zones"
        )

        if snapshot.metadata is None:
            async with self._changes():
                self._migrate_legacy_plants()

    def _migrate_legacy_plants(self) -> None:
        """Give plants from unversioned snapshots a default watering step."""
        migrated = 0
        for plant in self.plants:
            if not plant.care_steps:
                plant.add_care_step(default_watering_step())
                migrated += 1
        logger.info(f"Migrated legacy snapshot ({migrated} plants given a watering step)")

    def snapshot(self) -> Snapshot:
        return Snapshot(
            metadata=SnapshotMetadata(
                saved_at=care_engine.resolve_now(tz=self.tz),
                plant_count=len(self.plants),
                room_count=len(self.rooms),
                zone_count=len(self.zones),
            ),
            rooms=[r.model_copy(deep=True) for r in self.rooms],
            zones=[z.model_copy(deep=True) for z in self.zones],
            plants=[p.model_copy(deep=True) for p in self.plants],
            settings=self.settings.model_copy(deep=True),
        )

    async def save(self) -> None:
        await self._persistence.save(self.snapshot())

    @asynccontextmanager
    async def _changes(self) -> AsyncIterator[None]:
        """
        Scope for one mutation.

        The body edits in-memory state; on exit the snapshot is saved. Any
        exception, from the body or from saving, restores the state captured
        on entry before propagating.
        """
        rooms = [r.model_copy(deep=True) for r in self.rooms]
        zones = [z.model_copy(deep=True) for z in self.zones]
        plants = [p.model_copy(deep=True) for p in self.plants]
        settings = self.settings.model_copy(deep=True)
        session = (
            self.current_care_session.model_copy(deep=True)
            if self.current_care_session is not None
            else None
        )
        try:
            yield
            await self.save()
        except Exception:
            self.rooms = rooms
            self.zones = zones
            self.plants = plants
            self.settings = settings
            self.current_care_session = session
            logger.warning("Store change rolled back")
            raise

    async def restore(self, snapshot: Snapshot) -> None:
        """Replace everything with the contents of a backup snapshot."""
        async with self._changes():
            self.rooms = [r.model_copy(deep=True) for r in snapshot.rooms]
            self.zones = [z.model_copy(deep=True) for z in snapshot.zones]
            self.plants = [p.model_copy(deep=True) for p in snapshot.plants]
            self.settings = snapshot.settings.model_copy(deep=True)
            self.current_care_session = None
            if snapshot.metadata is None:
                self._migrate_legacy_plants()
        logger.info(
            f"Restored backup with {len(self.plants)} plants, {len(self.rooms)} rooms, {len(self.zones)} zones"
        )
        await self._refresh_reminders()

    async def _refresh_reminders(self) -> None:
        if self._reminders is not None:
            await self._reminders.update_daily_reminders(self.all_overdue_care_steps())

    @property
    def resolver(self) -> SpaceResolver:
        return SpaceResolver(self.rooms, self.zones, self.plants)

    # ==================== Rooms ====================

    def _room_index(self, room_id: UUID) -> int:
        for index, room in enumerate(self.rooms):
            if room.id == room_id:
                return index
        raise NotFoundException("Room not found")

    def get_room(self, room_id: UUID) -> Room:
        return self.rooms[self._room_index(room_id)].model_copy(deep=True)

    def list_rooms(self) -> List[Room]:
        return [r.model_copy(deep=True) for r in sorted(self.rooms, key=lambda r: r.order_index)]

    def next_room_order_index(self) -> int:
        return max((r.order_index for r in self.rooms), default=-1) + 1

    async def add_room(self, room: Room) -> Room:
        if any(r.id == room.id for r in self.rooms):
            raise BadRequestException("Room already exists")
        async with self._changes():
            self.rooms.append(room.model_copy(deep=True))
        logger.info(f"Added room {room.name} ({room.id})")
        return room

    async def update_room(self, room: Room) -> Room:
        index = self._room_index(room.id)
        async with self._changes():
            self.rooms[index] = room.model_copy(deep=True)
        return room

    async def delete_room(self, room_id: UUID) -> None:
        """Delete a room; its plants become unassigned."""
        index = self._room_index(room_id)
        async with self._changes():
            for plant in self.plants:
                if plant.assigned_room_id == room_id:
                    plant.unassign()
            del self.rooms[index]
            if room_id in self.settings.custom_room_order:
                self.settings.custom_room_order = [i for i in self.settings.custom_room_order if i != room_id]
        logger.info(f"Deleted room {room_id}")

    async def reorder_rooms(self, room_ids: List[UUID]) -> List[Room]:
        """Set manual order; ``room_ids`` must list every room exactly once."""
        if sorted(map(str, room_ids)) != sorted(str(r.id) for r in self.rooms):
            raise BadRequestException("Room order must contain every room exactly once")
        position = {room_id: i for i, room_id in enumerate(room_ids)}
        async with self._changes():
            for room in self.rooms:
                room.order_index = position[room.id]
            self.rooms.sort(key=lambda r: r.order_index)
        return self.list_rooms()

    # ==================== Zones ====================

    def _zone_index(self, zone_id: UUID) -> int:
        for index, zone in enumerate(self.zones):
            if zone.id == zone_id:
                return index
        raise NotFoundException("Zone not found")

    def get_zone(self, zone_id: UUID) -> Zone:
        return self.zones[self._zone_index(zone_id)].model_copy(deep=True)

    def list_zones(self) -> List[Zone]:
        return [z.model_copy(deep=True) for z in sorted(self.zones, key=lambda z: z.order_index)]

    def next_zone_order_index(self) -> int:
        return max((z.order_index for z in self.zones), default=-1) + 1

    async def add_zone(self, zone: Zone) -> Zone:
        if any(z.id == zone.id for z in self.zones):
            raise BadRequestException("Zone already exists")
        async with self._changes():
            self.zones.append(zone.model_copy(deep=True))
        logger.info(f"Added zone {zone.name} ({zone.id})")
        return zone

    async def update_zone(self, zone: Zone) -> Zone:
        index = self._zone_index(zone.id)
        async with self._changes():
            self.zones[index] = zone.model_copy(deep=True)
        return zone

    async def delete_zone(self, zone_id: UUID) -> None:
        """Delete a zone; its plants become unassigned."""
        index = self._zone_index(zone_id)
        async with self._changes():
            for plant in self.plants:
                if plant.assigned_zone_id == zone_id:
                    plant.unassign()
            del self.zones[index]
        logger.info(f"Deleted zone {zone_id}")

    async def reorder_zones(self, zone_ids: List[UUID]) -> List[Zone]:
        if sorted(map(str, zone_ids)) != sorted(str(z.id) for z in self.zones):
            raise BadRequestException("Zone order must contain every zone exactly once")
        position = {zone_id: i for i, zone_id in enumerate(zone_ids)}
        async with self._changes():
            for zone in self.zones:
                zone.order_index = position[zone.id]
            self.zones.sort(key=lambda z: z.order_index)
        return self.list_zones()

    # ==================== Plants ====================

    def _plant_index(self, plant_id: UUID) -> int:
        for index, plant in enumerate(self.plants):
            if plant.id == plant_id:
                return index
        raise NotFoundException("Plant not found")

    def _plant(self, plant_id: UUID) -> Plant:
        return self.plants[self._plant_index(plant_id)]

    def get_plant(self, plant_id: UUID) -> Plant:
        return self._plant(plant_id).model_copy(deep=True)

    def list_plants(self) -> List[Plant]:
        return [p.model_copy(deep=True) for p in self.plants]

    async def add_plant(self, plant: Plant) -> Plant:
        if any(p.id == plant.id for p in self.plants):
            raise BadRequestException("Plant already exists")
        async with self._changes():
            self.plants.append(plant.model_copy(deep=True))
        await self._refresh_reminders()
        logger.info(f"Added plant {plant.name} ({plant.id})")
        return plant

    async def import_plants(self, plants: List[Plant], new_rooms: Sequence[Room] = ()) -> List[Plant]:
        """Add rooms and plants with a single save; all or nothing."""
        known_rooms = {r.id for r in self.rooms}
        if any(room.id in known_rooms for room in new_rooms):
            raise BadRequestException("Room already exists")
        known = {p.id for p in self.plants}
        for plant in plants:
            if plant.id in known:
                raise BadRequestException("Plant already exists")
            known.add(plant.id)
        async with self._changes():
            self.rooms.extend(r.model_copy(deep=True) for r in new_rooms)
            self.plants.extend(p.model_copy(deep=True) for p in plants)
        await self._refresh_reminders()
        logger.info(f"Imported {len(plants)} plants and {len(new_rooms)} new rooms")
        return plants

    async def update_plant(self, plant: Plant) -> Plant:
        index = self._plant_index(plant.id)
        async with self._changes():
            self.plants[index] = plant.model_copy(deep=True)
        await self._refresh_reminders()
        return plant

    async def update_plants(self, plants: List[Plant]) -> List[Plant]:
        """Replace several plants with a single save."""
        indexes = [self._plant_index(p.id) for p in plants]
        async with self._changes():
            for index, plant in zip(indexes, plants):
                self.plants[index] = plant.model_copy(deep=True)
        await self._refresh_reminders()
        return plants

    async def delete_plant(self, plant_id: UUID) -> None:
        index = self._plant_index(plant_id)
        async with self._changes():
            del self.plants[index]
        await self._refresh_reminders()
        logger.info(f"Deleted plant {plant_id}")

    async def move_plant(
        self,
        plant_id: UUID,
        room_id: Optional[UUID] = None,
        window_id: Optional[UUID] = None,
        zone_id: Optional[UUID] = None,
    ) -> Plant:
        """Place a plant in a room (optionally at a window), a zone, or nowhere."""
        if room_id is not None and zone_id is not None:
            raise BadRequestException("A plant cannot be in a room and a zone at once")
        if window_id is not None and room_id is None:
            raise BadRequestException("A window requires its room")

        self._plant_index(plant_id)
        if room_id is not None:
            room = self.rooms[self._room_index(room_id)]
            if window_id is not None and room.get_window(window_id) is None:
                raise NotFoundException("Window not found in room")
        elif zone_id is not None:
            self._zone_index(zone_id)

        async with self._changes():
            plant = self._plant(plant_id)
            if room_id is not None:
                plant.assign_to_room(room_id, window_id)
            elif zone_id is not None:
                plant.assign_to_zone(zone_id)
            else:
                plant.unassign()
        return self.get_plant(plant_id)

    # ==================== Care Steps ====================

    def _care_step(self, plant: Plant, care_step_id: UUID) -> CareStep:
        step = plant.get_care_step(care_step_id)
        if step is None:
            raise NotFoundException("Care step not found")
        return step

    async def add_care_step(self, plant_id: UUID, care_step: CareStep) -> Plant:
        self._plant_index(plant_id)
        try:
            async with self._changes():
                self._plant(plant_id).add_care_step(care_step.model_copy(deep=True))
        except ValueError as e:
            raise BadRequestException(str(e))
        await self._refresh_reminders()
        return self.get_plant(plant_id)

    async def update_care_step(self, plant_id: UUID, care_step: CareStep) -> Plant:
        self._care_step(self._plant(plant_id), care_step.id)
        async with self._changes():
            self._plant(plant_id).update_care_step(care_step.model_copy(deep=True))
        await self._refresh_reminders()
        return self.get_plant(plant_id)

    async def remove_care_step(self, plant_id: UUID, care_step_id: UUID) -> Plant:
        self._care_step(self._plant(plant_id), care_step_id)
        async with self._changes():
            self._plant(plant_id).remove_care_step(care_step_id)
        await self._refresh_reminders()
        return self.get_plant(plant_id)

    async def mark_care_step_completed(
        self, plant_id: UUID, care_step_id: UUID, date: Optional[datetime] = None
    ) -> Plant:
        """Set the step's last completion (now by default) and persist immediately."""
        self._care_step(self._plant(plant_id), care_step_id)
        date = date or care_engine.resolve_now(tz=self.tz)
        async with self._changes():
            if self.current_care_session is not None:
                self.current_care_session.mark_care_step_completed(plant_id, care_step_id, date)
            self._plant(plant_id).mark_care_step_completed(care_step_id, date)
        await self._refresh_reminders()
        return self.get_plant(plant_id)

    async def unmark_care_step_completed(self, plant_id: UUID, care_step_id: UUID) -> Plant:
        """
        Undo a completion toggled during a routine.

        The step is reset to "never completed"; the completion it had before
        the routine is not restored.
        """
        self._care_step(self._plant(plant_id), care_step_id)
        async with self._changes():
            if self.current_care_session is not None:
                self.current_care_session.unmark_care_step_completed(plant_id, care_step_id)
            self._plant(plant_id).unmark_care_step_completed(care_step_id)
        await self._refresh_reminders()
        return self.get_plant(plant_id)

    # ==================== Care Session ====================

    def start_care_session(self) -> CareSession:
        self.current_care_session = CareSession(date=care_engine.resolve_now(tz=self.tz))
        return self.current_care_session

    def end_care_session(self) -> None:
        self.current_care_session = None

    # ==================== Due-date Queries ====================

    def all_overdue_care_steps(self, now: Optional[datetime] = None) -> List[Tuple[Plant, CareStep]]:
        now = care_engine.resolve_now(now, self.tz)
        return [
            (plant, step)
            for plant in self.plants
            for step in plant.overdue_care_steps(now, self.tz)
        ]

    def all_due_today_care_steps(self, now: Optional[datetime] = None) -> List[Tuple[Plant, CareStep]]:
        now = care_engine.resolve_now(now, self.tz)
        return [
            (plant, step)
            for plant in self.plants
            for step in plant.due_today_care_steps(now, self.tz)
        ]

    def plants_needing_care(self, now: Optional[datetime] = None) -> List[Plant]:
        now = care_engine.resolve_now(now, self.tz)
        return [
            plant for plant in self.plants
            if plant.overdue_care_steps(now, self.tz) or plant.due_today_care_steps(now, self.tz)
        ]

    # ==================== Routine Order ====================

    def ordered_rooms_for_care_routine(self) -> List[Room]:
        """
        Occupied rooms in routine order.

        A custom room order from settings comes first; rooms it does not list
        follow by order index.
        """
        resolver = self.resolver
        occupied = [r for r in self.rooms if resolver.plants_in_room(r)]
        by_index = sorted(occupied, key=lambda r: r.order_index)
        if not self.settings.custom_room_order:
            return by_index

        rooms_by_id = {r.id: r for r in occupied}
        ordered: List[Room] = []
        for room_id in self.settings.custom_room_order:
            room = rooms_by_id.pop(room_id, None)
            if room is not None:
                ordered.append(room)
        ordered.extend(r for r in by_index if r.id in rooms_by_id)
        return ordered

    def ordered_zones_for_care_routine(self) -> List[Zone]:
        resolver = self.resolver
        occupied = [z for z in self.zones if resolver.plants_in_zone(z)]
        return sorted(occupied, key=lambda z: z.order_index)

    # ==================== Settings ====================

    async def update_settings(self, settings: AppSettings) -> AppSettings:
        async with self._changes():
            self.settings = settings.model_copy(deep=True)
        return self.settings.model_copy(deep=True)


async def transfer_snapshot(source: SnapshotStore, target: SnapshotStore) -> Optional[Snapshot]:
    """
    Copy the snapshot held by ``source`` into ``target``.

    Unversioned snapshots are migrated on the way. Only ``target`` is
    written; returns the copied snapshot, or None when ``source`` is empty.
    """
    snapshot = await source.load()
    if snapshot is None:
        return None
    store = DataStore(target)
    await store.restore(snapshot)
    return store.snapshot()
