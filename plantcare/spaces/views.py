"""Rooms and outdoor zones API routes."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from plantcare.core.dependencies import get_store
from plantcare.plants.models import Plant
from plantcare.spaces.models import (
    Room,
    RoomCreate,
    RoomUpdate,
    SpaceOrder,
    SpaceSummary,
    Window,
    Zone,
    ZoneCreate,
    ZoneUpdate,
    is_indoor,
)
from plantcare.spaces.sorting import SpacesSortOption, sort_spaces
from plantcare.store.data_store import DataStore


router = APIRouter(prefix="/spaces", tags=["Spaces"])


@router.get("", response_model=List[SpaceSummary])
async def list_spaces(
    sort: Optional[SpacesSortOption] = Query(default=None),
    store: DataStore = Depends(get_store),
):
    """Rooms then zones with their plant counts, optionally sorted."""
    resolver = store.resolver
    spaces = [*store.list_rooms(), *store.list_zones()]
    if sort is not None:
        spaces = sort_spaces(spaces, sort, resolver)
    return [
        SpaceSummary(
            id=space.id,
            name=space.name,
            kind="indoor" if is_indoor(space) else "outdoor",
            plant_count=len(resolver.plants_in_space(space)),
            order_index=space.order_index,
        )
        for space in spaces
    ]


@router.get("/unassigned/plants", response_model=List[Plant])
async def list_unassigned_plants(store: DataStore = Depends(get_store)):
    return store.resolver.unassigned_plants()


# ==================== Rooms ====================


@router.get("/rooms", response_model=List[Room])
async def list_rooms(store: DataStore = Depends(get_store)):
    return store.list_rooms()


@router.post("/rooms", response_model=Room, status_code=status.HTTP_201_CREATED)
async def create_room(room_data: RoomCreate, store: DataStore = Depends(get_store)):
    """Add a room at the end of the room order."""
    room = Room(
        name=room_data.name,
        windows=[Window(**w.model_dump()) for w in room_data.windows],
        order_index=store.next_room_order_index(),
    )
    return await store.add_room(room)


@router.post("/rooms/order", response_model=List[Room])
async def reorder_rooms(order: SpaceOrder, store: DataStore = Depends(get_store)):
    return await store.reorder_rooms(order.ids)


@router.get("/rooms/{room_id}", response_model=Room)
async def get_room(room_id: UUID, store: DataStore = Depends(get_store)):
    return store.get_room(room_id)


@router.put("/rooms/{room_id}", response_model=Room)
async def update_room(room_id: UUID, updates: RoomUpdate, store: DataStore = Depends(get_store)):
    """
    Rename a room or replace its windows.

    Plants sitting at a window that is no longer listed keep their room but
    lose the window.
    """
    room = store.get_room(room_id)
    if updates.name is not None:
        room.name = updates.name
    if updates.windows is not None:
        room.windows = updates.windows
        window_ids = {w.id for w in room.windows}
        for plant in store.resolver.plants_in_room(room):
            if plant.assigned_window_id is not None and plant.assigned_window_id not in window_ids:
                await store.move_plant(plant.id, room_id=room.id)
    return await store.update_room(room)


@router.delete("/rooms/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room(room_id: UUID, store: DataStore = Depends(get_store)):
    """Delete a room. Its plants become unassigned."""
    await store.delete_room(room_id)


@router.get("/rooms/{room_id}/plants", response_model=List[Plant])
async def list_room_plants(room_id: UUID, store: DataStore = Depends(get_store)):
    room = store.get_room(room_id)
    return store.resolver.plants_in_room(room)


# ==================== Zones ====================


@router.get("/zones", response_model=List[Zone])
async def list_zones(store: DataStore = Depends(get_store)):
    return store.list_zones()


@router.post("/zones", response_model=Zone, status_code=status.HTTP_201_CREATED)
async def create_zone(zone_data: ZoneCreate, store: DataStore = Depends(get_store)):
    zone = Zone(**zone_data.model_dump(), order_index=store.next_zone_order_index())
    return await store.add_zone(zone)


@router.post("/zones/order", response_model=List[Zone])
async def reorder_zones(order: SpaceOrder, store: DataStore = Depends(get_store)):
    return await store.reorder_zones(order.ids)


@router.get("/zones/{zone_id}", response_model=Zone)
async def get_zone(zone_id: UUID, store: DataStore = Depends(get_store)):
    return store.get_zone(zone_id)


@router.put("/zones/{zone_id}", response_model=Zone)
async def update_zone(zone_id: UUID, updates: ZoneUpdate, store: DataStore = Depends(get_store)):
    """Update zone attributes. An explicit null sun_hours goes back to the inferred value."""
    zone = store.get_zone(zone_id)
    for field, value in updates.model_dump(exclude_unset=True).items():
        if value is None and field != "sun_hours":
            continue
        setattr(zone, field, value)
    return await store.update_zone(zone)


@router.delete("/zones/{zone_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_zone(zone_id: UUID, store: DataStore = Depends(get_store)):
    """Delete a zone. Its plants become unassigned."""
    await store.delete_zone(zone_id)


@router.get("/zones/{zone_id}/plants", response_model=List[Plant])
async def list_zone_plants(zone_id: UUID, store: DataStore = Depends(get_store)):
    zone = store.get_zone(zone_id)
    return store.resolver.plants_in_zone(zone)
