"""Shared fixtures: an in-memory snapshot store, a data store and an API client."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from plantcare.main import create_app
from plantcare.notifications.reminder_service import LoggingReminderScheduler, ReminderService
from plantcare.plants.models import CareStep, CareStepType, Direction, Plant
from plantcare.spaces.models import Room, Window, Zone
from plantcare.store.data_store import DataStore
from plantcare.store.persistence import SnapshotStore


NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def days_ago(days: int, now: datetime = NOW) -> datetime:
    return now - timedelta(days=days)


class MemorySnapshotStore(SnapshotStore):
    """Keeps the last saved snapshot in memory. Set ``fail_with`` to make saves raise."""

    def __init__(self, snapshot=None):
        self.snapshot = snapshot
        self.save_count = 0
        self.fail_with = None

    async def load(self):
        return self.snapshot

    async def save(self, snapshot):
        if self.fail_with is not None:
            raise self.fail_with
        self.snapshot = snapshot
        self.save_count += 1


def watering(frequency_days: int = 7, last_completed=None, **kwargs) -> CareStep:
    return CareStep(
        type=CareStepType.WATERING,
        frequency_days=frequency_days,
        last_completed_date=last_completed,
        **kwargs,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def persistence():
    return MemorySnapshotStore()


@pytest.fixture
def scheduler():
    return LoggingReminderScheduler()


@pytest.fixture
def store(persistence, scheduler):
    return DataStore(persistence, ReminderService(scheduler), tz=timezone.utc)


@pytest.fixture
def living_room():
    return Room(name="Living Room", windows=[Window(direction=Direction.SOUTH)], order_index=0)


@pytest.fixture
def bedroom():
    return Room(name="Bedroom", order_index=1)


@pytest.fixture
def balcony():
    return Zone(name="Balcony", order_index=0)


@pytest.fixture
def client(store):
    app = create_app(store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_plant():
    def _make_plant(name="Monstera", steps=None, **kwargs) -> Plant:
        return Plant(name=name, care_steps=steps if steps is not None else [watering()], **kwargs)
    return _make_plant
