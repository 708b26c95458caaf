import itertools
from datetime import datetime, timedelta

import pytest

from roastledger.schedule import (
    InMemoryScheduleBackend,
    PersistenceError,
    ScheduleEntryRequest,
    ScheduleStore,
)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FlakyBackend(InMemoryScheduleBackend):
    """In-memory backend whose reads and writes can be made to fail."""

    def __init__(self, entries=None):
        super().__init__(entries)
        self.fail_load = False
        self.fail_save = False

    async def load(self):
        if self.fail_load:
            raise PersistenceError("storage unreadable")
        return await super().load()

    async def save(self, entries):
        if self.fail_save:
            raise PersistenceError("disk full")
        await super().save(entries)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 1, 8, 9, 30))


@pytest.fixture
def ids():
    counter = itertools.count(1)
    return lambda: f"entry-{next(counter)}"


@pytest.fixture
def backend():
    return FlakyBackend()


@pytest.fixture
def store(backend, clock, ids):
    return ScheduleStore(backend, id_factory=ids, clock=clock)


@pytest.fixture
def make_request():
    def _make(**overrides) -> ScheduleEntryRequest:
        fields = {
            "coffee_name": "Yirgacheffe Light",
            "green_coffee_name": "Ethiopia Yirgacheffe",
            "scheduled_date": "2025-01-10",
            "green_weight": 220,
            "target_roast_level": "light",
            "equipment_id": "sr800",
        }
        fields.update(overrides)
        return ScheduleEntryRequest(**fields)

    return _make
