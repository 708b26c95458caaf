"""State management for the schedule store.

Contains the storage backend protocol and dependency injection.
"""
import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Protocol


class ScheduleBackend(Protocol):
    """Protocol for whole-collection schedule persistence.

    ``load`` returns the full list of serialized entries in insertion order.
    ``save`` replaces the full list. Both raise ``PersistenceError`` on
    failure.
    """

    async def load(self) -> list[dict[str, Any]]:
        """Read every persisted entry."""
        ...

    async def save(self, entries: list[dict[str, Any]]) -> None:
        """Replace the persisted collection."""
        ...


def new_entry_id() -> str:
    """Random 128-bit identifier."""
    return str(uuid.uuid4())


@dataclass
class ScheduleStoreDeps:
    """Dependencies for the schedule store.

    Swapping these lets tests supply deterministic ids and a fixed clock.
    """
    backend: ScheduleBackend
    id_factory: Callable[[], str] = new_entry_id
    clock: Callable[[], datetime] = datetime.now


@dataclass
class ScheduleStoreState:
    """Runtime state of the schedule store."""
    # Serialises read-modify-write cycles within one process
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    load_failures: int = 0
