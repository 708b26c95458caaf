"""Main Schedule Store class.

This is the unified entry point for all roast schedule operations.
Supports:
- Injected storage backend (JSON file, in-memory)
- Injected id factory and clock
- Fail-open reads, fail-closed writes
"""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable

from loguru import logger

from ..dates import to_local_naive
from ..errors import NotFoundError
from ..models import ScheduledRoast, ScheduleEntryRequest, SchedulePatch
from ..types import ScheduleEvent, ScheduleSummary, UPCOMING_WINDOW_DAYS
from .events import EventEmitter
from .json_store import JsonScheduleBackend
from .state import ScheduleBackend, ScheduleStoreDeps, ScheduleStoreState, new_entry_id
from . import ops

logger = logger.bind(module="schedule.store")


class ScheduleStore:
    """Authoritative collection of scheduled roasts.

    The backend holds the only copy of the collection. Every operation
    reloads it, so derived views are always recomputed from persisted state.

    Read failures are logged and treated as an empty collection so the
    caller can keep rendering. Write failures raise ``PersistenceError``
    so the caller knows the mutation is not durable.
    """

    def __init__(
        self,
        backend: ScheduleBackend,
        id_factory: Callable[[], str] = new_entry_id,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize schedule store.

        Args:
            backend: Whole-collection storage backend
            id_factory: Generates a new unique entry id
            clock: Returns the current time
        """
        self.deps = ScheduleStoreDeps(backend=backend, id_factory=id_factory, clock=clock)
        self.state = ScheduleStoreState()
        self.events = EventEmitter()

    @classmethod
    def from_json_file(cls, json_path: str | Path, **kwargs: Any) -> "ScheduleStore":
        """Create a store persisted to a JSON file."""
        backend = JsonScheduleBackend(json_path)
        logger.info(f"Schedule store using {backend.json_path}")
        return cls(backend, **kwargs)

    def _now(self, now: datetime | None) -> datetime:
        return to_local_naive(now if now is not None else self.deps.clock())

    # ============== Mutations ==============

    async def create(self, request: ScheduleEntryRequest) -> ScheduledRoast:
        """Schedule a new roast.

        Args:
            request: Roast to schedule

        Returns:
            The durably saved entry

        Raises:
            ValidationError: If the request is malformed
            PersistenceError: If the collection could not be saved
        """
        async with self.state.lock:
            created = await ops.create_entries(self.deps, self.state, self.events, [request])
        return created[0]

    async def create_many(self, requests: Iterable[ScheduleEntryRequest]) -> list[ScheduledRoast]:
        """Schedule several roasts in a single write.

        All requests are validated before anything is saved.
        """
        async with self.state.lock:
            return await ops.create_entries(self.deps, self.state, self.events, requests)

    async def update(self, entry_id: str, patch: SchedulePatch) -> ScheduledRoast:
        """Update fields of a scheduled roast.

        Args:
            entry_id: ID of entry to update
            patch: Fields to overwrite

        Returns:
            Updated entry

        Raises:
            NotFoundError: If no entry has this id
            ValidationError: If a patched field is malformed
            PersistenceError: If the collection could not be saved
        """
        async with self.state.lock:
            return await ops.update_entry(self.deps, self.state, self.events, entry_id, patch)

    async def complete(
        self,
        entry_id: str,
        outcome: dict[str, Any] | None = None,
    ) -> ScheduledRoast:
        """Mark a scheduled roast as completed.

        Args:
            entry_id: ID of entry to complete
            outcome: Roast results, passed on to event handlers

        Returns:
            Completed entry
        """
        async with self.state.lock:
            return await ops.complete_entry(self.deps, self.state, self.events, entry_id, outcome)

    async def delete(self, entry_id: str) -> None:
        """Delete a scheduled roast.

        Raises:
            NotFoundError: If no entry has this id
            PersistenceError: If the collection could not be saved
        """
        async with self.state.lock:
            await ops.delete_entry(self.deps, self.state, self.events, entry_id)

    # ============== Queries ==============

    async def get(self, entry_id: str) -> ScheduledRoast:
        """Get an entry by ID.

        Raises:
            NotFoundError: If no entry has this id
        """
        entries = await ops.load_entries(self.deps, self.state)
        for entry in entries:
            if entry.id == entry_id:
                return entry
        raise NotFoundError(entry_id)

    async def list(self) -> list[ScheduledRoast]:
        """Every entry, ascending by scheduled date."""
        entries = await ops.load_entries(self.deps, self.state)
        return ops.sort_entries(entries)

    async def upcoming(
        self,
        now: datetime | None = None,
        days: int = UPCOMING_WINDOW_DAYS,
    ) -> list[ScheduledRoast]:
        """Incomplete entries scheduled between now and now + days."""
        return ops.filter_upcoming(await self.list(), self._now(now), days)

    async def overdue(self, now: datetime | None = None) -> list[ScheduledRoast]:
        """Incomplete entries scheduled before the start of today."""
        return ops.filter_overdue(await self.list(), self._now(now))

    async def summary(
        self,
        now: datetime | None = None,
        days: int = UPCOMING_WINDOW_DAYS,
    ) -> ScheduleSummary:
        """Dashboard counts for the whole schedule."""
        return ops.summarize(await self.list(), self._now(now), days)

    # ============== Event Handling ==============

    def on_event(self, handler: Callable[[ScheduleEvent], None]) -> None:
        """Register an event handler.

        Args:
            handler: Function to call when events are emitted
        """
        self.events.add_handler(handler)
