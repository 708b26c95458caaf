"""Core operations for the schedule store.

Every operation loads the full collection, works on it in memory and, for
mutations, saves the full collection back.
"""
from datetime import datetime
from typing import Any, Iterable

from loguru import logger

from ..dates import parse_scheduled_date, start_of_day, window_end
from ..errors import NotFoundError, PersistenceError
from ..models import ScheduledRoast, ScheduleEntryRequest, SchedulePatch
from ..types import ScheduleSummary, UPCOMING_WINDOW_DAYS
from .events import EventEmitter, EventTypes, emit_entry_event
from .state import ScheduleStoreDeps, ScheduleStoreState

logger = logger.bind(module="schedule.ops")


# ============== Persistence ==============

async def load_entries(
    deps: ScheduleStoreDeps,
    state: ScheduleStoreState,
) -> list[ScheduledRoast]:
    """Load the full collection, degrading to empty on read failure.

    Records that cannot be decoded are skipped one by one; the rest load.
    """
    try:
        raw = await deps.backend.load()
    except PersistenceError as e:
        state.load_failures += 1
        logger.error(f"Failed to load schedule, continuing with empty collection: {e}")
        return []

    entries = []
    for index, item in enumerate(raw):
        try:
            entries.append(ScheduledRoast.from_dict(item))
        except (KeyError, TypeError, AttributeError) as e:
            state.load_failures += 1
            logger.error(f"Skipping undecodable schedule record #{index}: {e!r}")
    return entries


async def save_entries(deps: ScheduleStoreDeps, entries: list[ScheduledRoast]) -> None:
    """Persist the full collection; raises PersistenceError on failure."""
    await deps.backend.save([entry.to_dict() for entry in entries])


def _find_index(entries: list[ScheduledRoast], entry_id: str) -> int:
    for index, entry in enumerate(entries):
        if entry.id == entry_id:
            return index
    raise NotFoundError(entry_id)


def _timestamp(deps: ScheduleStoreDeps) -> str:
    return deps.clock().isoformat()


# ============== Mutations ==============

async def create_entries(
    deps: ScheduleStoreDeps,
    state: ScheduleStoreState,
    events: EventEmitter,
    requests: Iterable[ScheduleEntryRequest],
) -> list[ScheduledRoast]:
    """Validate and append new entries, then save once.

    Args:
        deps: Store dependencies
        state: Store state
        events: Event emitter
        requests: Creation requests

    Returns:
        Created entries, in request order
    """
    requests = list(requests)
    for request in requests:
        request.validate()

    entries = await load_entries(deps, state)
    existing_ids = {entry.id for entry in entries}

    created = []
    for request in requests:
        entry_id = deps.id_factory()
        if entry_id in existing_ids:
            raise PersistenceError(f"Generated duplicate schedule id {entry_id}")
        existing_ids.add(entry_id)
        created.append(ScheduledRoast.from_request(request, entry_id, _timestamp(deps)))

    entries.extend(created)
    await save_entries(deps, entries)

    for entry in created:
        emit_entry_event(events, EventTypes.CREATED, entry.id)
        logger.info(f"Scheduled roast {entry.id}: {entry.coffee_name} on {entry.scheduled_date}")
    return created


async def update_entry(
    deps: ScheduleStoreDeps,
    state: ScheduleStoreState,
    events: EventEmitter,
    entry_id: str,
    patch: SchedulePatch,
) -> ScheduledRoast:
    """Apply a shallow patch to an existing entry.

    Raises:
        NotFoundError: If no entry has this id
    """
    patch.validate()
    entries = await load_entries(deps, state)
    entry = entries[_find_index(entries, entry_id)]

    patch.apply(entry)
    await save_entries(deps, entries)

    emit_entry_event(events, EventTypes.UPDATED, entry_id, {"fields": sorted(patch.changes())})
    logger.info(f"Updated scheduled roast {entry_id}")
    return entry


async def complete_entry(
    deps: ScheduleStoreDeps,
    state: ScheduleStoreState,
    events: EventEmitter,
    entry_id: str,
    outcome: dict[str, Any] | None = None,
) -> ScheduledRoast:
    """Mark an entry completed, stamping completed_date with the current time.

    Completing an already-completed entry re-stamps completed_date.
    The outcome is forwarded in the event payload and not stored.

    Raises:
        NotFoundError: If no entry has this id
    """
    entries = await load_entries(deps, state)
    entry = entries[_find_index(entries, entry_id)]

    if entry.completed:
        logger.warning(f"Scheduled roast {entry_id} already completed, re-stamping")
    entry.completed = True
    entry.completed_date = _timestamp(deps)
    await save_entries(deps, entries)

    emit_entry_event(events, EventTypes.COMPLETED, entry_id, {"outcome": outcome or {}})
    logger.info(f"Completed scheduled roast {entry_id}")
    return entry


async def delete_entry(
    deps: ScheduleStoreDeps,
    state: ScheduleStoreState,
    events: EventEmitter,
    entry_id: str,
) -> None:
    """Remove an entry.

    Raises:
        NotFoundError: If no entry has this id
    """
    entries = await load_entries(deps, state)
    remaining = [entry for entry in entries if entry.id != entry_id]
    if len(remaining) == len(entries):
        raise NotFoundError(entry_id)

    await save_entries(deps, remaining)

    emit_entry_event(events, EventTypes.DELETED, entry_id)
    logger.info(f"Deleted scheduled roast {entry_id}")


# ============== Derived views ==============

def _date_key(entry: ScheduledRoast) -> tuple[int, datetime]:
    # Unparseable dates sort last
    try:
        return (0, parse_scheduled_date(entry.scheduled_date))
    except ValueError:
        return (1, datetime.max)


def _scheduled_at(entry: ScheduledRoast) -> datetime | None:
    try:
        return parse_scheduled_date(entry.scheduled_date)
    except ValueError:
        return None


def sort_entries(entries: list[ScheduledRoast]) -> list[ScheduledRoast]:
    """Ascending by scheduled date; equal dates keep insertion order."""
    return sorted(entries, key=_date_key)


def filter_upcoming(
    entries: list[ScheduledRoast],
    now: datetime,
    days: int = UPCOMING_WINDOW_DAYS,
) -> list[ScheduledRoast]:
    """Incomplete entries scheduled within [now, now + days]."""
    until = window_end(now, days)
    upcoming = []
    for entry in entries:
        scheduled = _scheduled_at(entry)
        if not entry.completed and scheduled is not None and now <= scheduled <= until:
            upcoming.append(entry)
    return upcoming


def filter_overdue(entries: list[ScheduledRoast], now: datetime) -> list[ScheduledRoast]:
    """Incomplete entries scheduled before the start of the current day."""
    today = start_of_day(now)
    overdue = []
    for entry in entries:
        scheduled = _scheduled_at(entry)
        if not entry.completed and scheduled is not None and scheduled < today:
            overdue.append(entry)
    return overdue


def summarize(
    entries: list[ScheduledRoast],
    now: datetime,
    days: int = UPCOMING_WINDOW_DAYS,
) -> ScheduleSummary:
    """Dashboard counts for a collection."""
    completed = [entry for entry in entries if entry.completed]
    this_month = 0
    for entry in completed:
        try:
            done_at = parse_scheduled_date(entry.completed_date or "")
        except ValueError:
            continue
        if (done_at.year, done_at.month) == (now.year, now.month):
            this_month += 1

    return ScheduleSummary(
        total=len(entries),
        pending=len(entries) - len(completed),
        completed=len(completed),
        completed_this_month=this_month,
        upcoming=len(filter_upcoming(entries, now, days)),
        overdue=len(filter_overdue(entries, now)),
    )
