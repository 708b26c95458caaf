from datetime import datetime

import pytest

from roastledger.schedule import (
    EventTypes,
    NotFoundError,
    PersistenceError,
    SchedulePatch,
    ScheduleStore,
    ValidationError,
)
from roastledger.schedule.service.memory_store import InMemoryScheduleBackend


# ==========================================================
# CREATE
# ==========================================================

async def test_create_assigns_identity_and_defaults(store, make_request, clock):
    entry = await store.create(make_request())

    assert entry.id == "entry-1"
    assert entry.created_at == clock.now.isoformat()
    assert entry.priority == "medium"
    assert entry.target_roast_level == "light"
    assert entry.completed is False
    assert entry.completed_date is None


async def test_create_keeps_explicit_priority(store, make_request):
    entry = await store.create(make_request(priority="high", notes="two batches"))

    assert entry.priority == "high"
    assert entry.notes == "two batches"


async def test_default_ids_are_unique(make_request):
    store = ScheduleStore(InMemoryScheduleBackend())

    created = [await store.create(make_request()) for _ in range(25)]

    assert len({entry.id for entry in created}) == 25


async def test_create_then_list_round_trip(store, make_request):
    request = make_request(notes="washed")
    entry = await store.create(request)

    entries = await store.list()

    assert len(entries) == 1
    listed = entries[0]
    assert listed.to_dict() == entry.to_dict()
    assert listed.coffee_name == "Yirgacheffe Light"
    assert listed.green_coffee_name == "Ethiopia Yirgacheffe"
    assert listed.scheduled_date == "2025-01-10"
    assert listed.green_weight == 220
    assert listed.equipment_id == "sr800"
    assert listed.notes == "washed"


async def test_create_rejects_invalid_request_before_saving(store, backend, make_request):
    with pytest.raises(ValidationError) as exc:
        await store.create(make_request(green_weight=-5))

    assert exc.value.field == "green_weight"
    assert backend.save_count == 0
    assert await store.list() == []


async def test_create_fails_closed_on_write_error(store, backend, make_request):
    await store.create(make_request(coffee_name="First"))
    backend.fail_save = True

    with pytest.raises(PersistenceError):
        await store.create(make_request(coffee_name="Second"))

    backend.fail_save = False
    assert [e.coffee_name for e in await store.list()] == ["First"]


async def test_create_many_saves_once(store, backend, make_request):
    created = await store.create_many([
        make_request(scheduled_date="2025-01-10"),
        make_request(scheduled_date="2025-01-12"),
        make_request(scheduled_date="2025-01-14"),
    ])

    assert [e.id for e in created] == ["entry-1", "entry-2", "entry-3"]
    assert backend.save_count == 1


async def test_create_many_validates_everything_first(store, backend, make_request):
    with pytest.raises(ValidationError):
        await store.create_many([make_request(), make_request(target_roast_level="burnt")])

    assert backend.save_count == 0


# ==========================================================
# UPDATE
# ==========================================================

async def test_update_merges_fields_and_preserves_identity(store, make_request, clock):
    entry = await store.create(make_request())
    clock.advance(hours=2)

    updated = await store.update(entry.id, SchedulePatch(green_weight=200, notes="smaller batch"))

    assert updated.id == entry.id
    assert updated.created_at == entry.created_at
    assert updated.green_weight == 200
    assert updated.notes == "smaller batch"
    assert updated.coffee_name == entry.coffee_name
    assert (await store.get(entry.id)).green_weight == 200


async def test_update_ignores_protected_fields(store, make_request):
    entry = await store.create(make_request())

    patch = SchedulePatch.from_dict({
        "id": "hijacked",
        "created_at": "1999-01-01T00:00:00",
        "completed": True,
        "completed_date": "1999-01-02T00:00:00",
        "priority": "low",
    })
    updated = await store.update(entry.id, patch)

    assert updated.id == entry.id
    assert updated.created_at == entry.created_at
    assert updated.completed is False
    assert updated.completed_date is None
    assert updated.priority == "low"


async def test_update_missing_entry(store):
    with pytest.raises(NotFoundError):
        await store.update("nope", SchedulePatch(notes="x"))


async def test_update_validates_patch(store, make_request):
    entry = await store.create(make_request())

    with pytest.raises(ValidationError):
        await store.update(entry.id, SchedulePatch(scheduled_date="next tuesday"))

    assert (await store.get(entry.id)).scheduled_date == "2025-01-10"


async def test_update_fails_closed_on_write_error(store, backend, make_request):
    entry = await store.create(make_request())
    backend.fail_save = True

    with pytest.raises(PersistenceError):
        await store.update(entry.id, SchedulePatch(coffee_name="Renamed"))

    backend.fail_save = False
    assert (await store.get(entry.id)).coffee_name == "Yirgacheffe Light"


# ==========================================================
# COMPLETE
# ==========================================================

async def test_complete_sets_flag_and_date(store, make_request, clock):
    entry = await store.create(make_request())
    clock.advance(days=2)

    completed = await store.complete(entry.id, {"roasted_weight": 186})

    assert completed.completed is True
    assert completed.completed_date == clock.now.isoformat()
    listed = (await store.list())[0]
    assert listed.completed is True
    assert listed.completed_date == completed.completed_date


async def test_complete_again_restamps_date(store, make_request, clock):
    entry = await store.create(make_request())
    first = await store.complete(entry.id)
    clock.advance(hours=1)

    second = await store.complete(entry.id)

    assert second.completed is True
    assert second.completed_date != first.completed_date
    assert second.completed_date == clock.now.isoformat()


async def test_complete_missing_entry(store):
    with pytest.raises(NotFoundError):
        await store.complete("nope")


# ==========================================================
# DELETE
# ==========================================================

async def test_delete_removes_exactly_one(store, make_request):
    first = await store.create(make_request())
    second = await store.create(make_request())

    await store.delete(first.id)

    remaining = await store.list()
    assert [e.id for e in remaining] == [second.id]


async def test_delete_missing_entry_leaves_collection(store, backend, make_request):
    await store.create(make_request())
    saves = backend.save_count

    with pytest.raises(NotFoundError):
        await store.delete("nope")

    assert len(await store.list()) == 1
    assert backend.save_count == saves


async def test_get_missing_entry(store):
    with pytest.raises(NotFoundError):
        await store.get("nope")


# ==========================================================
# ORDERING AND VIEWS
# ==========================================================

async def test_list_orders_by_date_with_stable_ties(store, make_request):
    await store.create(make_request(scheduled_date="2025-01-10"))
    await store.create(make_request(scheduled_date="2025-01-05"))
    await store.create(make_request(scheduled_date="2025-01-05"))

    entries = await store.list()

    assert [e.id for e in entries] == ["entry-2", "entry-3", "entry-1"]


async def test_upcoming_and_overdue_scenario(store, make_request):
    overdue = await store.create(make_request(scheduled_date="2025-01-06"))
    upcoming = await store.create(make_request(scheduled_date="2025-01-10"))
    done = await store.create(make_request(scheduled_date="2025-01-06"))
    await store.complete(done.id)
    now = datetime(2025, 1, 8)

    upcoming_ids = [e.id for e in await store.upcoming(now)]
    overdue_ids = [e.id for e in await store.overdue(now)]

    assert upcoming_ids == [upcoming.id]
    assert overdue_ids == [overdue.id]


async def test_upcoming_window_bounds(store, make_request):
    today = await store.create(make_request(scheduled_date="2025-01-08"))
    last_day = await store.create(make_request(scheduled_date="2025-01-15"))
    await store.create(make_request(scheduled_date="2025-01-16"))

    entries = await store.upcoming(datetime(2025, 1, 8))

    assert [e.id for e in entries] == [today.id, last_day.id]


async def test_today_entry_is_neither_upcoming_nor_overdue_later_in_day(store, make_request):
    await store.create(make_request(scheduled_date="2025-01-08"))
    afternoon = datetime(2025, 1, 8, 15, 0)

    assert await store.upcoming(afternoon) == []
    assert await store.overdue(afternoon) == []


async def test_views_default_to_store_clock(store, make_request):
    await store.create(make_request(scheduled_date="2025-01-07"))
    await store.create(make_request(scheduled_date="2025-01-09"))

    assert [e.scheduled_date for e in await store.overdue()] == ["2025-01-07"]
    assert [e.scheduled_date for e in await store.upcoming()] == ["2025-01-09"]


async def test_views_accept_an_aware_clock(make_request):
    aware_now = datetime(2025, 1, 8, 12, 0).astimezone()
    store = ScheduleStore(InMemoryScheduleBackend(), clock=lambda: aware_now)
    await store.create(make_request(scheduled_date="2025-01-07"))
    await store.create(make_request(scheduled_date="2025-01-10"))

    assert [e.scheduled_date for e in await store.overdue()] == ["2025-01-07"]
    assert [e.scheduled_date for e in await store.upcoming()] == ["2025-01-10"]


async def test_unparseable_persisted_date_sorts_last():
    backend = InMemoryScheduleBackend([
        {"id": "bad", "scheduled_date": "someday", "created_at": ""},
        {"id": "good", "scheduled_date": "2025-01-09", "created_at": ""},
    ])
    store = ScheduleStore(backend)

    assert [e.id for e in await store.list()] == ["good", "bad"]
    assert [e.id for e in await store.overdue(datetime(2025, 2, 1))] == ["good"]


async def test_summary_counts(store, make_request, clock):
    await store.create(make_request(scheduled_date="2025-01-06"))
    await store.create(make_request(scheduled_date="2025-01-10"))
    done = await store.create(make_request(scheduled_date="2025-01-09"))
    await store.complete(done.id)

    summary = await store.summary()

    assert summary.to_dict() == {
        "total": 3,
        "pending": 2,
        "completed": 1,
        "completed_this_month": 1,
        "upcoming": 1,
        "overdue": 1,
    }


# ==========================================================
# FAIL-OPEN READS
# ==========================================================

async def test_read_failure_degrades_to_empty(store, backend, make_request):
    await store.create(make_request())
    backend.fail_load = True

    assert await store.list() == []
    assert await store.upcoming() == []
    assert store.state.load_failures == 2


async def test_undecodable_record_is_skipped_not_the_collection(clock, ids, make_request):
    backend = InMemoryScheduleBackend([
        {"id": "g1", "scheduled_date": "2025-01-09", "created_at": ""},
        {"scheduled_date": "2025-01-09"},
        "not a record",
    ])
    store = ScheduleStore(backend, id_factory=ids, clock=clock)

    assert [e.id for e in await store.list()] == ["g1"]
    assert store.state.load_failures == 2

    await store.create(make_request())

    assert [item["id"] for item in await backend.load()] == ["g1", "entry-1"]


# ==========================================================
# EVENTS
# ==========================================================

async def test_events_follow_lifecycle(store, make_request):
    events = []
    store.on_event(events.append)

    entry = await store.create(make_request())
    await store.update(entry.id, SchedulePatch(notes="x"))
    await store.complete(entry.id, {"roasted_weight": 180})
    await store.delete(entry.id)

    assert [e.type for e in events] == [
        EventTypes.CREATED,
        EventTypes.UPDATED,
        EventTypes.COMPLETED,
        EventTypes.DELETED,
    ]
    assert events[1].payload == {"fields": ["notes"]}
    assert events[2].payload == {"outcome": {"roasted_weight": 180}}


async def test_failing_event_handler_does_not_break_mutation(store, make_request):
    def boom(event):
        raise RuntimeError("handler bug")

    store.on_event(boom)

    entry = await store.create(make_request())

    assert (await store.get(entry.id)).id == entry.id


async def test_no_event_when_write_fails(store, backend, make_request):
    events = []
    store.on_event(events.append)
    backend.fail_save = True

    with pytest.raises(PersistenceError):
        await store.create(make_request())

    assert events == []
