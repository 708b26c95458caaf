"""Roast schedule demo.

This example demonstrates:
- Creating, updating, completing and deleting scheduled roasts
- Upcoming and overdue views
- Batch planning from on-hand green coffee
- JSON file persistence for human-readable schedule viewing
"""
import asyncio
import tempfile
from datetime import date, timedelta
from pathlib import Path

from loguru import logger

from roastledger.inventory import GreenCoffeeStock
from roastledger.schedule import (
    ScheduleStore,
    ScheduleEntryRequest,
    SchedulePatch,
    RoastLevel,
    Priority,
    generate_batch_plans,
    plan_schedule_requests,
)


async def main():
    """Walk through the schedule lifecycle."""

    logger.info("=" * 60)
    logger.info("Roast Schedule Demo")
    logger.info("=" * 60)

    json_path = Path(tempfile.mkdtemp()) / "schedule.json"
    store = ScheduleStore.from_json_file(json_path)
    store.on_event(lambda event: logger.info(f"[Event] {event.type} {event.entry_id}"))

    today = date.today()

    # 1. Schedule a few roasts
    ethiopia = await store.create(ScheduleEntryRequest(
        coffee_name="Yirgacheffe Light",
        green_coffee_name="Ethiopia Yirgacheffe",
        scheduled_date=(today + timedelta(days=2)).isoformat(),
        green_weight=220,
        target_roast_level=RoastLevel.LIGHT,
        equipment_id="sr800",
        priority=Priority.HIGH,
    ))
    await store.create(ScheduleEntryRequest(
        coffee_name="Huila Medium",
        green_coffee_name="Colombia Huila",
        scheduled_date=(today - timedelta(days=3)).isoformat(),
        green_weight=200,
        target_roast_level=RoastLevel.MEDIUM,
        equipment_id="sr800",
    ))

    # 2. Views
    logger.info(f"Upcoming: {[e.coffee_name for e in await store.upcoming()]}")
    logger.info(f"Overdue: {[e.coffee_name for e in await store.overdue()]}")

    # 3. Edit and complete
    await store.update(ethiopia.id, SchedulePatch(notes="Extension tube, 200g max"))
    await store.complete(ethiopia.id, {"roasted_weight": 186})

    # 4. Batch planner
    green = [GreenCoffeeStock(coffee_name="Brazil Cerrado", current_amount=2200, origin="Brazil")]
    for plan in generate_batch_plans(green):
        created = await store.create_many(plan_schedule_requests(plan, today))
        logger.info(f"Scheduled {len(created)} batches of {plan.coffee_name}")

    summary = await store.summary()
    logger.info(f"Summary: {summary.to_dict()}")
    logger.info(f"Schedule file: {json_path}")


if __name__ == "__main__":
    asyncio.run(main())
