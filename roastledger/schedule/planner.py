"""Batch planning on top of the roast schedule.

Turns on-hand green coffee into a series of scheduled roasts, and checks
scheduled roasts against on-hand green coffee.
"""
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

from ..inventory import GreenCoffeeStock, InventorySnapshot
from .models import ScheduledRoast, ScheduleEntryRequest
from .types import Priority, RoastLevel

STANDARD_BATCH_SIZE_G = 220.0
BATCH_SPACING_DAYS = 2

# Share of possible batches per roast level, and expected roasted yield
ROAST_DISTRIBUTION: list[tuple[RoastLevel, float, float]] = [
    (RoastLevel.LIGHT, 0.3, 0.85),
    (RoastLevel.MEDIUM, 0.5, 0.83),
    (RoastLevel.MEDIUM_DARK, 0.2, 0.80),
]


@dataclass
class RoastPlan:
    """Batches of one coffee at one roast level."""
    roast_level: RoastLevel
    batches: int
    green_per_batch: float
    total_green: float
    expected_yield: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "roast_level": self.roast_level.value,
            "batches": self.batches,
            "green_per_batch": self.green_per_batch,
            "total_green": self.total_green,
            "expected_yield": self.expected_yield,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoastPlan":
        return cls(
            roast_level=RoastLevel(data["roast_level"]),
            batches=int(data["batches"]),
            green_per_batch=data["green_per_batch"],
            total_green=data.get("total_green", 0),
            expected_yield=data.get("expected_yield", 0),
        )


@dataclass
class BatchPlan:
    """Suggested roasts for one green coffee."""
    coffee_name: str
    total_green: float
    roasts_possible: int
    roast_plans: list[RoastPlan] = field(default_factory=list)

    @property
    def total_batches(self) -> int:
        return sum(plan.batches for plan in self.roast_plans)

    def to_dict(self) -> dict[str, Any]:
        return {
            "coffee_name": self.coffee_name,
            "total_green": self.total_green,
            "roasts_possible": self.roasts_possible,
            "roast_plans": [plan.to_dict() for plan in self.roast_plans],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BatchPlan":
        return cls(
            coffee_name=data["coffee_name"],
            total_green=data.get("total_green", 0),
            roasts_possible=data.get("roasts_possible", 0),
            roast_plans=[RoastPlan.from_dict(p) for p in data.get("roast_plans", [])],
        )


@dataclass
class RoastAvailability:
    """Whether enough green coffee is on hand for a scheduled roast."""
    entry_id: str
    green_coffee_name: str
    required: float
    available: float

    @property
    def sufficient(self) -> bool:
        return self.available >= self.required

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_id": self.entry_id,
            "green_coffee_name": self.green_coffee_name,
            "required": self.required,
            "available": self.available,
            "sufficient": self.sufficient,
        }


def plan_for_coffee(stock: GreenCoffeeStock, batch_size: float = STANDARD_BATCH_SIZE_G) -> BatchPlan:
    """Split the possible batches of one coffee across roast levels."""
    roasts_possible = math.floor(stock.current_amount / batch_size) if batch_size > 0 else 0

    roast_plans = []
    for level, share, yield_ratio in ROAST_DISTRIBUTION:
        batches = math.floor(roasts_possible * share)
        if batches <= 0:
            continue
        total = batches * batch_size
        roast_plans.append(RoastPlan(
            roast_level=level,
            batches=batches,
            green_per_batch=batch_size,
            total_green=total,
            expected_yield=total * yield_ratio,
        ))

    return BatchPlan(
        coffee_name=stock.coffee_name,
        total_green=stock.current_amount,
        roasts_possible=roasts_possible,
        roast_plans=roast_plans,
    )


def generate_batch_plans(
    green: list[GreenCoffeeStock],
    batch_size: float = STANDARD_BATCH_SIZE_G,
) -> list[BatchPlan]:
    """Batch plans for every green coffee with at least one full batch on hand."""
    plans = [plan_for_coffee(stock, batch_size) for stock in green]
    return [plan for plan in plans if plan.roasts_possible > 0]


def plan_schedule_requests(
    plan: BatchPlan,
    start: date,
    spacing_days: int = BATCH_SPACING_DAYS,
    equipment_id: str = "",
) -> list[ScheduleEntryRequest]:
    """One schedule request per batch, spaced ``spacing_days`` apart."""
    requests = []
    slot = 0
    for roast_plan in plan.roast_plans:
        level = roast_plan.roast_level
        for batch in range(roast_plan.batches):
            scheduled = start + timedelta(days=slot * spacing_days)
            slot += 1
            requests.append(ScheduleEntryRequest(
                coffee_name=f"{plan.coffee_name} ({level.value})",
                green_coffee_name=plan.coffee_name,
                scheduled_date=scheduled.isoformat(),
                green_weight=roast_plan.green_per_batch,
                target_roast_level=level,
                equipment_id=equipment_id,
                notes=f"Batch {batch + 1}/{roast_plan.batches} - Auto-scheduled from batch planner",
                priority=Priority.MEDIUM,
            ))
    return requests


def check_availability(
    entries: list[ScheduledRoast],
    inventory: InventorySnapshot,
) -> list[RoastAvailability]:
    """Compare each incomplete entry with the green coffee on hand."""
    amounts = inventory.green_amounts()
    return [
        RoastAvailability(
            entry_id=entry.id,
            green_coffee_name=entry.green_coffee_name,
            required=entry.green_weight,
            available=amounts.get(entry.green_coffee_name, 0),
        )
        for entry in entries
        if not entry.completed
    ]
