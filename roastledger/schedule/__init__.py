"""Roast schedule module.

This module provides:
- A schedule store over an injected whole-collection backend
- Upcoming and overdue views recomputed on every read
- JSON file persistence (easy to view and edit)
- Batch planning from on-hand green coffee
"""
# Core types
from .types import (
    RoastLevel,
    Priority,
    ScheduleEvent,
    ScheduleSummary,
    UPCOMING_WINDOW_DAYS,
)

# Errors
from .errors import (
    ScheduleError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

# Models
from .models import (
    ScheduleEntryRequest,
    SchedulePatch,
    ScheduledRoast,
)

# Store
from .service import ScheduleStore
from .service.json_store import JsonScheduleBackend
from .service.memory_store import InMemoryScheduleBackend
from .service.events import EventTypes

# Planner
from .planner import (
    BatchPlan,
    RoastPlan,
    RoastAvailability,
    generate_batch_plans,
    plan_schedule_requests,
    check_availability,
)

__all__ = [
    # Core types
    "RoastLevel",
    "Priority",
    "ScheduleEvent",
    "ScheduleSummary",
    "UPCOMING_WINDOW_DAYS",
    # Errors
    "ScheduleError",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
    # Models
    "ScheduleEntryRequest",
    "SchedulePatch",
    "ScheduledRoast",
    # Store
    "ScheduleStore",
    "JsonScheduleBackend",
    "InMemoryScheduleBackend",
    "EventTypes",
    # Planner
    "BatchPlan",
    "RoastPlan",
    "RoastAvailability",
    "generate_batch_plans",
    "plan_schedule_requests",
    "check_availability",
]
