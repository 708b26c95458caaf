"""Core type definitions for the roast schedule.

This module defines:
- Enumerations for roast level and priority
- Event types for the event system
- Result types returned by derived queries
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ============== Enumerations ==============

class RoastLevel(str, Enum):
    """Target roast level of a scheduled batch."""
    LIGHT = "light"
    MEDIUM_LIGHT = "medium-light"
    MEDIUM = "medium"
    MEDIUM_DARK = "medium-dark"
    DARK = "dark"


class Priority(str, Enum):
    """Priority of a scheduled roast."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


DEFAULT_PRIORITY = Priority.MEDIUM

# Forward horizon of the upcoming view
UPCOMING_WINDOW_DAYS = 7


# ============== Event Types ==============

@dataclass
class ScheduleEvent:
    """Event emitted by the schedule store after a durable mutation."""
    type: str
    entry_id: str
    timestamp_ms: int
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "entry_id": self.entry_id,
            "timestamp_ms": self.timestamp_ms,
            "payload": self.payload,
        }


# ============== Result Types ==============

@dataclass
class ScheduleSummary:
    """Counts shown on the schedule dashboard."""
    total: int = 0
    pending: int = 0
    completed: int = 0
    completed_this_month: int = 0
    upcoming: int = 0
    overdue: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "pending": self.pending,
            "completed": self.completed,
            "completed_this_month": self.completed_this_month,
            "upcoming": self.upcoming,
            "overdue": self.overdue,
        }
