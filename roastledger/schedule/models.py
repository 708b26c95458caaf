"""Data models for scheduled roasts."""
import math
from dataclasses import dataclass, fields
from typing import Any

from loguru import logger

from .dates import parse_scheduled_date
from .errors import ValidationError
from .types import DEFAULT_PRIORITY, Priority, RoastLevel

logger = logger.bind(module="schedule.models")

# Fields owned by create/complete; never writable through a patch
PROTECTED_FIELDS = ("id", "created_at", "completed", "completed_date")


# ============== Field validation ==============

def _require_text(name: str, value: Any, allow_empty: bool = False) -> str:
    if not isinstance(value, str):
        raise ValidationError(name, "must be a string")
    if not allow_empty and not value.strip():
        raise ValidationError(name, "is required")
    return value


def _check_date(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("scheduled_date", "is required")
    try:
        parse_scheduled_date(value)
    except ValueError:
        raise ValidationError("scheduled_date", f"not an ISO 8601 date: {value!r}")
    return value


def _check_weight(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError("green_weight", "must be a number of grams")
    if math.isnan(value) or value <= 0:
        raise ValidationError("green_weight", "must be greater than zero")
    return value


def _check_roast_level(value: Any) -> RoastLevel:
    try:
        return RoastLevel(value)
    except ValueError:
        allowed = ", ".join(level.value for level in RoastLevel)
        raise ValidationError("target_roast_level", f"must be one of: {allowed}")


def _check_priority(value: Any) -> Priority:
    try:
        return Priority(value)
    except ValueError:
        allowed = ", ".join(p.value for p in Priority)
        raise ValidationError("priority", f"must be one of: {allowed}")


# ============== Requests ==============

@dataclass
class ScheduleEntryRequest:
    """Request to schedule a new roast."""
    coffee_name: str
    green_coffee_name: str
    scheduled_date: str
    green_weight: float
    target_roast_level: RoastLevel | str
    equipment_id: str
    notes: str | None = None
    priority: Priority | str | None = None

    def validate(self) -> None:
        """Validate and normalise fields in place.

        Raises:
            ValidationError: On the first malformed field
        """
        self.coffee_name = _require_text("coffee_name", self.coffee_name)
        self.green_coffee_name = _require_text("green_coffee_name", self.green_coffee_name)
        self.scheduled_date = _check_date(self.scheduled_date)
        self.green_weight = _check_weight(self.green_weight)
        self.target_roast_level = _check_roast_level(self.target_roast_level)
        self.equipment_id = _require_text("equipment_id", self.equipment_id, allow_empty=True)
        if self.notes is not None:
            self.notes = _require_text("notes", self.notes, allow_empty=True)
        if self.priority is not None:
            self.priority = _check_priority(self.priority)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScheduleEntryRequest":
        """Create from dictionary, reporting the first missing required field."""
        for name in ("coffee_name", "green_coffee_name", "scheduled_date",
                     "green_weight", "target_roast_level", "equipment_id"):
            if data.get(name) is None:
                raise ValidationError(name, "is required")
        return cls(
            coffee_name=data["coffee_name"],
            green_coffee_name=data["green_coffee_name"],
            scheduled_date=data["scheduled_date"],
            green_weight=data["green_weight"],
            target_roast_level=data["target_roast_level"],
            equipment_id=data["equipment_id"],
            notes=data.get("notes"),
            priority=data.get("priority"),
        )


@dataclass
class SchedulePatch:
    """Request to update an existing scheduled roast.

    Fields left as None keep their prior value.
    """
    coffee_name: str | None = None
    green_coffee_name: str | None = None
    scheduled_date: str | None = None
    green_weight: float | None = None
    target_roast_level: RoastLevel | str | None = None
    equipment_id: str | None = None
    notes: str | None = None
    priority: Priority | str | None = None

    def validate(self) -> None:
        """Validate the fields that are present."""
        if self.coffee_name is not None:
            self.coffee_name = _require_text("coffee_name", self.coffee_name)
        if self.green_coffee_name is not None:
            self.green_coffee_name = _require_text("green_coffee_name", self.green_coffee_name)
        if self.scheduled_date is not None:
            self.scheduled_date = _check_date(self.scheduled_date)
        if self.green_weight is not None:
            self.green_weight = _check_weight(self.green_weight)
        if self.target_roast_level is not None:
            self.target_roast_level = _check_roast_level(self.target_roast_level)
        if self.equipment_id is not None:
            self.equipment_id = _require_text("equipment_id", self.equipment_id, allow_empty=True)
        if self.notes is not None:
            self.notes = _require_text("notes", self.notes, allow_empty=True)
        if self.priority is not None:
            self.priority = _check_priority(self.priority)

    def changes(self) -> dict[str, Any]:
        """Fields set on this patch, with enum members reduced to their values."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            result[f.name] = value.value if isinstance(value, (RoastLevel, Priority)) else value
        return result

    def apply(self, entry: "ScheduledRoast") -> None:
        """Apply patch to a scheduled roast (shallow merge)."""
        for name, value in self.changes().items():
            setattr(entry, name, value)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SchedulePatch":
        """Create from dictionary, dropping protected and unknown keys."""
        ignored = [key for key in data if key in PROTECTED_FIELDS]
        if ignored:
            logger.warning(f"Ignoring protected fields in schedule patch: {ignored}")
        allowed = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in allowed})


# ============== Entity ==============

@dataclass
class ScheduledRoast:
    """A planned roast, tracked until completed or deleted."""
    # Identity
    id: str
    created_at: str

    # Definition
    coffee_name: str = ""
    green_coffee_name: str = ""
    scheduled_date: str = ""
    green_weight: float = 0
    target_roast_level: str = RoastLevel.MEDIUM.value
    equipment_id: str = ""
    notes: str | None = None
    priority: str = DEFAULT_PRIORITY.value

    # Completion
    completed: bool = False
    completed_date: str | None = None

    @classmethod
    def from_request(
        cls,
        request: ScheduleEntryRequest,
        entry_id: str,
        created_at: str,
    ) -> "ScheduledRoast":
        """Build a new, incomplete entry from a validated request."""
        priority = request.priority or DEFAULT_PRIORITY
        level = request.target_roast_level
        return cls(
            id=entry_id,
            created_at=created_at,
            coffee_name=request.coffee_name,
            green_coffee_name=request.green_coffee_name,
            scheduled_date=request.scheduled_date,
            green_weight=request.green_weight,
            target_roast_level=level.value if isinstance(level, RoastLevel) else level,
            equipment_id=request.equipment_id,
            notes=request.notes,
            priority=priority.value if isinstance(priority, Priority) else priority,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "coffee_name": self.coffee_name,
            "green_coffee_name": self.green_coffee_name,
            "scheduled_date": self.scheduled_date,
            "green_weight": self.green_weight,
            "target_roast_level": self.target_roast_level,
            "equipment_id": self.equipment_id,
            "notes": self.notes,
            "priority": self.priority,
            "completed": self.completed,
            "completed_date": self.completed_date,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScheduledRoast":
        """Create from dictionary.

        A record flagged completed without a completion date loads as pending.
        """
        completed = bool(data.get("completed", False))
        if completed and not data.get("completed_date"):
            logger.warning(f"Scheduled roast {data.get('id')} is completed without a date, loading as pending")
            completed = False
        return cls(
            id=data["id"],
            created_at=data.get("created_at", ""),
            coffee_name=data.get("coffee_name", ""),
            green_coffee_name=data.get("green_coffee_name", ""),
            scheduled_date=data.get("scheduled_date", ""),
            green_weight=data.get("green_weight", 0),
            target_roast_level=data.get("target_roast_level", RoastLevel.MEDIUM.value),
            equipment_id=data.get("equipment_id") or "",
            notes=data.get("notes"),
            priority=data.get("priority") or DEFAULT_PRIORITY.value,
            completed=completed,
            completed_date=data.get("completed_date") if completed else None,
        )
