"""Schedule store package.

This package contains the core schedule store components:
- state.py: Backend protocol and dependencies
- json_store.py: JSON file persistence layer
- memory_store.py: In-memory persistence layer
- ops.py: Core operations (create, update, complete, delete, views)
- events.py: Event system
"""
from .service import ScheduleStore

__all__ = ["ScheduleStore"]
