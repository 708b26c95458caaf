"""In-memory schedule backend."""
import copy
from typing import Any


class InMemoryScheduleBackend:
    """Keeps the serialized schedule in process memory.

    Stores deep copies so callers never alias persisted state.
    """

    def __init__(self, entries: list[dict[str, Any]] | None = None):
        self._entries: list[dict[str, Any]] = copy.deepcopy(entries or [])
        self.save_count = 0

    async def load(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._entries)

    async def save(self, entries: list[dict[str, Any]]) -> None:
        self._entries = copy.deepcopy(entries)
        self.save_count += 1
