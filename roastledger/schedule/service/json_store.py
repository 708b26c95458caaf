"""JSON file persistence layer for the roast schedule.

Simple file-based storage for scheduled roasts, making it easy for users
to view and modify the schedule directly.
"""
import json
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

from ..errors import PersistenceError

logger = logger.bind(module="schedule.json_store")

SCHEMA_VERSION = 1


class JsonScheduleBackend:
    """JSON file-based schedule persistence.

    Stores the schedule as a versioned envelope in a human-readable JSON
    file. A bare JSON list (the layout of the old browser storage slot) is
    read as version 0.
    """

    def __init__(self, json_path: str | Path):
        """Initialize JSON schedule backend.

        Args:
            json_path: Path to JSON file for storage
        """
        self.json_path = Path(json_path).expanduser()

    async def load(self) -> list[dict[str, Any]]:
        """Load every entry from the JSON file.

        Returns:
            Serialized entries in insertion order; empty if the file is missing

        Raises:
            PersistenceError: If the file is unreadable, corrupt, or newer
                than this schema version
        """
        if not self.json_path.exists():
            return []

        try:
            with open(self.json_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Failed to read {self.json_path}: {e}") from e

        entries = self._unwrap(data)
        logger.debug(f"Loaded {len(entries)} entries from {self.json_path}")
        return entries

    def _unwrap(self, data: Any) -> list[dict[str, Any]]:
        """Extract the entry list from a persisted envelope."""
        if isinstance(data, list):
            entries = data
        elif isinstance(data, dict):
            version = data.get("version", 0)
            if not isinstance(version, int) or version > SCHEMA_VERSION:
                raise PersistenceError(
                    f"Unsupported schedule schema version {version!r} in {self.json_path}"
                )
            entries = data.get("entries", [])
        else:
            raise PersistenceError(f"Unexpected JSON layout in {self.json_path}")

        if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
            raise PersistenceError(f"Malformed entry list in {self.json_path}")
        return entries

    async def save(self, entries: list[dict[str, Any]]) -> None:
        """Save every entry to the JSON file.

        Raises:
            PersistenceError: If the file could not be written
        """
        export_data = {
            "version": SCHEMA_VERSION,
            "exported_at": datetime.now().isoformat(),
            "total_entries": len(entries),
            "entries": entries,
        }

        try:
            self.json_path.parent.mkdir(parents=True, exist_ok=True)
            # Write atomically (write to temp, then rename)
            temp_path = self.json_path.with_suffix(".tmp")
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(export_data, f, ensure_ascii=False, indent=2)
            temp_path.replace(self.json_path)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Failed to write {self.json_path}: {e}") from e

        logger.debug(f"Saved {len(entries)} entries to {self.json_path}")
