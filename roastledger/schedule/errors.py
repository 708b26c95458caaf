"""Error taxonomy for the roast schedule."""


class ScheduleError(Exception):
    """Base class for roast schedule errors."""


class NotFoundError(ScheduleError):
    """Raised when a referenced schedule entry does not exist."""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Schedule entry not found: {entry_id}")


class PersistenceError(ScheduleError):
    """Raised when the schedule could not be read from or written to storage."""


class ValidationError(ScheduleError):
    """Raised when a schedule request carries a malformed field."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")
