"""Configuration - roast schedule service settings"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
load_dotenv()


@dataclass
class Settings:
    """Service settings"""

    # Server
    host: str = "0.0.0.0"
    port: int = 8790
    debug: bool = False

    # Storage
    data_dir: Path = field(default_factory=lambda: Path.home() / ".roastledger" / "data")
    schedule_file: Optional[Path] = None

    # Schedule views
    upcoming_days: int = 7

    # Batch planner
    batch_size_g: float = 220.0
    batch_spacing_days: int = 2

    @property
    def schedule_path(self) -> Path:
        """Path of the JSON file holding the roast schedule."""
        if self.schedule_file:
            return Path(self.schedule_file).expanduser()
        return Path(self.data_dir).expanduser() / "schedule.json"

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables"""
        schedule_file = os.getenv("ROASTLEDGER_SCHEDULE_FILE")

        return cls(
            # Server
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8790")),
            debug=os.getenv("DEBUG", "").lower() in ("1", "true"),

            # Paths
            data_dir=Path(os.getenv(
                "ROASTLEDGER_DATA_DIR", str(Path.home() / ".roastledger" / "data")
            )),
            schedule_file=Path(schedule_file) if schedule_file else None,

            # Schedule views
            upcoming_days=int(os.getenv("ROASTLEDGER_UPCOMING_DAYS", "7")),

            # Batch planner
            batch_size_g=float(os.getenv("ROASTLEDGER_BATCH_SIZE_G", "220")),
            batch_spacing_days=int(os.getenv("ROASTLEDGER_BATCH_SPACING_DAYS", "2")),
        )


# Global settings instance
settings = Settings.from_env()
