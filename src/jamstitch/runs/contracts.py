"""Data contracts for stitch run tracking."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class RunStatus(Enum):
    """Status of a tracked stitch run."""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class RunRecord:
    """Record of one fetch-compose-publish run."""
    run_id: str
    games_path: str
    status: RunStatus
    started_at: datetime
    completed_at: datetime | None = None
    program_count: int = 0
    share_url: str | None = None
    output_dir: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON storage."""
        return {
            "run_id": self.run_id,
            "games_path": self.games_path,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "program_count": self.program_count,
            "share_url": self.share_url,
            "output_dir": self.output_dir,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RunRecord":
        """Deserialize from dictionary."""
        return cls(
            run_id=data["run_id"],
            games_path=data["games_path"],
            status=RunStatus(data["status"]),
            started_at=datetime.fromisoformat(data["started_at"]),
            completed_at=datetime.fromisoformat(data["completed_at"]) if data.get("completed_at") else None,
            program_count=data.get("program_count", 0),
            share_url=data.get("share_url"),
            output_dir=data.get("output_dir"),
            error=data.get("error"),
        )
