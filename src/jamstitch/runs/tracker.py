"""Persistent history of stitch runs, one JSON file per run."""

import json
import logging
import uuid
from datetime import datetime
from pathlib import Path

from .contracts import RunRecord, RunStatus


class RunTracker:
    """Records when each stitch run started, how it ended and what it produced."""

    STORAGE_DIR = Path.home() / ".jamstitch" / "runs"

    def __init__(self, storage_dir: Path | None = None) -> None:
        self.storage_dir = storage_dir or self.STORAGE_DIR
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger(self.__class__.__name__)

    def create_run(self, games_path: str) -> str:
        run_id = uuid.uuid4().hex[:8]
        self._save(RunRecord(
            run_id=run_id,
            games_path=games_path,
            status=RunStatus.RUNNING,
            started_at=datetime.now(),
        ))
        return run_id

    def complete_run(
        self,
        run_id: str,
        program_count: int,
        share_url: str | None = None,
        output_dir: str | None = None,
    ) -> None:
        self._finish(
            run_id,
            RunStatus.COMPLETED,
            program_count=program_count,
            share_url=share_url,
            output_dir=output_dir,
        )

    def fail_run(self, run_id: str, error: str, share_url: str | None = None) -> None:
        """Mark a run failed, keeping the share link if publication already succeeded."""
        self._finish(run_id, RunStatus.FAILED, error=error, share_url=share_url)

    def get_run(self, run_id: str) -> RunRecord | None:
        return self._load(self._path(run_id))

    def get_recent_runs(self, limit: int = 10) -> list[RunRecord]:
        """Newest first by file modification time; unreadable records are skipped."""
        paths = sorted(
            self.storage_dir.glob("*.json"),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )
        records = (self._load(path) for path in paths)
        return [record for record in records if record is not None][:limit]

    def _finish(self, run_id: str, status: RunStatus, **changes) -> None:
        record = self.get_run(run_id)
        if record is None:
            self.logger.warning("Cannot mark unknown run %s as %s", run_id, status.value)
            return
        record.status = status
        record.completed_at = datetime.now()
        for name, value in changes.items():
            setattr(record, name, value)
        self._save(record)

    def _path(self, run_id: str) -> Path:
        return self.storage_dir / f"{run_id}.json"

    def _load(self, path: Path) -> RunRecord | None:
        if not path.exists():
            return None
        try:
            return RunRecord.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (json.JSONDecodeError, KeyError, ValueError) as e:
            self.logger.warning("Skipping unreadable run record %s: %s", path.name, e)
            return None

    def _save(self, record: RunRecord) -> None:
        self._path(record.run_id).write_text(
            json.dumps(record.to_dict(), indent=2), encoding="utf-8"
        )
