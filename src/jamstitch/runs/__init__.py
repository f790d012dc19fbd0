from .contracts import RunRecord, RunStatus
from .tracker import RunTracker

__all__ = ["RunRecord", "RunStatus", "RunTracker"]
