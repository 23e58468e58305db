from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Run state machine and outcome models.

State transitions (forward only):
PARSING -> INVENTORYING -> PLANNING -> (DRY_RUN_EXIT | EXPANDING -> REINVENTORYING
-> REPLANNING) -> WRITING -> CLEARING -> CONFIRMING -> DONE, any -> FAILED
"""

__all__ = [
    "RunOutcome",
    "RunState",
    "RunStats",
]


class RunState(Enum):
    IDLE = "idle"
    PARSING = "parsing"
    INVENTORYING = "inventorying"
    PLANNING = "planning"
    DRY_RUN_EXIT = "dry_run_exit"
    EXPANDING = "expanding"
    REINVENTORYING = "reinventorying"
    REPLANNING = "replanning"
    WRITING = "writing"
    CLEARING = "clearing"
    CONFIRMING = "confirming"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class RunStats:
    """Counts gathered during one run (used for the message and SUMMARY line)."""
    desired_items: int = 0
    imported: int = 0  # assignments written
    matched: int = 0
    filled_from_empty: int = 0
    pending: int = 0
    rows_added: int = 0
    rows_cleared: int = 0
    recalculated: bool = False
    dry_run: bool = False


@dataclass(frozen=True)
class RunOutcome:
    """The only externally visible artifact of a run.

    ok=True carries `message`; ok=False carries `error`, which starts with the
    failure kind name (e.g. "InsufficientCapacity: ...").
    """
    ok: bool
    message: str | None = None
    error: str | None = None
    stats: RunStats | None = None

    @classmethod
    def success(cls, message: str, stats: RunStats | None = None) -> RunOutcome:
        return cls(ok=True, message=message, stats=stats)

    @classmethod
    def failure(cls, error: str, stats: RunStats | None = None) -> RunOutcome:
        return cls(ok=False, error=error, stats=stats)

    @property
    def error_kind(self) -> str | None:
        if self.error is None:
            return None
        return self.error.split(":", 1)[0].strip()
