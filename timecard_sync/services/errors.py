from __future__ import annotations

"""Failure taxonomy of a synchronization run.

Every failure is terminal for the run. The orchestrator converts each one into
RunOutcome(ok=False, error="<Kind>: <text>"); nothing escapes that boundary.
"""

__all__ = [
    "SyncError",
    "InvalidPayload",
    "EmptyPayload",
    "NoRowsDetected",
    "InsufficientCapacity",
    "CapacityStillInsufficient",
    "RunInProgress",
    "UNEXPECTED_FAILURE",
]

UNEXPECTED_FAILURE = "UnexpectedFailure"


class SyncError(Exception):
    """Base exception for structural run failures."""
    kind = "SyncError"

    def describe(self) -> str:
        return f"{self.kind}: {self}"


class InvalidPayload(SyncError):
    """Input is not JSON or not one of the accepted payload shapes."""
    kind = "InvalidPayload"


class EmptyPayload(SyncError):
    """Payload parsed but yields zero usable desired items."""
    kind = "EmptyPayload"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "No importable rows found. Expected a timesheet export with "
            "days/projects/tasks/hourTypes or rows[]."
        )


class NoRowsDetected(SyncError):
    """Host exposes zero rows at inventory time."""
    kind = "NoRowsDetected"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "No timecard row fields detected. Open a timecard that contains "
            "Project/Task/Hour type columns first."
        )


class InsufficientCapacity(SyncError):
    """Pending items exist and adding rows is not allowed."""
    kind = "InsufficientCapacity"

    def __init__(self, missing: int) -> None:
        self.missing = missing
        super().__init__(
            f"Not enough empty rows. Missing {missing} row(s). "
            "Enable adding rows or add rows manually first."
        )


class CapacityStillInsufficient(SyncError):
    """Pending items remain after the bounded expansion attempt."""
    kind = "CapacityStillInsufficient"

    def __init__(self, missing: int) -> None:
        self.missing = missing
        super().__init__(
            f"Could not reserve enough rows. Still missing {missing} row(s). "
            "Please add rows manually and rerun."
        )


class RunInProgress(SyncError):
    """A run is already in flight on the same engine."""
    kind = "RunInProgress"

    def __init__(self) -> None:
        super().__init__("Another run is still in progress on this host. Wait for it to finish.")
