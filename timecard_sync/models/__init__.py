"""Domain models for the timecard reconciliation engine.

Payload side (DesiredItem), host side (HostRow / GridRow), planning
(Assignment / ReconciliationPlan) and run control (RunOptions / RunOutcome).
"""

from .desired_item import WEEKDAY_COUNT, ComboKey, DesiredItem
from .error_record import ErrorRecord
from .grid_row import DAY_FIELDS, FieldKind, GridRow, HostRow
from .plan import Assignment, AssignmentKind, ReconciliationPlan
from .run_options import RunOptions, TimingConfig
from .run_outcome import RunOutcome, RunState, RunStats

__all__ = [
    # Payload models
    "WEEKDAY_COUNT",
    "ComboKey",
    "DesiredItem",
    # Host models
    "DAY_FIELDS",
    "FieldKind",
    "GridRow",
    "HostRow",
    # Planning models
    "Assignment",
    "AssignmentKind",
    "ReconciliationPlan",
    # Run control
    "ErrorRecord",
    "RunOptions",
    "RunOutcome",
    "RunState",
    "RunStats",
    "TimingConfig",
]
