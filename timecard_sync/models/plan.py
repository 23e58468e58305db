from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .desired_item import DesiredItem
from .grid_row import GridRow

"""Reconciliation plan models.

A plan pairs desired items with grid rows. Invariants kept by the reconciler:
- no row_index appears in more than one Assignment
- len(assignments) + len(pending) == number of desired items
- untouched_rows are exactly the rows not referenced by any Assignment
"""

__all__ = [
    "Assignment",
    "AssignmentKind",
    "ReconciliationPlan",
]

AssignmentKind = Literal["matched", "empty"]


@dataclass(frozen=True)
class Assignment:
    desired: DesiredItem
    row: GridRow
    kind: AssignmentKind


@dataclass(frozen=True)
class ReconciliationPlan:
    assignments: list[Assignment] = field(default_factory=list)
    pending: list[DesiredItem] = field(default_factory=list)
    untouched_rows: list[GridRow] = field(default_factory=list)

    @property
    def matched_count(self) -> int:
        return sum(1 for a in self.assignments if a.kind == "matched")

    @property
    def empty_count(self) -> int:
        return sum(1 for a in self.assignments if a.kind == "empty")

    @property
    def missing(self) -> int:
        return len(self.pending)
