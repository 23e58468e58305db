from __future__ import annotations

import logging
from collections.abc import Sequence

from ..models.desired_item import DesiredItem
from ..models.grid_row import GridRow
from ..models.plan import Assignment, AssignmentKind, ReconciliationPlan
from .matcher import Matcher, equivalent

"""Reconciler: pair desired items with inventoried grid rows.

Greedy first-fit, in desired-item order:
1. first unused row (row-index order) whose project, task and hour type each
   equate to the item's -> "matched"
2. else first unused empty row -> "empty"
3. else the item is pending

This is not a maximum matching: an earlier, looser match can consume a row a
later, more specific item would have matched. Callers rely on this exact
tie-break, so keep it.
"""

__all__ = [
    "build_plan",
    "row_matches",
]

logger = logging.getLogger(__name__)


def row_matches(row: GridRow, desired: DesiredItem, matcher: Matcher = equivalent) -> bool:
    return (
        matcher(row.project_text, desired.project_name)
        and matcher(row.task_text, desired.task_name)
        and matcher(row.hour_type_text, desired.hour_type_name)
    )


def build_plan(
    desired_items: Sequence[DesiredItem],
    rows: Sequence[GridRow],
    matcher: Matcher = equivalent,
) -> ReconciliationPlan:
    """Compute assignments, pending items and untouched rows."""
    ordered = sorted(rows, key=lambda r: r.row_index)
    used: set[int] = set()
    assignments: list[Assignment] = []
    pending: list[DesiredItem] = []

    for desired in desired_items:
        kind: AssignmentKind = "matched"
        # 毎回 matcher を評価 (推移律は仮定しない)
        selected = next(
            (r for r in ordered if r.row_index not in used and row_matches(r, desired, matcher)),
            None,
        )
        if selected is None:
            kind = "empty"
            selected = next((r for r in ordered if r.row_index not in used and r.is_empty), None)

        if selected is None:
            pending.append(desired)
            continue

        used.add(selected.row_index)
        assignments.append(Assignment(desired=desired, row=selected, kind=kind))

    untouched = [r for r in ordered if r.row_index not in used]
    plan = ReconciliationPlan(assignments=assignments, pending=pending, untouched_rows=untouched)
    logger.debug(
        "plan matched=%d empty=%d pending=%d untouched=%d",
        plan.matched_count,
        plan.empty_count,
        len(pending),
        len(untouched),
    )
    return plan
