from __future__ import annotations

from timecard_sync.models.desired_item import DesiredItem
from timecard_sync.models.grid_row import GridRow
from timecard_sync.services.matcher import combo_key, exact
from timecard_sync.services.reconciler import build_plan, row_matches


def _item(project: str, task: str = "Build", hour_type: str = "Straight", hours=(8, 8, 8, 8, 8)) -> DesiredItem:
    return DesiredItem(
        key=combo_key(project, task, hour_type),
        project_name=project,
        task_name=task,
        hour_type_name=hour_type,
        hours=tuple(float(h) for h in hours),
    )


def _row(idx: int, project: str = "", task: str = "", hour_type: str = "", days=("",) * 5) -> GridRow:
    is_empty = not (project or task or hour_type) and not any(days)
    return GridRow(idx, project, task, hour_type, tuple(days), is_empty)


def test_matched_row_preferred_over_earlier_empty_row():
    rows = [_row(0), _row(1, "Alpha", "Build", "Straight")]
    plan = build_plan([_item("Alpha")], rows)
    assert [(a.row.row_index, a.kind) for a in plan.assignments] == [(1, "matched")]
    assert [r.row_index for r in plan.untouched_rows] == [0]


def test_empty_row_used_when_nothing_matches():
    rows = [_row(0, "Other", "Build", "Straight"), _row(1), _row(2)]
    plan = build_plan([_item("Alpha")], rows)
    assert plan.assignments[0].row.row_index == 1
    assert plan.assignments[0].kind == "empty"
    assert plan.empty_count == 1
    assert plan.matched_count == 0


def test_row_with_only_hours_is_not_reused_as_empty():
    rows = [_row(0, days=("8", "", "", "", ""))]
    plan = build_plan([_item("Alpha")], rows)
    assert plan.assignments == []
    assert plan.missing == 1


def test_substring_match_counts_as_matched():
    rows = [_row(0, "Alpha Project", "build phase", "DICTU Uren - (Straight Time)")]
    plan = build_plan([_item("alpha", "Build", "Straight")], rows)
    assert plan.assignments[0].kind == "matched"


def test_greedy_first_fit_is_not_a_maximum_matching():
    """先に来た緩い一致が後続のより具体的な一致の行を奪う (既知の制約)."""
    rows = [_row(0, "Dev Ops", "Build", "Straight"), _row(1, "Devices", "Build", "Straight")]
    plan = build_plan([_item("Dev"), _item("Dev Ops")], rows)
    assert [(a.desired.project_name, a.row.row_index) for a in plan.assignments] == [("Dev", 0)]
    assert [p.project_name for p in plan.pending] == ["Dev Ops"]


def test_plan_is_a_partial_bijection_and_complete():
    rows = [_row(i) for i in range(3)] + [_row(3, "Alpha", "Build", "Straight")]
    desired = [_item(p) for p in ("Alpha", "Beta", "Gamma", "Delta", "Epsilon")]
    plan = build_plan(desired, rows)

    used = [a.row.row_index for a in plan.assignments]
    assert len(used) == len(set(used))
    assert len(plan.assignments) + len(plan.pending) == len(desired)
    assert sorted(used + [r.row_index for r in plan.untouched_rows]) == [0, 1, 2, 3]
    # pending keeps desired order
    assert [p.project_name for p in plan.pending] == ["Epsilon"]


def test_exact_matcher_rejects_containment():
    rows = [_row(0, "Alpha Project", "Build", "Straight")]
    plan = build_plan([_item("Alpha")], rows, exact)
    assert plan.assignments == []
    assert len(plan.pending) == 1


def test_row_matches_requires_all_three_fields():
    row = _row(0, "Alpha", "Build", "")
    assert not row_matches(row, _item("Alpha"))
    assert row_matches(_row(1, "Alpha", "Build", "Straight"), _item("Alpha"))


def test_rows_are_scanned_in_index_order_even_if_unsorted():
    rows = [_row(4), _row(1)]
    plan = build_plan([_item("Alpha")], rows)
    assert plan.assignments[0].row.row_index == 1
