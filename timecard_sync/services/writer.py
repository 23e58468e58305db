from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from ..host.interface import HostSurface
from ..models.desired_item import WEEKDAY_COUNT
from ..models.grid_row import FieldKind, GridRow
from ..models.plan import Assignment
from ..models.run_options import TimingConfig
from .inventory import to_grid_row
from .progress import ProgressTracker

"""Writer: apply a reconciliation plan to the host.

Per assignment: identity fields (project -> task -> hour type), each followed by
its settle delay so the host's dependent lookups resolve, then the Mon..Fri hour
values. Optional passes blank untouched rows and press the host's
recalculation control. All passes are best effort.
"""

__all__ = [
    "WriteResult",
    "format_hour_value",
    "write_assignments",
    "write_assignment",
    "clear_untouched_rows",
    "trigger_recalculation",
]

logger = logging.getLogger(__name__)

_ZERO_EPSILON = 1e-6


@dataclass(frozen=True)
class WriteResult:
    rows_written: int
    identity_fields_set: int
    day_values_set: int


def format_hour_value(value: float) -> str:
    """Render an hour value for the host grid.

    Rounded half-up to 2 decimals; |v| < 1e-6 -> "" (no value); integers
    without decimal separator; otherwise trailing zeros stripped.

    >>> format_hour_value(7.5), format_hour_value(8), format_hour_value(7.004)
    ('7.5', '8', '7')
    """
    number = float(value) if isinstance(value, (int, float)) and not isinstance(value, bool) else 0.0
    if not math.isfinite(number):
        number = 0.0
    scaled = number * 100 + 0.5
    # 100 倍で溢れる値は小数部を持たないのでそのまま使う
    rounded = math.floor(scaled) / 100 if math.isfinite(scaled) else number
    if abs(rounded) < _ZERO_EPSILON:
        return ""
    if rounded.is_integer():
        return str(int(rounded))
    return f"{rounded:.2f}".rstrip("0").rstrip(".")


def _current_row(host: HostSurface, row_index: int) -> GridRow | None:
    for raw in host.list_rows():
        if raw.row_index == row_index:
            return to_grid_row(raw)
    return None


def _settle_ms(field: FieldKind, timing: TimingConfig) -> int:
    if field is FieldKind.PROJECT:
        return timing.project_settle_ms
    if field is FieldKind.TASK:
        return timing.task_settle_ms
    return timing.hour_type_settle_ms


async def write_assignment(
    host: HostSurface,
    assignment: Assignment,
    *,
    overwrite: bool,
    timing: TimingConfig,
) -> tuple[int, int]:
    """Write one assignment. Returns (identity fields set, day values set)."""
    desired = assignment.desired
    row_index = assignment.row.row_index
    wanted = {
        FieldKind.PROJECT: desired.project_name,
        FieldKind.TASK: desired.task_name,
        FieldKind.HOUR_TYPE: desired.hour_type_name,
    }

    identity_set = 0
    for field, text in wanted.items():
        # 直前の書き込みでホスト側が連鎖クリアしている可能性があるため毎回読み直す
        current = _current_row(host, row_index) or assignment.row
        if current.identity_text(field) == text:
            continue
        host.set_field(row_index, field, text)
        identity_set += 1
        await host.wait(_settle_ms(field, timing))

    days_set = 0
    for day_index in range(WEEKDAY_COUNT):
        hour = desired.hours[day_index]
        if not overwrite and abs(hour) < _ZERO_EPSILON:
            continue
        host.set_field(row_index, FieldKind.day(day_index), format_hour_value(hour))
        days_set += 1
    return identity_set, days_set


async def write_assignments(
    host: HostSurface,
    assignments: Sequence[Assignment],
    *,
    overwrite: bool,
    timing: TimingConfig,
) -> WriteResult:
    identity_total = 0
    days_total = 0
    with ProgressTracker(len(assignments)) as progress:
        for assignment in assignments:
            progress.start_item(assignment.desired.project_name)
            progress.set_postfix(row=assignment.row.row_index, kind=assignment.kind)
            identity_set, days_set = await write_assignment(
                host, assignment, overwrite=overwrite, timing=timing
            )
            identity_total += identity_set
            days_total += days_set
            logger.debug(
                "row=%d kind=%s combo=%s identity_set=%d days_set=%d",
                assignment.row.row_index,
                assignment.kind,
                assignment.desired.label(),
                identity_set,
                days_set,
            )
            progress.finish_item()
    return WriteResult(
        rows_written=len(assignments),
        identity_fields_set=identity_total,
        day_values_set=days_total,
    )


async def clear_untouched_rows(host: HostSurface, rows: Sequence[GridRow]) -> int:
    """Blank the day values of untouched rows that currently hold any. Returns rows cleared."""
    cleared = 0
    for planned in rows:
        row = _current_row(host, planned.row_index) or planned
        if not row.has_day_values:
            continue
        for day_index, value in enumerate(row.day_values):
            if value == "":
                continue
            host.set_field(row.row_index, FieldKind.day(day_index), "")
        cleared += 1
        logger.debug("cleared untouched row=%d", row.row_index)
    return cleared


async def trigger_recalculation(host: HostSurface, timing: TimingConfig) -> bool:
    """Press the host's recalculation control when present. Absence is not an error."""
    if not host.invoke_recalculate():
        logger.info("recalculate control not found; skipped")
        return False
    await host.wait(timing.recalculate_settle_ms)
    return True
