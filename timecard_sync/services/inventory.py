from __future__ import annotations

import logging

from ..host.interface import HostSurface
from ..models.desired_item import WEEKDAY_COUNT
from ..models.grid_row import GridRow, HostRow
from .errors import NoRowsDetected

"""Grid inventory: host rows -> canonical GridRow snapshot.

A fresh list is built on every pass; row indexes are not assumed stable across
a capacity expansion.
"""

__all__ = [
    "take_inventory",
    "to_grid_row",
    "count_rows",
]

logger = logging.getLogger(__name__)


def _clean(value: str | None) -> str:
    return "" if value is None else str(value).strip()


def to_grid_row(raw: HostRow) -> GridRow:
    """Trim text, keep the Mon..Fri day values and classify emptiness."""
    days = [_clean(v) for v in raw.day_values[:WEEKDAY_COUNT]]
    days += [""] * (WEEKDAY_COUNT - len(days))
    project = _clean(raw.project)
    task = _clean(raw.task)
    hour_type = _clean(raw.hour_type)
    is_empty = not (project or task or hour_type) and not any(days)
    return GridRow(
        row_index=raw.row_index,
        project_text=project,
        task_text=task,
        hour_type_text=hour_type,
        day_values=tuple(days),
        is_empty=is_empty,
    )


def take_inventory(host: HostSurface) -> list[GridRow]:
    """Read every row the host exposes, in row-index order.

    Raises:
        NoRowsDetected: when the host exposes zero rows
    """
    rows = sorted((to_grid_row(r) for r in host.list_rows()), key=lambda r: r.row_index)
    if not rows:
        raise NoRowsDetected()
    logger.debug(
        "inventory rows=%d empty=%d",
        len(rows),
        sum(1 for r in rows if r.is_empty),
    )
    return rows


def count_rows(host: HostSurface) -> int:
    return len(host.list_rows())
