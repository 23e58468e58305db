from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..models.grid_row import FieldKind, HostRow
from .controls import HostControl, default_controls, find_action_control

"""In-memory host surface with a virtual clock.

Behaves like the booking grid the engine targets, without a browser:
- rows are only growable; an add-row click materializes a new blank row after
  `add_row_delay_ms` of (virtual) time, unless `max_rows` is reached
- with `cascade_identity`, changing the project blanks task and hour type and
  changing the task blanks the hour type (dependent lookups)
- recalculation fills each row's total from its day values

wait()/wait_until() advance the virtual clock instead of sleeping, so tests and
the workbook CLI run instantly and deterministically.
"""

__all__ = [
    "InMemoryGridHost",
    "Mutation",
]

logger = logging.getLogger(__name__)

_DAY_SLOTS = 7  # host grid carries Mon..Sun, engine only touches Mon..Fri


@dataclass
class _Row:
    row_index: int
    project: str = ""
    task: str = ""
    hour_type: str = ""
    days: list[str] = field(default_factory=lambda: [""] * _DAY_SLOTS)
    total: str = ""

    def snapshot(self) -> HostRow:
        return HostRow(
            row_index=self.row_index,
            project=self.project,
            task=self.task,
            hour_type=self.hour_type,
            day_values=tuple(self.days),
        )


@dataclass(frozen=True)
class Mutation:
    """One recorded host mutation (field write or control click)."""
    at_ms: int
    action: str  # "set" | "addRow" | "recalculate"
    row_index: int | None = None
    field: FieldKind | None = None
    text: str | None = None


class InMemoryGridHost:
    """Deterministic HostSurface implementation backed by a list of rows."""

    def __init__(
        self,
        rows: Iterable[HostRow | Mapping[str, Any]] | int = 0,
        *,
        max_rows: int | None = None,
        add_row_delay_ms: int = 0,
        controls: list[HostControl] | None = None,
        cascade_identity: bool = False,
    ) -> None:
        self.max_rows = max_rows
        self.add_row_delay_ms = add_row_delay_ms
        self.controls = default_controls() if controls is None else list(controls)
        self.cascade_identity = cascade_identity
        self.clock_ms = 0
        self.mutations: list[Mutation] = []
        self.recalculations = 0
        self._rows: list[_Row] = []
        self._scheduled: list[int] = []  # due times (ms) of requested rows

        if isinstance(rows, int):
            for _ in range(rows):
                self._append_blank()
        else:
            for entry in rows:
                self._rows.append(self._row_from_entry(entry))

    # ---- HostSurface -------------------------------------------------

    def list_rows(self) -> list[HostRow]:
        self._materialize_due_rows()
        return [row.snapshot() for row in self._rows]

    def set_field(self, row_index: int, field: FieldKind, text: str) -> None:
        row = self._row(row_index)
        self.mutations.append(Mutation(self.clock_ms, "set", row_index, field, text))
        if field is FieldKind.PROJECT:
            changed = row.project != text
            row.project = text
            if changed and self.cascade_identity:
                row.task = ""
                row.hour_type = ""
        elif field is FieldKind.TASK:
            changed = row.task != text
            row.task = text
            if changed and self.cascade_identity:
                row.hour_type = ""
        elif field is FieldKind.HOUR_TYPE:
            row.hour_type = text
        else:
            row.days[int(field.value[3:])] = text

    def invoke_add_row(self) -> bool:
        if find_action_control(self.controls, "addRow") is None:
            return False
        self.mutations.append(Mutation(self.clock_ms, "addRow"))
        total = len(self._rows) + len(self._scheduled)
        if self.max_rows is not None and total >= self.max_rows:
            # ボタンは押せたがホスト側で行が増えない
            logger.debug("add row ignored: max_rows=%d reached", self.max_rows)
            return True
        self._scheduled.append(self.clock_ms + self.add_row_delay_ms)
        return True

    def invoke_recalculate(self) -> bool:
        if find_action_control(self.controls, "recalculate") is None:
            return False
        self.mutations.append(Mutation(self.clock_ms, "recalculate"))
        self.recalculations += 1
        for row in self._rows:
            row.total = _format_total(row.days)
        return True

    async def wait(self, ms: int) -> None:
        self.clock_ms += max(0, int(ms))
        await asyncio.sleep(0)

    async def wait_until(self, predicate: Callable[[], bool], interval_ms: int, timeout_ms: int) -> bool:
        started = self.clock_ms
        while self.clock_ms - started <= timeout_ms:
            if predicate():
                return True
            await self.wait(interval_ms)
        return False

    # ---- inspection helpers -----------------------------------------

    @property
    def row_count(self) -> int:
        self._materialize_due_rows()
        return len(self._rows)

    def row(self, row_index: int) -> HostRow:
        return self._row(row_index).snapshot()

    def total(self, row_index: int) -> str:
        return self._row(row_index).total

    def state(self) -> tuple[tuple[Any, ...], ...]:
        """Comparable snapshot of every row (identity, days, total)."""
        self._materialize_due_rows()
        return tuple(
            (r.row_index, r.project, r.task, r.hour_type, tuple(r.days), r.total) for r in self._rows
        )

    def field_writes(self) -> list[Mutation]:
        return [m for m in self.mutations if m.action == "set"]

    # ---- internals ---------------------------------------------------

    def _row(self, row_index: int) -> _Row:
        self._materialize_due_rows()
        for row in self._rows:
            if row.row_index == row_index:
                return row
        raise KeyError(f"no host row with index {row_index}")

    def _next_index(self) -> int:
        return max((r.row_index for r in self._rows), default=-1) + 1

    def _append_blank(self) -> None:
        self._rows.append(_Row(row_index=self._next_index()))

    def _materialize_due_rows(self) -> None:
        due = [t for t in self._scheduled if t <= self.clock_ms]
        if not due:
            return
        self._scheduled = [t for t in self._scheduled if t > self.clock_ms]
        for _ in due:
            self._append_blank()

    def _row_from_entry(self, entry: HostRow | Mapping[str, Any]) -> _Row:
        if isinstance(entry, HostRow):
            days = list(entry.day_values)
            row_index = entry.row_index
            project, task, hour_type = entry.project, entry.task, entry.hour_type
        else:
            days = list(entry.get("days", ()))
            row_index = entry.get("row_index", self._next_index())
            project, task, hour_type = entry.get("project"), entry.get("task"), entry.get("hour_type")
        days = ["" if v is None else str(v) for v in days[:_DAY_SLOTS]]
        days += [""] * (_DAY_SLOTS - len(days))
        return _Row(
            row_index=int(row_index),
            project=project or "",
            task=task or "",
            hour_type=hour_type or "",
            days=days,
        )


def _format_total(days: list[str]) -> str:
    total = 0.0
    for value in days:
        try:
            total += float(value) if value.strip() else 0.0
        except ValueError:
            continue
    total = round(total, 2)
    if total == 0:
        return ""
    return str(int(total)) if total.is_integer() else f"{total:g}"
