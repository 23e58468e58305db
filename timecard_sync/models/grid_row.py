from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Grid row models for the host entry surface.

HostRow is the raw snapshot a host hands out; GridRow is the canonical,
classified form produced by the grid inventory on every pass.
"""

__all__ = [
    "FieldKind",
    "GridRow",
    "HostRow",
    "DAY_FIELDS",
]


class FieldKind(Enum):
    """Writable field of one host row.

    Identity fields are written in declaration order (project -> task -> hour type)
    because the host resolves each one from the previous.
    """
    PROJECT = "project"
    TASK = "task"
    HOUR_TYPE = "hourType"
    DAY0 = "day0"
    DAY1 = "day1"
    DAY2 = "day2"
    DAY3 = "day3"
    DAY4 = "day4"

    @classmethod
    def day(cls, index: int) -> FieldKind:
        if not 0 <= index < len(DAY_FIELDS):
            raise ValueError(f"day index out of range: {index}")
        return DAY_FIELDS[index]

    @property
    def is_day(self) -> bool:
        return self.value.startswith("day")


DAY_FIELDS: tuple[FieldKind, ...] = (
    FieldKind.DAY0,
    FieldKind.DAY1,
    FieldKind.DAY2,
    FieldKind.DAY3,
    FieldKind.DAY4,
)


@dataclass(frozen=True)
class HostRow:
    """Raw row snapshot as exposed by a host (values may be None / untrimmed)."""
    row_index: int  # host ordinal at read time
    project: str | None = None
    task: str | None = None
    hour_type: str | None = None
    day_values: tuple[str | None, ...] = ()  # 7 slots allowed, only Mon..Fri used


@dataclass(frozen=True)
class GridRow:
    """Canonical row after inventory (text trimmed, five day values)."""
    row_index: int
    project_text: str
    task_text: str
    hour_type_text: str
    day_values: tuple[str, ...]
    is_empty: bool

    @property
    def has_day_values(self) -> bool:
        return any(value != "" for value in self.day_values)

    def identity_text(self, field: FieldKind) -> str:
        if field is FieldKind.PROJECT:
            return self.project_text
        if field is FieldKind.TASK:
            return self.task_text
        if field is FieldKind.HOUR_TYPE:
            return self.hour_type_text
        raise ValueError(f"not an identity field: {field}")
