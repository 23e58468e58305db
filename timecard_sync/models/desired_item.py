from __future__ import annotations

from dataclasses import dataclass

"""DesiredItem model for the timecard reconciliation engine.

A DesiredItem is one normalized (project, task, hour type) line item taken from
the desired timesheet payload, carrying the Monday..Friday hours.
"""

__all__ = [
    "WEEKDAY_COUNT",
    "ComboKey",
    "DesiredItem",
]

WEEKDAY_COUNT = 5  # Mon..Fri

ComboKey = tuple[str, str, str]  # (project, task, hour_type) 正規化済


@dataclass(frozen=True)
class DesiredItem:
    """One deduplicated line item of the desired payload.

    `key` is the normalized identity of the combo; display names keep the
    first-seen spelling (trimmed). Hours are non-negative, one slot per weekday.
    """
    key: ComboKey
    project_name: str
    task_name: str
    hour_type_name: str
    hours: tuple[float, ...]  # len == WEEKDAY_COUNT

    @property
    def total_hours(self) -> float:
        return sum(self.hours)

    def label(self) -> str:
        return f"{self.project_name} / {self.task_name} / {self.hour_type_name}"
