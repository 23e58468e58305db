from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

"""Action control lookup shared by host implementations.

A control is located by an ordered set of heuristics: first the machine
readable action marker (e.g. an onclick handler name), then the visible label
in English or Dutch. The first control matching the earliest heuristic wins.
"""

__all__ = [
    "ActionKind",
    "HostControl",
    "find_action_control",
    "default_controls",
]

ActionKind = Literal["addRow", "recalculate"]

_MARKERS: dict[str, str] = {
    "addRow": "addrow",
    "recalculate": "recalculate",
}

_LABEL_PATTERNS: dict[str, re.Pattern[str]] = {
    "addRow": re.compile(r"rij toevoegen|add row", re.IGNORECASE),
    "recalculate": re.compile(r"opnieuw berekenen|recalculate", re.IGNORECASE),
}


@dataclass(frozen=True)
class HostControl:
    """One clickable control of the host surface."""
    label: str = ""
    action: str = ""  # machine readable marker (onclick 相当)


def find_action_control(controls: Sequence[HostControl], kind: ActionKind) -> HostControl | None:
    marker = _MARKERS.get(kind)
    pattern = _LABEL_PATTERNS.get(kind)
    if marker is None or pattern is None:
        return None
    for control in controls:
        if marker in control.action.lower():
            return control
    for control in controls:
        if pattern.search(control.label):
            return control
    return None


def default_controls() -> list[HostControl]:
    return [
        HostControl(label="Add row", action="addrow()"),
        HostControl(label="Recalculate", action="recalculate()"),
    ]
