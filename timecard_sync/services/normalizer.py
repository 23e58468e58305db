from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema.exceptions import ValidationError

from ..models.desired_item import WEEKDAY_COUNT, ComboKey, DesiredItem
from .errors import EmptyPayload, InvalidPayload
from .matcher import combo_key

"""Payload normalizer: desired timesheet payload -> deduplicated DesiredItems.

Accepted shapes:
- flat:   [ {projectName|project, taskName|task, hourTypeName|hourType, hours: [...]}, ... ]
          or { "rows": [ ... ] }
- nested: { "days": [ {projects: [{projectName, tasks: [{taskName,
          hourTypes: [{hourTypeName, hours}]}]}]}, ... ] }  (index = weekday)

Entries missing project/task/hour type (after trim) are dropped silently.
Duplicate combos are merged by elementwise summation, first-seen order kept.
"""

__all__ = [
    "PAYLOAD_SCHEMA_PATH",
    "parse_payload",
    "decode_payload",
    "flatten_rows",
    "flatten_days",
]

logger = logging.getLogger(__name__)

# timecard_sync/services/normalizer.py -> timecard_sync
_package_root = Path(__file__).resolve().parent.parent
PAYLOAD_SCHEMA_PATH = _package_root / "contracts" / "payload_schema.json"

_PROJECT_KEYS = ("projectName", "project", "project_name")
_TASK_KEYS = ("taskName", "task", "task_name")
_HOUR_TYPE_KEYS = ("hourTypeName", "hourType", "hour_type_name", "hour_type")

_FULL_WEEK = 7

_schema_cache: dict[str, Any] | None = None


def _payload_schema() -> dict[str, Any]:
    global _schema_cache
    if _schema_cache is None:
        _schema_cache = json.loads(PAYLOAD_SCHEMA_PATH.read_text(encoding="utf-8"))
    return _schema_cache


def decode_payload(raw: str | bytes | Any) -> Any:
    """Decode JSON text (str/bytes) and validate the top-level shape.

    Already-decoded objects (list/dict) are validated as-is.

    Raises:
        InvalidPayload: blank input, malformed JSON or unknown top-level shape
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise InvalidPayload(f"payload is not UTF-8 text: {e}") from e
    if isinstance(raw, str):
        if not raw.strip():
            raise InvalidPayload("Paste a JSON payload first.")
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidPayload(f"Invalid JSON: {e}") from e
    else:
        document = raw

    try:
        jsonschema.validate(document, _payload_schema())
    except ValidationError as e:
        raise InvalidPayload(
            "Unsupported payload shape: expected rows[] (or a bare array) or days[]"
        ) from e
    return document


def parse_payload(raw: str | bytes | Any) -> list[DesiredItem]:
    """Parse a desired payload into deduplicated DesiredItems.

    Raises:
        InvalidPayload: see decode_payload
        EmptyPayload: no usable item survived normalization
    """
    document = decode_payload(raw)

    if isinstance(document, list):
        items = flatten_rows(document)
    elif isinstance(document.get("rows"), list):
        # rows 優先 (rows と days 両方ある場合)
        items = flatten_rows(document["rows"])
    else:
        items = flatten_days(document["days"])

    if not items:
        raise EmptyPayload()
    logger.debug(
        "payload normalized items=%d hours=%.2f",
        len(items),
        sum(item.total_hours for item in items),
    )
    return items


class _Accumulator:
    """Insertion-ordered combo -> summed hours."""

    def __init__(self) -> None:
        self._names: dict[ComboKey, tuple[str, str, str]] = {}
        self._hours: dict[ComboKey, list[float]] = {}

    def add(self, project: str, task: str, hour_type: str, hours: Iterable[tuple[int, float]]) -> None:
        key = combo_key(project, task, hour_type)
        if key not in self._names:
            self._names[key] = (project, task, hour_type)
            self._hours[key] = [0.0] * WEEKDAY_COUNT
        slots = self._hours[key]
        for day_index, value in hours:
            slots[day_index] += value

    def items(self) -> list[DesiredItem]:
        out: list[DesiredItem] = []
        for key, (project, task, hour_type) in self._names.items():
            out.append(
                DesiredItem(
                    key=key,
                    project_name=project,
                    task_name=task,
                    hour_type_name=hour_type,
                    hours=tuple(self._hours[key]),
                )
            )
        return out


def flatten_rows(rows: list[Any]) -> list[DesiredItem]:
    """Flatten the row-list shape (hours arrays are positional per weekday)."""
    acc = _Accumulator()
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        names = _identity(row, _PROJECT_KEYS, _TASK_KEYS, _HOUR_TYPE_KEYS)
        if names is None:
            continue
        hours = _hour_slots(row.get("hours"))
        acc.add(*names, hours=enumerate(hours))
    return acc.items()


def flatten_days(days: list[Any]) -> list[DesiredItem]:
    """Flatten the nested day -> project -> task -> hour type tree."""
    acc = _Accumulator()
    for day_index, day_node in enumerate(days):
        if day_index >= WEEKDAY_COUNT:
            # 週末ノードは対象外 (Mon..Fri のみ)
            break
        if not isinstance(day_node, Mapping) or not isinstance(day_node.get("projects"), list):
            continue
        for project_node in day_node["projects"]:
            if not isinstance(project_node, Mapping) or not isinstance(project_node.get("tasks"), list):
                continue
            for task_node in project_node["tasks"]:
                if not isinstance(task_node, Mapping) or not isinstance(task_node.get("hourTypes"), list):
                    continue
                for hour_type_node in task_node["hourTypes"]:
                    if not isinstance(hour_type_node, Mapping):
                        continue
                    project = _text(project_node.get("projectName"))
                    task = _text(task_node.get("taskName"))
                    hour_type = _text(hour_type_node.get("hourTypeName"))
                    if not project or not task or not hour_type:
                        continue
                    value = _to_hours(hour_type_node.get("hours"))
                    acc.add(project, task, hour_type, hours=[(day_index, value)])
    return acc.items()


def _identity(
    row: Mapping[str, Any],
    project_keys: tuple[str, ...],
    task_keys: tuple[str, ...],
    hour_type_keys: tuple[str, ...],
) -> tuple[str, str, str] | None:
    project = _text(_first_present(row, project_keys))
    task = _text(_first_present(row, task_keys))
    hour_type = _text(_first_present(row, hour_type_keys))
    if not project or not task or not hour_type:
        return None
    return project, task, hour_type


def _first_present(row: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _hour_slots(hours: Any) -> list[float]:
    """Pad/truncate to 5 slots (7 when the source carries weekend values), keep Mon..Fri."""
    values = hours if isinstance(hours, list) else []
    width = _FULL_WEEK if len(values) > WEEKDAY_COUNT else WEEKDAY_COUNT
    padded = [_to_hours(values[i]) if i < len(values) else 0.0 for i in range(width)]
    return padded[:WEEKDAY_COUNT]


def _to_hours(value: Any) -> float:
    """Coerce one hour value; non-numeric, non-finite, bool and negative -> 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if not isinstance(value, (int, float, str)):
        return 0.0
    text = value.strip() if isinstance(value, str) else value
    if text == "":
        return 0.0
    try:
        number = float(text)
    except (ValueError, OverflowError):
        # 桁数の大きすぎる整数は float に収まらない
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number
