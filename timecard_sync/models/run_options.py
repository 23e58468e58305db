from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Any

"""Run options and timing configuration for one synchronization run.

RunOptions are the caller's switches (all booleans with explicit defaults).
TimingConfig holds the settle / poll constants; tests shrink or virtualize them.
"""

__all__ = [
    "RunOptions",
    "TimingConfig",
]

# 外部 JSON (camelCase) -> dataclass field
_OPTION_ALIASES: dict[str, str] = {
    "allowAddRows": "allow_add_rows",
    "overwriteRowHours": "overwrite_row_hours",
    "clearUntouchedRows": "clear_untouched_rows",
    "triggerRecalculation": "trigger_recalculation",
    "clickRecalculate": "trigger_recalculation",
    "dryRun": "dry_run",
}


@dataclass(frozen=True)
class RunOptions:
    """Switches recognized by the engine (defaults apply when unspecified)."""
    allow_add_rows: bool = True
    overwrite_row_hours: bool = True
    clear_untouched_rows: bool = False
    trigger_recalculation: bool = True
    dry_run: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> RunOptions:
        """Build options from a camelCase or snake_case mapping.

        Unknown keys raise ValueError; values must be real booleans.
        """
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        values: dict[str, bool] = {}
        for raw_key, value in data.items():
            key = _OPTION_ALIASES.get(raw_key, raw_key)
            if key not in known:
                raise ValueError(f"unknown run option: {raw_key}")
            if not isinstance(value, bool):
                raise ValueError(f"run option {raw_key} must be a boolean, got {type(value).__name__}")
            values[key] = value
        return cls(**values)

    def merged(self, **overrides: bool | None) -> RunOptions:
        """Return a copy with every non-None override applied (CLI flags)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


@dataclass(frozen=True)
class TimingConfig:
    """Settle delays and polling bounds, all in milliseconds."""
    project_settle_ms: int = 180
    task_settle_ms: int = 180
    hour_type_settle_ms: int = 120
    poll_interval_ms: int = 120
    poll_timeout_ms: int = 12000
    recalculate_settle_ms: int = 350

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> TimingConfig:
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown timing keys: {', '.join(unknown)}")
        return cls(**{k: int(v) for k, v in data.items()})
