from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.run_options import RunOptions, TimingConfig

"""Config loader for timecard-sync.

Responsibilities:
- Load YAML (default config/sync.yml)
- Validate against contracts/config_schema.json (unknown keys rejected)
- Apply defaults for every missing section
"""

# timecard_sync/config/loader.py -> timecard_sync/config -> timecard_sync
_package_root = Path(__file__).resolve().parent.parent
SCHEMA_PATH = _package_root / "contracts" / "config_schema.json"

DEFAULT_CONFIG_PATH = Path("config/sync.yml")
DEFAULT_SHEET = "Timecard"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class WorkbookConfig:
    sheet: str = DEFAULT_SHEET
    max_rows: int | None = None  # None = 無制限


@dataclass(frozen=True)
class SyncConfig:
    options: RunOptions = field(default_factory=RunOptions)
    timing: TimingConfig = field(default_factory=TimingConfig)
    workbook: WorkbookConfig = field(default_factory=WorkbookConfig)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing/invalid, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path) -> SyncConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config validation failed: top level must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    try:
        options = RunOptions.from_mapping(data.get("options"))
        timing = TimingConfig.from_mapping(data.get("timing"))
    except ValueError as e:  # schema で大半は弾かれる想定
        raise ConfigError(f"config validation failed: {e}") from e

    wb_raw = data.get("workbook") or {}
    workbook = WorkbookConfig(
        sheet=wb_raw.get("sheet", DEFAULT_SHEET),
        max_rows=wb_raw.get("max_rows"),
    )
    return SyncConfig(options=options, timing=timing, workbook=workbook)
