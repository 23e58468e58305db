# Shared pytest fixtures
from __future__ import annotations

import json
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from timecard_sync.host.memory import InMemoryGridHost
from timecard_sync.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("TIMECARD_SYNC_CONFIG", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """options:
  allowAddRows: true
  overwriteRowHours: true
  clearUntouchedRows: false
  triggerRecalculation: true
  dryRun: false
timing:
  project_settle_ms: 180
  task_settle_ms: 180
  hour_type_settle_ms: 120
  poll_interval_ms: 120
  poll_timeout_ms: 12000
  recalculate_settle_ms: 350
workbook:
  sheet: Timecard
  max_rows: 20
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "sync.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def make_host() -> Callable[..., InMemoryGridHost]:
    def _make(rows: Any = 0, **kwargs: Any) -> InMemoryGridHost:
        return InMemoryGridHost(rows, **kwargs)

    return _make


@pytest.fixture()
def grid_workbook(temp_workdir: Path) -> Path:
    """data/grid.xlsx: one matching row for Alpha/Build/Straight and two blank rows."""
    columns = ["Project", "Task", "Hour Type", "Mon", "Tue", "Wed", "Thu", "Fri"]
    frame = pd.DataFrame(
        [
            ["Alpha", "Build", "Straight", 1, 1, 1, 1, 1],
            ["", "", "", "", "", "", "", ""],
            ["", "", "", "", "", "", "", ""],
        ],
        columns=columns,
    )
    path = temp_workdir / "data" / "grid.xlsx"
    frame.to_excel(path, sheet_name="Timecard", index=False)
    return path


@pytest.fixture()
def payload_file(temp_workdir: Path) -> Path:
    """data/week.json: two items (one matching the grid, one new)."""
    path = temp_workdir / "data" / "week.json"
    path.write_text(
        json.dumps(
            {
                "rows": [
                    {"projectName": "Alpha", "taskName": "Build", "hourTypeName": "Straight", "hours": [8, 8, 8, 8, 8]},
                    {"projectName": "Beta", "taskName": "Test", "hourTypeName": "Overtime", "hours": [0, 2.5]},
                ]
            }
        ),
        encoding="utf-8",
    )
    return path
