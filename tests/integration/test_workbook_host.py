from __future__ import annotations

import asyncio
from pathlib import Path

import pandas as pd
import pytest

from timecard_sync.host.workbook import WorkbookError, WorkbookGridHost, read_grid_sheet
from timecard_sync.models.grid_row import FieldKind
from timecard_sync.models.run_options import RunOptions
from timecard_sync.services.orchestrator import SyncEngine


def _write_grid(path: Path, rows: list[dict], *, sheet: str = "Timecard", extra_sheet: bool = False) -> Path:
    frame = pd.DataFrame(rows, columns=["Project", "Task", "Hour Type", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun", "Note"])
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=sheet, index=False)
        if extra_sheet:
            pd.DataFrame({"keep": [1, 2]}).to_excel(writer, sheet_name="Other", index=False)
    return path


def _blank(note: str = "") -> dict:
    return {"Project": "", "Task": "", "Hour Type": "", "Note": note}


def test_load_reads_rows_as_text(tmp_path: Path):
    path = _write_grid(
        tmp_path / "grid.xlsx",
        [{"Project": "Alpha", "Task": "Build", "Hour Type": "Straight", "Mon": 8, "Tue": 7.5}, _blank()],
    )
    host = WorkbookGridHost.load(path)
    rows = host.list_rows()
    assert len(rows) == 2
    assert (rows[0].project, rows[0].task, rows[0].hour_type) == ("Alpha", "Build", "Straight")
    assert rows[0].day_values[:2] == ("8", "7.5")
    assert rows[1].project == ""


def test_sync_and_save_round_trip(tmp_path: Path):
    path = _write_grid(tmp_path / "grid.xlsx", [_blank("keep me"), _blank()], extra_sheet=True)
    host = WorkbookGridHost.load(path, max_rows=5)
    payload = [
        {"projectName": "Alpha", "taskName": "Build", "hourTypeName": "Straight", "hours": [8, 8, 8, 8, 4.5]},
        {"projectName": "Beta", "taskName": "Test", "hourTypeName": "Straight", "hours": [1]},
        {"projectName": "Gamma", "taskName": "Ops", "hourTypeName": "Overtime", "hours": [0, 2]},
    ]
    outcome = asyncio.run(SyncEngine(host).run(payload, RunOptions()))
    assert outcome.ok, outcome.error
    assert outcome.stats.rows_added == 1

    saved = host.save()
    assert saved == path
    frame = pd.read_excel(path, sheet_name="Timecard", dtype=str, keep_default_na=False)
    assert list(frame["Project"]) == ["Alpha", "Beta", "Gamma"]
    assert list(frame["Fri"]) == ["4.5", "", ""]
    assert list(frame["Total"]) == ["36.5", "1", "2"]
    # 既存の他列・他シートは保持
    assert frame["Note"][0] == "keep me"
    assert list(pd.read_excel(path, sheet_name="Other")["keep"]) == [1, 2]


def test_save_to_new_output_path(tmp_path: Path):
    path = _write_grid(tmp_path / "grid.xlsx", [_blank()])
    host = WorkbookGridHost.load(path)
    host.set_field(0, FieldKind.PROJECT, "Alpha")
    out = host.save(tmp_path / "out" / "result.xlsx")
    assert out.exists()
    assert pd.read_excel(out, sheet_name="Timecard", dtype=str, keep_default_na=False)["Project"][0] == "Alpha"
    # 元ファイルは未変更
    assert pd.read_excel(path, sheet_name="Timecard", dtype=str, keep_default_na=False)["Project"][0] == ""


def test_dutch_headers_accepted(tmp_path: Path):
    frame = pd.DataFrame(
        [{"Project": "A", "Taak": "T", "Soort": "H", "Ma": 1, "Di": "", "Wo": "", "Do": "", "Vr": 2}]
    )
    path = tmp_path / "nl.xlsx"
    frame.to_excel(path, sheet_name="Timecard", index=False)
    row = WorkbookGridHost.load(path).list_rows()[0]
    assert (row.task, row.hour_type) == ("T", "H")
    assert row.day_values[:5] == ("1", "", "", "", "2")


def test_missing_workbook_or_sheet(tmp_path: Path):
    with pytest.raises(WorkbookError, match="workbook not found"):
        read_grid_sheet(tmp_path / "missing.xlsx", "Timecard")
    path = _write_grid(tmp_path / "grid.xlsx", [_blank()])
    with pytest.raises(WorkbookError, match="sheet not found"):
        WorkbookGridHost.load(path, "Week 42")


def test_missing_columns_rejected(tmp_path: Path):
    path = tmp_path / "bad.xlsx"
    pd.DataFrame([{"Project": "A", "Mon": 1}]).to_excel(path, sheet_name="Timecard", index=False)
    with pytest.raises(WorkbookError, match="missing identity columns: task, hour_type"):
        WorkbookGridHost.load(path)
