from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd

from ..models.grid_row import HostRow
from .memory import InMemoryGridHost

"""Workbook-backed host surface (sandbox for the CLI).

The grid lives in one sheet of an .xlsx file: a header row followed by one row
per timecard line. Recognized headers (case-insensitive):
  identity: Project | Task (Taak) | Hour Type (Hour type, HourType, Soort)
  days:     Mon Tue Wed Thu Fri [Sat Sun]  (Dutch: Ma Di Wo Do Vr [Za Zo])
  optional: Total (Totaal), filled by recalculation
Other columns are kept untouched on save.
"""

__all__ = [
    "WorkbookError",
    "WorkbookGridHost",
    "read_grid_sheet",
]


class WorkbookError(Exception):
    """Raised when the workbook / sheet / header cannot be used as a grid."""


_IDENTITY_HEADERS: dict[str, tuple[str, ...]] = {
    "project": ("project", "projectname"),
    "task": ("task", "taak", "taskname"),
    "hour_type": ("hour type", "hourtype", "hour_type", "soort"),
}
_DAY_HEADERS: tuple[tuple[str, ...], ...] = (
    ("mon", "monday", "ma"),
    ("tue", "tuesday", "di"),
    ("wed", "wednesday", "wo"),
    ("thu", "thursday", "do"),
    ("fri", "friday", "vr"),
    ("sat", "saturday", "za"),
    ("sun", "sunday", "zo"),
)
_TOTAL_HEADERS = ("total", "totaal")


def _norm_header(value: Any) -> str:
    return " ".join(str(value).strip().lower().split())


def _find_column(columns: list[str], aliases: tuple[str, ...]) -> str | None:
    for col in columns:
        if _norm_header(col) in aliases:
            return col
    return None


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def read_grid_sheet(path: Path, sheet: str) -> pd.DataFrame:
    """Read the grid sheet as strings (no NaN conversion)."""
    if not path.exists():
        raise WorkbookError(f"workbook not found: {path}")
    try:
        xls = pd.ExcelFile(path)
    except Exception as e:
        raise WorkbookError(f"cannot open workbook {path}: {e}") from e
    if sheet not in [str(name) for name in xls.sheet_names]:
        raise WorkbookError(f"sheet not found: {sheet} (available: {', '.join(map(str, xls.sheet_names))})")
    return xls.parse(sheet, dtype=str, keep_default_na=False)


class WorkbookGridHost(InMemoryGridHost):
    """InMemoryGridHost loaded from and saved back to a workbook sheet."""

    def __init__(
        self,
        frame: pd.DataFrame,
        *,
        path: Path | None = None,
        sheet: str = "Timecard",
        max_rows: int | None = None,
    ) -> None:
        self.path = path
        self.sheet = sheet
        self._frame = frame
        columns = [str(c) for c in frame.columns]
        self._identity_cols: dict[str, str] = {}
        missing = []
        for key, aliases in _IDENTITY_HEADERS.items():
            col = _find_column(columns, aliases)
            if col is None:
                missing.append(key)
            else:
                self._identity_cols[key] = col
        if missing:
            raise WorkbookError(f"missing identity columns: {', '.join(missing)}")
        self._day_cols: list[str | None] = [_find_column(columns, aliases) for aliases in _DAY_HEADERS]
        if any(col is None for col in self._day_cols[:5]):
            raise WorkbookError("missing weekday columns: expected Mon..Fri")
        self._total_col = _find_column(columns, _TOTAL_HEADERS)

        rows: list[HostRow] = []
        for position, record in enumerate(frame.to_dict(orient="records")):
            rows.append(
                HostRow(
                    row_index=position,
                    project=_cell(record.get(self._identity_cols["project"])),
                    task=_cell(record.get(self._identity_cols["task"])),
                    hour_type=_cell(record.get(self._identity_cols["hour_type"])),
                    day_values=tuple(
                        _cell(record.get(col)) if col is not None else "" for col in self._day_cols
                    ),
                )
            )
        super().__init__(rows, max_rows=max_rows)

    @classmethod
    def load(cls, path: Path, sheet: str = "Timecard", *, max_rows: int | None = None) -> WorkbookGridHost:
        return cls(read_grid_sheet(path, sheet), path=path, sheet=sheet, max_rows=max_rows)

    def to_frame(self) -> pd.DataFrame:
        """Current grid as a DataFrame with the original column order."""
        columns = [str(c) for c in self._frame.columns]
        if self._total_col is None and self.recalculations:
            self._total_col = "Total"
            columns.append(self._total_col)
        originals = self._frame.to_dict(orient="records")
        records: list[dict[str, Any]] = []
        for row in self.list_rows():
            base = dict(originals[row.row_index]) if row.row_index < len(originals) else {}
            record = {col: base.get(col, "") for col in columns}
            record[self._identity_cols["project"]] = row.project or ""
            record[self._identity_cols["task"]] = row.task or ""
            record[self._identity_cols["hour_type"]] = row.hour_type or ""
            for col, value in zip(self._day_cols, row.day_values):
                if col is not None:
                    record[col] = _to_cell_value(value)
            if self._total_col is not None and self.recalculations:
                record[self._total_col] = _to_cell_value(self.total(row.row_index))
            records.append(record)
        return pd.DataFrame(records, columns=columns)

    def save(self, path: Path | None = None) -> Path:
        """Write the grid back (replacing only the grid sheet when the file exists)."""
        target = path or self.path
        if target is None:
            raise WorkbookError("no output path for workbook")
        frame = self.to_frame()
        if target.exists():
            with pd.ExcelWriter(target, engine="openpyxl", mode="a", if_sheet_exists="replace") as writer:
                frame.to_excel(writer, sheet_name=self.sheet, index=False)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            with pd.ExcelWriter(target, engine="openpyxl") as writer:
                frame.to_excel(writer, sheet_name=self.sheet, index=False)
        return target


def _to_cell_value(text: str | None) -> Any:
    """Numeric strings go back as numbers so the sheet stays summable."""
    if text is None or text == "":
        return ""
    try:
        number = float(text)
    except ValueError:
        return text
    return int(number) if number.is_integer() else number
