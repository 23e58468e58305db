from __future__ import annotations

import pytest

from timecard_sync.host.memory import InMemoryGridHost
from timecard_sync.models.grid_row import HostRow
from timecard_sync.services.errors import NoRowsDetected
from timecard_sync.services.inventory import count_rows, take_inventory, to_grid_row


def test_to_grid_row_trims_and_classifies():
    row = to_grid_row(HostRow(3, " Alpha ", None, "  ", (" 8 ", None, "", "1", "2", "9", "9")))
    assert row.row_index == 3
    assert (row.project_text, row.task_text, row.hour_type_text) == ("Alpha", "", "")
    assert row.day_values == ("8", "", "", "1", "2")
    assert not row.is_empty


def test_whitespace_only_row_is_empty():
    row = to_grid_row(HostRow(0, "  ", "", None, ("", " ", "", "", "")))
    assert row.is_empty
    assert not row.has_day_values


def test_row_with_only_hours_is_not_empty():
    row = to_grid_row(HostRow(0, day_values=("", "", "4")))
    assert not row.is_empty
    assert row.day_values == ("", "", "4", "", "")


def test_weekend_values_do_not_affect_emptiness():
    """土日の値は在庫上は無視される."""
    row = to_grid_row(HostRow(0, day_values=("", "", "", "", "", "8", "8")))
    assert row.is_empty


def test_take_inventory_orders_by_row_index():
    host = InMemoryGridHost(
        [
            {"row_index": 5, "project": "B"},
            {"row_index": 2, "project": "A"},
        ]
    )
    rows = take_inventory(host)
    assert [r.row_index for r in rows] == [2, 5]
    assert count_rows(host) == 2


def test_take_inventory_without_rows_raises():
    with pytest.raises(NoRowsDetected) as exc:
        take_inventory(InMemoryGridHost())
    assert exc.value.describe().startswith("NoRowsDetected: ")


def test_in_memory_host_satisfies_host_surface():
    from timecard_sync.host.interface import HostSurface

    assert isinstance(InMemoryGridHost(), HostSurface)
