from __future__ import annotations

from ..models.run_outcome import RunStats

"""Message and SUMMARY line rendering for run outcomes.

The outcome message is multi-line, meant for the person who triggered the run.
The SUMMARY line is a single key=value line for logs:
SUMMARY items={n} imported={n} matched={n} filled={n} pending={n} added={n}
cleared={n} recalculated={yes|no} dry_run={yes|no}
"""

__all__ = [
    "render_dry_run_message",
    "render_success_message",
    "render_summary_line",
]


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


def render_dry_run_message(stats: RunStats, *, allow_add_rows: bool) -> str:
    lines = [
        "Dry run completed.",
        f"Rows in payload: {stats.desired_items}",
        f"Matched rows now: {stats.matched}",
        f"Rows to fill from empty slots: {stats.filled_from_empty}",
        f"Rows still missing: {stats.pending}",
    ]
    if stats.pending > 0 and allow_add_rows:
        lines.append(f'Would click "Add row" {stats.pending} time(s).')
    return "\n".join(lines)


def render_success_message(stats: RunStats) -> str:
    return "\n".join(
        [
            "Import completed.",
            f"Rows imported: {stats.imported}",
            f"Matched existing rows: {stats.matched}",
            f"Used empty/new rows: {stats.filled_from_empty}",
            f"Rows added: {stats.rows_added}",
            f"Untouched rows cleared: {stats.rows_cleared}",
            f"Recalculate clicked: {_yes_no(stats.recalculated)}",
            "Tip: review the values and save the timecard yourself.",
        ]
    )


def render_summary_line(stats: RunStats) -> str:
    """Render the SUMMARY line (with prefix) for one run.

    >>> render_summary_line(RunStats(desired_items=1, imported=1, filled_from_empty=1))
    'SUMMARY items=1 imported=1 matched=0 filled=1 pending=0 added=0 cleared=0 recalculated=no dry_run=no'
    """
    return (
        f"SUMMARY items={stats.desired_items} "
        f"imported={stats.imported} "
        f"matched={stats.matched} "
        f"filled={stats.filled_from_empty} "
        f"pending={stats.pending} "
        f"added={stats.rows_added} "
        f"cleared={stats.rows_cleared} "
        f"recalculated={_yes_no(stats.recalculated)} "
        f"dry_run={_yes_no(stats.dry_run)}"
    )
