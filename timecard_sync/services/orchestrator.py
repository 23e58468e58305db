from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any, Generic, TypeVar

from ..host.interface import HostSurface
from ..models.desired_item import DesiredItem
from ..models.grid_row import GridRow
from ..models.plan import ReconciliationPlan
from ..models.run_options import RunOptions, TimingConfig
from ..models.run_outcome import RunOutcome, RunState, RunStats
from .capacity import expand_capacity
from .errors import (
    UNEXPECTED_FAILURE,
    CapacityStillInsufficient,
    InsufficientCapacity,
    RunInProgress,
    SyncError,
)
from .inventory import take_inventory
from .matcher import Matcher, equivalent
from .normalizer import parse_payload
from .reconciler import build_plan
from .summary import render_dry_run_message, render_success_message
from .writer import clear_untouched_rows, trigger_recalculation, write_assignments

"""Run orchestration for the timecard reconciliation engine.

One forward-only run:
  PARSING -> INVENTORYING -> PLANNING
    -> DRY_RUN_EXIT (dry run: counts only, no mutation)
    -> EXPANDING -> REINVENTORYING -> REPLANNING (only with pending items)
  -> WRITING -> CLEARING -> CONFIRMING -> DONE
Any state may end in FAILED. Structural failures come back from the steps as
StepResult failures; anything else is caught at run() and reported as
UnexpectedFailure. No rollback: a second run converges to the same end state.
"""

__all__ = [
    "StepResult",
    "SyncEngine",
    "run_sync",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")

# id(host) of every host with a run in flight, shared by all engines in the process
_hosts_in_flight: set[int] = set()


@dataclass(frozen=True)
class StepResult(Generic[T]):
    """Tagged result of one run step: either a value or a structural failure."""
    value: T | None = None
    failure: SyncError | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def of(cls, value: T) -> StepResult[T]:
        return cls(value=value)

    @classmethod
    def fail(cls, failure: SyncError) -> StepResult[T]:
        return cls(failure=failure)

    def unwrap(self) -> T:
        if self.failure is not None:
            raise self.failure
        return self.value  # type: ignore[return-value]


def _attempt(fn: Callable[[], T]) -> StepResult[T]:
    try:
        return StepResult.of(fn())
    except SyncError as e:
        return StepResult.fail(e)


class SyncEngine:
    """Synchronizes desired payloads into one host surface.

    Not reentrant: while a run is in flight against a host, further run() calls
    for that host (from this engine or any other) return a RunInProgress
    failure without touching it.
    """

    def __init__(
        self,
        host: HostSurface,
        *,
        matcher: Matcher = equivalent,
        timing: TimingConfig | None = None,
    ) -> None:
        self.host = host
        self.matcher = matcher
        self.timing = timing or TimingConfig()
        self.state = RunState.IDLE
        self.history: list[RunState] = []
        self.last_plan: ReconciliationPlan | None = None

    @property
    def busy(self) -> bool:
        return id(self.host) in _hosts_in_flight

    async def run(self, payload: Any, options: RunOptions | None = None) -> RunOutcome:
        """Run one synchronization. Never raises; every failure becomes a RunOutcome."""
        if id(self.host) in _hosts_in_flight:
            logger.warning("run rejected: another run is still in flight on this host")
            return RunOutcome.failure(RunInProgress().describe())

        _hosts_in_flight.add(id(self.host))
        self.history = []
        self.last_plan = None
        try:
            return await self._run(payload, options or RunOptions())
        except Exception as e:
            self._transition(RunState.FAILED)
            logger.exception("unexpected failure during run")
            return RunOutcome.failure(f"{UNEXPECTED_FAILURE}: {e}")
        finally:
            _hosts_in_flight.discard(id(self.host))

    # ---- state machine -----------------------------------------------

    async def _run(self, payload: Any, options: RunOptions) -> RunOutcome:
        self._transition(RunState.PARSING)
        parsed = self._parse(payload)
        if not parsed.ok:
            return self._fail(parsed)
        desired = parsed.unwrap()

        self._transition(RunState.INVENTORYING)
        inventory = self._inventory()
        if not inventory.ok:
            return self._fail(inventory)

        self._transition(RunState.PLANNING)
        plan = self._plan(desired, inventory.unwrap())
        stats = RunStats(
            desired_items=len(desired),
            matched=plan.matched_count,
            filled_from_empty=plan.empty_count,
            pending=len(plan.pending),
            dry_run=options.dry_run,
        )

        if options.dry_run:
            self._transition(RunState.DRY_RUN_EXIT)
            self._transition(RunState.DONE)
            return RunOutcome.success(
                render_dry_run_message(stats, allow_add_rows=options.allow_add_rows),
                stats,
            )

        rows_added = 0
        if plan.pending:
            expanded = await self._expand(desired, plan, options)
            if not expanded.ok:
                return self._fail(expanded, stats)
            plan, rows_added = expanded.unwrap()

        self._transition(RunState.WRITING)
        written = await write_assignments(
            self.host,
            plan.assignments,
            overwrite=options.overwrite_row_hours,
            timing=self.timing,
        )

        self._transition(RunState.CLEARING)
        rows_cleared = 0
        if options.clear_untouched_rows:
            rows_cleared = await clear_untouched_rows(self.host, plan.untouched_rows)

        self._transition(RunState.CONFIRMING)
        recalculated = False
        if options.trigger_recalculation:
            recalculated = await trigger_recalculation(self.host, self.timing)

        self._transition(RunState.DONE)
        stats = replace(
            stats,
            imported=written.rows_written,
            matched=plan.matched_count,
            filled_from_empty=plan.empty_count,
            pending=0,
            rows_added=rows_added,
            rows_cleared=rows_cleared,
            recalculated=recalculated,
        )
        return RunOutcome.success(render_success_message(stats), stats)

    # ---- steps -------------------------------------------------------

    def _parse(self, payload: Any) -> StepResult[list[DesiredItem]]:
        return _attempt(lambda: parse_payload(payload))

    def _inventory(self) -> StepResult[list[GridRow]]:
        return _attempt(lambda: take_inventory(self.host))

    def _plan(self, desired: list[DesiredItem], rows: list[GridRow]) -> ReconciliationPlan:
        plan = build_plan(desired, rows, self.matcher)
        self.last_plan = plan
        return plan

    async def _expand(
        self,
        desired: list[DesiredItem],
        plan: ReconciliationPlan,
        options: RunOptions,
    ) -> StepResult[tuple[ReconciliationPlan, int]]:
        """Grow the grid for pending items, then re-inventory and re-plan from scratch."""
        if not options.allow_add_rows:
            return StepResult.fail(InsufficientCapacity(len(plan.pending)))

        self._transition(RunState.EXPANDING)
        added = await expand_capacity(self.host, len(plan.pending), self.timing)

        self._transition(RunState.REINVENTORYING)
        inventory = self._inventory()
        if not inventory.ok:
            return StepResult.fail(inventory.failure)  # type: ignore[arg-type]

        self._transition(RunState.REPLANNING)
        replanned = self._plan(desired, inventory.unwrap())
        if replanned.pending:
            return StepResult.fail(CapacityStillInsufficient(len(replanned.pending)))
        return StepResult.of((replanned, added))

    # ---- helpers -----------------------------------------------------

    def _transition(self, state: RunState) -> None:
        logger.debug("run state %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def _fail(self, result: StepResult[Any], stats: RunStats | None = None) -> RunOutcome:
        failure = result.failure
        assert failure is not None
        self._transition(RunState.FAILED)
        logger.warning("run failed: %s", failure.describe())
        return RunOutcome.failure(failure.describe(), stats)


async def run_sync(
    host: HostSurface,
    payload: Any,
    options: RunOptions | None = None,
    *,
    matcher: Matcher = equivalent,
    timing: TimingConfig | None = None,
) -> RunOutcome:
    """One-shot convenience wrapper around SyncEngine(host).run(...)."""
    engine = SyncEngine(host, matcher=matcher, timing=timing)
    return await engine.run(payload, options)
