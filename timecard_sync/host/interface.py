from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from ..models.grid_row import FieldKind, HostRow

"""Host capability interface consumed by the engine.

All host access goes through this seam. Reads and mutations are synchronous
calls; the host's reaction to them (cascading lookups, row growth) takes
wall-clock time, which the engine waits out through wait()/wait_until().
"""

__all__ = [
    "HostSurface",
]


@runtime_checkable
class HostSurface(Protocol):
    def list_rows(self) -> list[HostRow]:
        """Snapshot of every row the host currently exposes, in any order."""
        ...

    def set_field(self, row_index: int, field: FieldKind, text: str) -> None:
        """Write one field of one row (the host may react asynchronously)."""
        ...

    def invoke_add_row(self) -> bool:
        """Press the host's add-row control. False when no control was found."""
        ...

    def invoke_recalculate(self) -> bool:
        """Press the host's recalculation control. False when no control was found."""
        ...

    async def wait(self, ms: int) -> None:
        """Cooperative delay primitive."""
        ...

    async def wait_until(self, predicate: Callable[[], bool], interval_ms: int, timeout_ms: int) -> bool:
        """Poll predicate every interval_ms until true (True) or timeout_ms elapsed (False)."""
        ...
