from __future__ import annotations

import logging

from ..host.interface import HostSurface
from ..models.run_options import TimingConfig
from .inventory import count_rows

"""Capacity expander: ask the host for more rows, one at a time.

Each add-row click is followed by polling until the host reports more rows than
before the click (bounded by poll_timeout_ms). A missing add control or a
timeout ends the loop early; the caller detects any remaining shortfall by
re-planning.
"""

__all__ = [
    "expand_capacity",
]

logger = logging.getLogger(__name__)


async def expand_capacity(host: HostSurface, missing: int, timing: TimingConfig) -> int:
    """Request up to `missing` additional rows. Returns the number actually added."""
    added = 0
    for attempt in range(missing):
        before = count_rows(host)
        if not host.invoke_add_row():
            logger.warning("add row control not found (added=%d of %d)", added, missing)
            break
        grew = await host.wait_until(
            lambda: count_rows(host) > before,
            timing.poll_interval_ms,
            timing.poll_timeout_ms,
        )
        if not grew:
            logger.warning(
                "row count did not grow within %dms (attempt=%d added=%d)",
                timing.poll_timeout_ms,
                attempt + 1,
                added,
            )
            break
        added += 1
    logger.debug("capacity expansion requested=%d added=%d", missing, added)
    return added
