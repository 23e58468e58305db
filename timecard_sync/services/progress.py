from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display for writing assignments (tqdm, TTY only).

In non-TTY environments (CI, piped output) the bar is disabled so no ANSI
control sequences end up in logs.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Progress bar over the assignments of one write pass."""

    def __init__(self, total: int, *, description: str = "Writing rows", unit: str = "row") -> None:
        self.total = total
        self.description = description
        self.current = 0

        self.enabled = is_tty_enabled() and total > 0
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total,
                desc=description,
                unit=unit,
                leave=False,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start_item(self, label: str) -> None:
        self.current += 1
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({label})")

    def finish_item(self) -> None:
        if self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
