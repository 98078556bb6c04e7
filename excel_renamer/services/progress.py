from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display service with tqdm (TTY only).

A single tqdm bar per pass (preview or packaging). In non-TTY environments
(CI, redirected output) the bar is disabled to avoid ANSI control sequence
spam; the counters are still maintained so callers can read them.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """Return True if stdout is a TTY and progress should be displayed."""
    return sys.stdout.isatty()


class ProgressTracker:
    """Progress tracker over a fixed number of files.

    ``done`` only ever increases; ``percent`` is meant for display.
    """

    def __init__(self, total_files: int, *, description: str = "Processing files") -> None:
        self.total_files = total_files
        self.description = description
        self.done = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_files,
                desc=description,
                unit="file",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    @property
    def percent(self) -> int:
        if self.total_files <= 0:
            return 100
        return round(self.done * 100 / self.total_files)

    def advance_to(self, done: int, total: int | None = None) -> None:
        """Move the bar forward to ``done`` (progress callback form). Never moves back."""
        if total is not None and total != self.total_files:
            self.total_files = total
            if self.enabled and self.pbar is not None:
                self.pbar.total = total
                self.pbar.refresh()
        if done <= self.done:
            return
        step = done - self.done
        self.done = done
        if self.enabled and self.pbar is not None:
            self.pbar.update(step)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
