from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .rename_preview import RenamePreview

"""Commit and run result models.

CommitEntry pairs a computed file name with the raw bytes to package.
CommitResult is what a commit pass hands to the archive writer, and
RunSummary aggregates the numbers printed on the SUMMARY line.
"""

__all__ = [
    "CommitEntry",
    "CommitResult",
    "RunSummary",
]


@dataclass(frozen=True)
class CommitEntry:
    original_name: str
    new_name: str  # Name inside the archive (before collision resolution)
    data: bytes = field(repr=False)
    error: str | None = None  # Carried over from the preview for unmatched files

    def as_pair(self) -> tuple[str, bytes]:
        return (self.new_name, self.data)


@dataclass(frozen=True)
class CommitResult:
    entries: list[CommitEntry]  # Input order
    skipped: list[RenamePreview]  # Unmatched files left out of the archive
    total_files: int

    @property
    def packaged(self) -> int:
        return len(self.entries)

    def pairs(self) -> list[tuple[str, bytes]]:
        """Return the ``(new_name, bytes)`` sequence for packaging."""
        return [e.as_pair() for e in self.entries]


@dataclass(frozen=True)
class RunSummary:
    """Aggregated numbers for a whole CLI run."""
    total_files: int
    matched_files: int
    unmatched_files: int
    archived_files: int  # 0 on dry runs
    skipped_files: int  # Unmatched files excluded from the archive
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
