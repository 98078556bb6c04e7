from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .reference_row import ReferenceRow

"""Matching and preview result models.

MatchResult is produced by the matcher for one candidate key, RenderResult by
the filename renderer and RenamePreview by the orchestrator for one input file.
All of them are frozen: a preview pass builds a fresh list and replaces the
previous one as a whole.
"""

__all__ = [
    "MatchStrategy",
    "MatchResult",
    "RenderResult",
    "RenamePreview",
]


class MatchStrategy(Enum):
    """Strategy that resolved a candidate key (first success wins, in this order)."""
    EXACT = "exact"
    NORMALIZED = "normalized"
    SUBSTRING = "substring"
    FUZZY = "fuzzy"


@dataclass(frozen=True)
class MatchResult:
    matched_row: ReferenceRow | None = None
    matched_key: str | None = None
    strategy: MatchStrategy | None = None
    distance: int | None = None  # Edit distance, set only for FUZZY matches

    @property
    def found(self) -> bool:
        return self.matched_row is not None


@dataclass(frozen=True)
class RenderResult:
    new_name: str
    error: str | None = None


@dataclass(frozen=True)
class RenamePreview:
    """Proposed rename for one input file.

    ``error`` is None when the file resolved to a reference row. When it is
    set, ``new_name`` equals ``original_name`` (safe fallback).
    """
    original_name: str
    new_name: str
    error: str | None
    size: int
    candidate: str = ""  # Identifier extracted from the file name
    matched_key: str | None = None  # Reference key the candidate resolved to
    strategy: MatchStrategy | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
