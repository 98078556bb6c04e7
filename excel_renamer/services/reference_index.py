from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..models.reference_row import ReferenceRow
from .normalizer import normalize

"""Reference index: lookup structure over the reference rows.

The index is keyed by the trimmed value of the chosen match column. It is
rebuilt from scratch whenever the reference data or the match column changes;
batch sizes (hundreds to low thousands of rows) make incremental updates
pointless.
"""

__all__ = [
    "ReferenceIndex",
    "build_index",
    "DUPLICATE_POLICIES",
]

logger = logging.getLogger(__name__)

DUPLICATE_POLICIES = ("last", "first")


@dataclass
class ReferenceIndex:
    match_column: str
    by_exact_key: dict[str, ReferenceRow] = field(default_factory=dict)
    by_normalized_key: dict[str, str] = field(default_factory=dict)  # normalized -> raw key
    duplicate_keys: list[str] = field(default_factory=list)
    skipped_rows: int = 0  # Rows without a match value

    def __len__(self) -> int:
        return len(self.by_exact_key)

    def __contains__(self, key: object) -> bool:
        return key in self.by_exact_key

    def get(self, key: str) -> ReferenceRow | None:
        return self.by_exact_key.get(key)


def build_index(
    rows: Iterable[ReferenceRow | Mapping[str, Any]],
    match_column: str,
    *,
    duplicate_policy: str = "last",
) -> ReferenceIndex:
    """Build a ReferenceIndex from reference rows.

    Args:
        rows: Reference rows in load order (ReferenceRow or plain mappings)
        match_column: Column whose value identifies a row
        duplicate_policy: "last" (later rows replace earlier ones) or "first"

    Returns:
        ReferenceIndex. Rows whose match value is absent or blank are skipped.
        A match column that no row has yields an empty index, not an error.
    """
    if duplicate_policy not in DUPLICATE_POLICIES:
        raise ValueError(f"unknown duplicate policy: {duplicate_policy!r}")

    index = ReferenceIndex(match_column=match_column)
    for n, raw in enumerate(rows, start=1):
        row = ReferenceRow.from_mapping(raw, row_number=n)
        key = row.value(match_column).strip()
        if not key:
            index.skipped_rows += 1
            continue
        if key in index.by_exact_key:
            if key not in index.duplicate_keys:
                index.duplicate_keys.append(key)
            if duplicate_policy == "first":
                continue
        index.by_exact_key[key] = row
        norm = normalize(key)
        if duplicate_policy == "first" and norm in index.by_normalized_key:
            continue
        index.by_normalized_key[norm] = key

    if index.duplicate_keys:
        logger.warning(
            "duplicate values in match column '%s' (%s wins): %s",
            match_column, duplicate_policy, index.duplicate_keys[:10],
        )
    logger.debug(
        "index built column=%s keys=%d skipped_rows=%d",
        match_column, len(index.by_exact_key), index.skipped_rows,
    )
    return index
