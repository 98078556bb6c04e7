from __future__ import annotations

import logging
from collections.abc import Iterable

from rapidfuzz.distance import Levenshtein

from ..models.rename_preview import MatchResult, MatchStrategy
from .extractor import is_name_like_column
from .normalizer import fold_separators, normalize
from .reference_index import ReferenceIndex

"""Candidate key resolution against a ReferenceIndex.

Strategies, first success wins:

1. exact       - raw key lookup
2. normalized  - accent/case/whitespace-insensitive equality
3. substring   - candidate contains a key or a key contains the candidate
4. fuzzy       - smallest Levenshtein distance within
                 min(0.4 * len(candidate), 10)

Strategies 2-4 only run for name-like match columns. Identifiers (matricula,
codigo, id) require an exact match: "123" must never resolve to "1234".
"""

__all__ = [
    "MAX_DISTANCE",
    "DISTANCE_RATIO",
    "distance_threshold",
    "resolve",
]

logger = logging.getLogger(__name__)

DISTANCE_RATIO = 0.4
MAX_DISTANCE = 10

NO_MATCH = MatchResult()


def distance_threshold(candidate_key: str) -> float:
    return min(DISTANCE_RATIO * len(candidate_key), MAX_DISTANCE)


def _hit(index: ReferenceIndex, key: str, strategy: MatchStrategy, distance: int | None = None) -> MatchResult:
    return MatchResult(
        matched_row=index.by_exact_key[key],
        matched_key=key,
        strategy=strategy,
        distance=distance,
    )


def _resolve_normalized(candidate_key: str, index: ReferenceIndex) -> MatchResult | None:
    for lookup in (normalize(candidate_key), fold_separators(candidate_key)):
        raw_key = index.by_normalized_key.get(lookup)
        if raw_key is not None and raw_key in index.by_exact_key:
            return _hit(index, raw_key, MatchStrategy.NORMALIZED)
    return None


def _resolve_substring(folded: str, index: ReferenceIndex) -> MatchResult | None:
    if not folded:
        return None
    for norm_key, raw_key in index.by_normalized_key.items():
        key = fold_separators(norm_key)
        if not key:
            continue
        if key in folded or folded in key:
            return _hit(index, raw_key, MatchStrategy.SUBSTRING)
    return None


def _resolve_fuzzy(candidate_key: str, folded: str, index: ReferenceIndex) -> MatchResult | None:
    threshold = distance_threshold(candidate_key)
    best_key: str | None = None
    best_distance: int | None = None
    for norm_key, raw_key in index.by_normalized_key.items():
        d = Levenshtein.distance(folded, fold_separators(norm_key))
        # strict "<" keeps the first-seen key on ties
        if best_distance is None or d < best_distance:
            best_distance = d
            best_key = raw_key
    if best_key is None or best_distance is None or best_distance > threshold:
        return None
    return _hit(index, best_key, MatchStrategy.FUZZY, distance=best_distance)


def resolve(
    candidate_key: str,
    index: ReferenceIndex,
    match_column: str,
    name_like_terms: Iterable[str] | None = None,
) -> MatchResult:
    """Resolve ``candidate_key`` to at most one reference row. Never raises."""
    row = index.get(candidate_key)
    if row is not None:
        return MatchResult(matched_row=row, matched_key=candidate_key, strategy=MatchStrategy.EXACT)

    if not is_name_like_column(match_column, name_like_terms):
        return NO_MATCH

    result = _resolve_normalized(candidate_key, index)
    if result is not None:
        return result

    folded = fold_separators(candidate_key)
    if not folded:
        # Nothing left to compare once separators are gone ("___")
        return NO_MATCH
    result = _resolve_substring(folded, index)
    if result is not None:
        return result

    result = _resolve_fuzzy(candidate_key, folded, index)
    if result is not None:
        logger.debug("fuzzy match %r -> %r (distance=%s)", candidate_key, result.matched_key, result.distance)
        return result
    return NO_MATCH
