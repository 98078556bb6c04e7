from __future__ import annotations

import re
from collections.abc import Iterable

"""Identifier extraction from file names.

The candidate identifier depends on the kind of match column:

- name-like columns ("nome", "colaborador", ...) use the whole stem; fuzzy
  matching later absorbs spelling and separator differences.
- code-like columns (matricula, id, codigo, ...) try to isolate a leading or
  trailing numeric / alphanumeric token, e.g. "12345_Ana.pdf" -> "12345",
  "Ana - 12345.pdf" -> "12345".
"""

__all__ = [
    "NAME_LIKE_TERMS",
    "CODE_PATTERNS",
    "is_name_like_column",
    "strip_extension",
    "extract",
]

NAME_LIKE_TERMS: tuple[str, ...] = ("colaborador", "nome", "name")

# Tried in order, first capture group wins
CODE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^(\d+)[_\s-]+"),
    re.compile(r"[_\s-]+(\d+)$"),
    re.compile(r"^([A-Za-z0-9]+)[_\s-]+"),
)


def is_name_like_column(column: str, terms: Iterable[str] | None = None) -> bool:
    """Return True when ``column`` names people (substring match, case-insensitive)."""
    lowered = (column or "").lower()
    vocabulary = NAME_LIKE_TERMS if terms is None else tuple(terms)
    return any(term.lower() in lowered for term in vocabulary if term)


def strip_extension(filename: str) -> str:
    """Return the part of ``filename`` before its last dot.

    A name without a dot, or whose only dot is the first character
    (".env"), is returned unchanged so the stem is never empty.
    """
    pos = filename.rfind(".")
    if pos <= 0:
        return filename
    return filename[:pos]


def extract(filename: str, match_column: str, name_like_terms: Iterable[str] | None = None) -> str:
    """Derive the candidate matching key from a raw file name."""
    stem = strip_extension(filename)
    if is_name_like_column(match_column, name_like_terms):
        return stem
    for pattern in CODE_PATTERNS:
        m = pattern.search(stem)
        if m and m.group(1):
            return m.group(1)
    return stem
