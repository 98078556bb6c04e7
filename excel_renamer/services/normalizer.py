from __future__ import annotations

import re
import unicodedata

"""Text normalization for accent- and case-insensitive comparison.

normalize("  João   Silva ") == "joao silva"
fold_separators("Joao_Silva-relatorio") == "joao silva relatorio"
"""

__all__ = [
    "normalize",
    "fold_separators",
]

_WHITESPACE_RE = re.compile(r"\s+")
_SEPARATOR_RE = re.compile(r"[_\-.]+")


def normalize(text: str) -> str:
    """Lowercase, strip diacritics and collapse whitespace.

    Total and idempotent: ``normalize(normalize(s)) == normalize(s)``.
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(c for c in decomposed if unicodedata.category(c) != "Mn")
    return _WHITESPACE_RE.sub(" ", stripped).strip()


def fold_separators(text: str) -> str:
    """Normalize after turning filename separators (``_ - .``) into spaces."""
    if not text:
        return ""
    return normalize(_SEPARATOR_RE.sub(" ", text))
