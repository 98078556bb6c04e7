from __future__ import annotations

import re

from ..models.reference_row import ReferenceRow
from ..models.rename_preview import RenderResult

"""Filename rendering from a placeholder template.

Template syntax: literal text with ``{column}`` placeholders. The reserved
placeholder ``{extensao}`` expands to the original extension without its dot;
when a template does not use it the original extension (with dot) is appended
to the rendered name.

    render("12345.pdf", row, "{nome} - {matricula}")  -> "Ana Silva - 12345.pdf"
    render("report.CSV", row, "{extensao}")            -> "CSV"
"""

__all__ = [
    "EXTENSION_PLACEHOLDER",
    "NOT_FOUND_ERROR",
    "EMPTY_NAME_ERROR",
    "file_extension",
    "placeholders",
    "sanitize_filename",
    "render",
]

EXTENSION_PLACEHOLDER = "extensao"
NOT_FOUND_ERROR = "reference data not found"
EMPTY_NAME_ERROR = "rendered file name is empty"

_PLACEHOLDER_RE = re.compile(r"\{([^}]+)\}")
_ILLEGAL_CHARS_RE = re.compile(r'[<>:"/\\|?*]')


def file_extension(filename: str) -> str:
    """Return the extension of ``filename`` including the dot, "" if none."""
    pos = filename.rfind(".")
    if pos < 0:
        return ""
    return filename[pos:]


def placeholders(template: str) -> list[str]:
    """List the field names referenced by ``template`` in order of appearance."""
    return _PLACEHOLDER_RE.findall(template)


def sanitize_filename(name: str) -> str:
    """Replace characters that are illegal in file names with ``_``."""
    return _ILLEGAL_CHARS_RE.sub("_", name)


def render(original_filename: str, matched_row: ReferenceRow | None, template: str) -> RenderResult:
    """Render the new file name for ``original_filename``.

    Without a matched row the original name is kept and the result carries
    an error. Placeholders naming columns the row does not have expand to "".
    """
    if matched_row is None:
        return RenderResult(new_name=original_filename, error=NOT_FOUND_ERROR)

    extension = file_extension(original_filename)
    token = "{" + EXTENSION_PLACEHOLDER + "}"
    has_extension_token = token in template

    def _substitute(m: re.Match[str]) -> str:
        field = m.group(1)
        if field == EXTENSION_PLACEHOLDER:
            return extension[1:]
        return matched_row.value(field)

    new_name = _PLACEHOLDER_RE.sub(_substitute, template)
    if not has_extension_token:
        new_name += extension
    return RenderResult(new_name=sanitize_filename(new_name))
