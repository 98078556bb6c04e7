"""Bulk-rename files by matching them to rows of an Excel/CSV reference sheet.

Public entry points:

    index = build_index(rows, "matricula")
    previews = preview(files, index, "matricula", "{nome}.{extensao}")
    result = commit(files, index, "matricula", "{nome}.{extensao}", read_bytes)
"""

from .models import FileDescriptor, ReferenceRow, RenamePreview
from .services.extractor import extract
from .services.matcher import resolve
from .services.normalizer import normalize
from .services.orchestrator import RenameSession, commit, preview
from .services.reference_index import ReferenceIndex, build_index
from .services.renderer import render

__version__ = "0.1.0"

__all__ = [
    "FileDescriptor",
    "ReferenceRow",
    "RenamePreview",
    "ReferenceIndex",
    "RenameSession",
    "build_index",
    "extract",
    "normalize",
    "preview",
    "commit",
    "render",
    "resolve",
]
