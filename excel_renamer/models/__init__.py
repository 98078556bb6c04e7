"""Domain models for the spreadsheet-driven file renamer."""

from .error_record import ErrorRecord
from .file_descriptor import FileDescriptor
from .processing_result import CommitEntry, CommitResult, RunSummary
from .reference_row import ReferenceRow
from .rename_preview import MatchResult, MatchStrategy, RenamePreview, RenderResult

__all__ = [
    # Input models
    "FileDescriptor",
    "ReferenceRow",
    # Matching / preview models
    "MatchResult",
    "MatchStrategy",
    "RenderResult",
    "RenamePreview",
    # Commit models
    "CommitEntry",
    "CommitResult",
    "RunSummary",
    "ErrorRecord",
]
