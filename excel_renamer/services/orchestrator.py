from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from enum import Enum
from pathlib import Path
from typing import Any

from ..excel.reader import (
    EmptyReferenceError,
    MissingColumnsError,
    ReferenceDataError,
    ReferenceSheet,
    read_reference_file,
    require_columns,
    suggest_match_column,
)
from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import EMPTY_NAME, NO_MATCH, READ_ERROR, ErrorRecord
from ..models.file_descriptor import FileDescriptor
from ..models.processing_result import CommitEntry, CommitResult
from ..models.reference_row import ReferenceRow
from ..models.rename_preview import RenamePreview
from .extractor import extract, strip_extension
from .matcher import resolve
from .reference_index import ReferenceIndex, build_index
from .renderer import EMPTY_NAME_ERROR, file_extension, render

"""Batch orchestration: preview and commit passes over the input files.

preview() runs extractor -> matcher -> renderer for every file and returns
one RenamePreview per file, in input order. A file without a match never
stops the others; its preview carries the error instead.

commit() derives every name again with the same pure functions, reads the
bytes of the files to package (concurrently, read-only) and joins all reads
before returning the entries in input order for the single archive writer.

RenameSession keeps the state of one run (files, template, match column,
index, preview) so callers do not have to juggle it themselves:

    IDLE -> LOADING_REFERENCE -> INDEXED -> PREVIEWING -> PREVIEW_READY
         -> COMMITTING -> DONE

LOADING_REFERENCE and COMMITTING may end in ERROR; the previous index and
preview survive a failed step.
"""

__all__ = [
    "UNMATCHED_POLICIES",
    "UNMATCHED_PREFIX",
    "ProcessingError",
    "CommitError",
    "RunState",
    "RenameSession",
    "scan_source_files",
    "read_file_bytes",
    "resolve_file",
    "preview",
    "commit",
    "record_unmatched",
]

logger = logging.getLogger(__name__)

UNMATCHED_POLICIES = ("skip", "original", "marked")
UNMATCHED_PREFIX = "UNPROCESSED_"

ProgressCallback = Callable[[int, int], None]
ByteReader = Callable[[FileDescriptor], bytes]


class ProcessingError(Exception):
    """Base exception for processing errors."""
    pass


class CommitError(ProcessingError):
    """Raised when the bytes of an input file cannot be read during commit."""
    pass


class RunState(Enum):
    IDLE = "idle"
    LOADING_REFERENCE = "loading_reference"
    INDEXED = "indexed"
    PREVIEWING = "previewing"
    PREVIEW_READY = "preview_ready"
    COMMITTING = "committing"
    DONE = "done"
    ERROR = "error"


def scan_source_files(directory: Path, *, recursive: bool = False, exclude: Iterable[Path] = ()) -> list[FileDescriptor]:
    """List the files to rename in ``directory``, sorted by name.

    Hidden files (leading dot) and the paths in ``exclude`` (typically the
    reference sheet and the output archive) are left out.

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")

    excluded = {p.resolve() for p in exclude}
    try:
        candidates = directory.rglob("*") if recursive else directory.iterdir()
        paths = [
            p for p in candidates
            if p.is_file() and not p.name.startswith(".") and p.resolve() not in excluded
        ]
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e
    paths.sort(key=lambda p: (p.name.lower(), str(p)))
    return [FileDescriptor.from_path(p) for p in paths]


def read_file_bytes(file: FileDescriptor) -> bytes:
    """Default byte reader for files that live on disk."""
    if file.path is None:
        raise CommitError(f"no path for file {file.name}")
    return file.path.read_bytes()


def _is_blank_name(name: str, extension: str) -> bool:
    stem = name[: -len(extension)] if extension and name.endswith(extension) else name
    return not stem.strip()


def resolve_file(
    file: FileDescriptor,
    index: ReferenceIndex,
    match_column: str,
    template: str,
    name_like_terms: Iterable[str] | None = None,
) -> RenamePreview:
    """Run extractor -> matcher -> renderer for one file.

    A stem that is itself a reference key ("RH-001") is looked up as is
    before the extractor cuts a token out of it. A rendered name with
    nothing left besides the extension is an error, like a missing match.
    """
    stem = strip_extension(file.name)
    candidate = stem if stem in index else extract(file.name, match_column, name_like_terms)
    match = resolve(candidate, index, match_column, name_like_terms)
    rendered = render(file.name, match.matched_row, template)
    new_name, error = rendered.new_name, rendered.error
    if error is None and _is_blank_name(new_name, file_extension(file.name)):
        new_name, error = file.name, EMPTY_NAME_ERROR
    return RenamePreview(
        original_name=file.name,
        new_name=new_name,
        error=error,
        size=file.size,
        candidate=candidate,
        matched_key=match.matched_key,
        strategy=match.strategy,
    )


def preview(
    files: Sequence[FileDescriptor],
    index: ReferenceIndex,
    match_column: str,
    template: str,
    *,
    name_like_terms: Iterable[str] | None = None,
    on_progress: ProgressCallback | None = None,
) -> list[RenamePreview]:
    """Compute the proposed rename for every file, preserving input order."""
    terms = tuple(name_like_terms) if name_like_terms is not None else None
    total = len(files)
    previews: list[RenamePreview] = []
    for done, file in enumerate(files, start=1):
        previews.append(resolve_file(file, index, match_column, template, terms))
        if on_progress is not None:
            on_progress(done, total)
    unmatched = sum(1 for p in previews if p.error)
    logger.debug("preview files=%d matched=%d unmatched=%d", total, total - unmatched, unmatched)
    return previews


def _error_type(item: RenamePreview) -> str:
    return NO_MATCH if item.matched_key is None else EMPTY_NAME


def _packaged_name(item: RenamePreview, unmatched_policy: str) -> str | None:
    if item.error is None:
        return item.new_name
    if unmatched_policy == "original":
        return item.original_name
    if unmatched_policy == "marked":
        return UNMATCHED_PREFIX + item.original_name
    return None


def commit(
    files: Sequence[FileDescriptor],
    index: ReferenceIndex,
    match_column: str,
    template: str,
    read_bytes: ByteReader = read_file_bytes,
    *,
    unmatched_policy: str = "skip",
    max_workers: int | None = None,
    on_progress: ProgressCallback | None = None,
    name_like_terms: Iterable[str] | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> CommitResult:
    """Resolve every file again and pair its new name with its bytes.

    Args:
        read_bytes: Fetches the raw bytes of one file
        unmatched_policy: What to do with files that have no reference row:
            "skip" leaves them out (listed in ``CommitResult.skipped``),
            "original" packages them under their original name,
            "marked" packages them as ``UNPROCESSED_<original name>``.
        max_workers: Thread pool size for the reads (default: one per file, max 32)
        on_progress: Called with (files packaged so far, total) after each read

    Raises:
        CommitError: a file could not be read; nothing is returned
    """
    if unmatched_policy not in UNMATCHED_POLICIES:
        raise ValueError(f"unknown unmatched policy: {unmatched_policy!r}")

    items = preview(files, index, match_column, template, name_like_terms=name_like_terms)

    planned: list[tuple[int, str]] = []  # (file position, packaged name)
    skipped: list[RenamePreview] = []
    for pos, item in enumerate(items):
        name = _packaged_name(item, unmatched_policy)
        if name is None:
            skipped.append(item)
            if error_log is not None:
                error_log.append(
                    ErrorRecord.create(item.original_name, item.candidate, _error_type(item), item.error or "")
                )
            continue
        planned.append((pos, name))

    total = len(planned)
    contents: dict[int, bytes] = {}
    if planned:
        workers = max_workers or min(32, total)
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="commit-read")
        try:
            futures = {executor.submit(read_bytes, files[pos]): pos for pos, _ in planned}
            for done, future in enumerate(as_completed(futures), start=1):
                pos = futures[future]
                try:
                    contents[pos] = future.result()
                except Exception as e:
                    name = files[pos].name
                    if error_log is not None:
                        error_log.append(ErrorRecord.create(name, items[pos].candidate, READ_ERROR, str(e)))
                    raise CommitError(f"cannot read {name}: {e}") from e
                if on_progress is not None:
                    on_progress(done, total)
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

    entries = [
        CommitEntry(
            original_name=items[pos].original_name,
            new_name=name,
            data=contents[pos],
            error=items[pos].error,
        )
        for pos, name in planned
    ]
    if skipped:
        logger.info(f"{len(skipped)} unmatched file(s) left out of the archive")
    return CommitResult(entries=entries, skipped=skipped, total_files=len(files))


def record_unmatched(previews: Iterable[RenamePreview], error_log: ErrorLogBuffer) -> int:
    """Append one record per failed preview. Returns the count."""
    count = 0
    for item in previews:
        if item.error:
            error_log.append(ErrorRecord.create(item.original_name, item.candidate, _error_type(item), item.error))
            count += 1
    return count


class RenameSession:
    """Run context: reference data, files, template and the derived index/preview.

    Every setter that changes an input invalidates the preview; a new
    preview() call recomputes the whole batch and replaces it at once.
    """

    def __init__(
        self,
        *,
        template: str = "",
        files: Sequence[FileDescriptor] | None = None,
        name_like_terms: Iterable[str] | None = None,
        duplicate_policy: str = "last",
        unmatched_policy: str = "skip",
        max_workers: int | None = None,
        error_log: ErrorLogBuffer | None = None,
    ) -> None:
        self.template = template
        self.files: list[FileDescriptor] = list(files or [])
        self.name_like_terms = tuple(name_like_terms) if name_like_terms is not None else None
        self.duplicate_policy = duplicate_policy
        self.unmatched_policy = unmatched_policy
        self.max_workers = max_workers
        self.error_log = error_log if error_log is not None else ErrorLogBuffer()

        self.state = RunState.IDLE
        self.last_error: str | None = None
        self.match_column: str | None = None
        self.sheet: ReferenceSheet | None = None
        self.index: ReferenceIndex | None = None
        self.previews: list[RenamePreview] = []
        self._preview_valid = False

    # -- inputs -------------------------------------------------------------

    def load_reference(
        self,
        source: str | Path | ReferenceSheet | Iterable[ReferenceRow | Mapping[str, Any]],
        match_column: str | None = None,
        *,
        sheet: str | None = None,
        encoding: str | None = None,
    ) -> bool:
        """Load reference data and build the index.

        ``source`` is a spreadsheet path, an already parsed ReferenceSheet or
        plain rows. Without ``match_column`` a column is suggested from the
        header. Returns False on failure; ``last_error`` then holds the
        message and the previous index/preview are kept.
        """
        previous_state = self.state
        self.state = RunState.LOADING_REFERENCE
        try:
            loaded = self._coerce_sheet(source, sheet=sheet, encoding=encoding)
            column = match_column or suggest_match_column(loaded.columns)
            if not column:
                raise MissingColumnsError(f"sheet '{loaded.sheet_name}' has no column to match on")
            require_columns(loaded, [column])
            index = build_index(loaded.rows, column, duplicate_policy=self.duplicate_policy)
        except ReferenceDataError as e:
            self.state = RunState.ERROR
            self.last_error = str(e)
            logger.error(f"reference: {e}")
            logger.debug("previous state kept: %s", previous_state.value)
            return False

        self.sheet = loaded
        self.match_column = column
        self.index = index
        self.last_error = None
        self._invalidate()
        logger.info(f"reference loaded: {len(loaded.rows)} rows, {len(index)} keys in column '{column}'")
        return True

    @staticmethod
    def _coerce_sheet(
        source: str | Path | ReferenceSheet | Iterable[ReferenceRow | Mapping[str, Any]],
        *,
        sheet: str | None,
        encoding: str | None,
    ) -> ReferenceSheet:
        if isinstance(source, ReferenceSheet):
            return source
        if isinstance(source, (str, Path)):
            return read_reference_file(Path(source), sheet=sheet, encoding=encoding)
        rows = [ReferenceRow.from_mapping(r, row_number=n) for n, r in enumerate(source, start=1)]
        if not rows:
            raise EmptyReferenceError("reference data has no rows")
        columns: list[str] = []
        for row in rows:
            for col in row.columns:
                if col not in columns:
                    columns.append(col)
        return ReferenceSheet(sheet_name="<rows>", columns=columns, rows=rows)

    def set_match_column(self, column: str) -> bool:
        """Rebuild the index on another column of the loaded sheet."""
        if self.sheet is None:
            raise ProcessingError("no reference data loaded")
        return self.load_reference(self.sheet, column)

    def set_files(self, files: Sequence[FileDescriptor]) -> None:
        self.files = list(files)
        self._invalidate()

    def set_template(self, template: str) -> None:
        self.template = template
        self._invalidate()

    def _invalidate(self) -> None:
        self._preview_valid = False
        if self.index is not None:
            self.state = RunState.INDEXED

    # -- passes -------------------------------------------------------------

    def preview(self, on_progress: ProgressCallback | None = None) -> list[RenamePreview]:
        if self.index is None or self.match_column is None:
            raise ProcessingError("reference data must be loaded before preview")
        if not self.template:
            raise ProcessingError("template is empty")
        self.state = RunState.PREVIEWING
        self.previews = preview(
            self.files,
            self.index,
            self.match_column,
            self.template,
            name_like_terms=self.name_like_terms,
            on_progress=on_progress,
        )
        self._preview_valid = True
        self.state = RunState.PREVIEW_READY
        return self.previews

    def commit(
        self,
        read_bytes: ByteReader = read_file_bytes,
        on_progress: ProgressCallback | None = None,
    ) -> CommitResult | None:
        """Package the accepted preview. Returns None on failure (see ``last_error``)."""
        if not self._preview_valid or self.index is None or self.match_column is None:
            raise ProcessingError("preview must be computed before commit")
        self.state = RunState.COMMITTING
        try:
            result = commit(
                self.files,
                self.index,
                self.match_column,
                self.template,
                read_bytes,
                unmatched_policy=self.unmatched_policy,
                max_workers=self.max_workers,
                on_progress=on_progress,
                name_like_terms=self.name_like_terms,
                error_log=self.error_log,
            )
        except CommitError as e:
            self.state = RunState.ERROR
            self.last_error = str(e)
            logger.error(f"commit: {e}")
            return None
        self.last_error = None
        self.state = RunState.DONE
        return result

    # -- reporting ----------------------------------------------------------

    @property
    def matched_count(self) -> int:
        return sum(1 for p in self.previews if p.error is None)

    @property
    def unmatched_count(self) -> int:
        return len(self.previews) - self.matched_count
