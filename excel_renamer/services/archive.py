from __future__ import annotations

import logging
import os
import tempfile
import zipfile
from collections.abc import Iterable
from pathlib import Path

from ..models.processing_result import CommitEntry

"""ZIP packaging of committed renames.

Single writer: entries are written in the order given. Two entries with the
same name (compared case-insensitively) would shadow each other inside the
archive, so later ones get ``_1``, ``_2``, ... before the extension. The
archive is assembled in a temporary file next to the target and moved into
place only once complete; a failure leaves no partial archive behind.
"""

__all__ = [
    "ArchiveError",
    "NameConflictResolver",
    "write_archive",
]

logger = logging.getLogger(__name__)

MAX_SUFFIX = 10000


class ArchiveError(Exception):
    """Raised when the archive cannot be written."""


class NameConflictResolver:
    """Hand out unique archive member names."""

    def __init__(self, case_insensitive: bool = True) -> None:
        self.case_insensitive = case_insensitive
        self.occupied: set[str] = set()

    def _key(self, name: str) -> str:
        return name.lower() if self.case_insensitive else name

    def resolve(self, desired_name: str) -> tuple[str, bool]:
        """Return (actual name, whether a conflict occurred)."""
        if self._key(desired_name) not in self.occupied:
            self.occupied.add(self._key(desired_name))
            return desired_name, False

        dot = desired_name.rfind(".")
        stem, suffix = (desired_name[:dot], desired_name[dot:]) if dot > 0 else (desired_name, "")
        for n in range(1, MAX_SUFFIX + 1):
            candidate = f"{stem}_{n}{suffix}"
            if self._key(candidate) not in self.occupied:
                self.occupied.add(self._key(candidate))
                return candidate, True
        raise ArchiveError(f"cannot find a free name for {desired_name} (tried {MAX_SUFFIX} times)")


def write_archive(entries: Iterable[CommitEntry | tuple[str, bytes]], path: Path) -> list[str]:
    """Write ``entries`` into a ZIP archive at ``path``.

    Returns:
        The member names actually used, in entry order.

    Raises:
        ArchiveError: on an empty member name or any I/O failure (the target
            is left untouched)
    """
    resolver = NameConflictResolver()
    names: list[str] = []
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=".tmp-", suffix=".zip", dir=path.parent)
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        with zipfile.ZipFile(tmp_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for entry in entries:
                name, data = entry.as_pair() if isinstance(entry, CommitEntry) else entry
                if not name.strip():
                    raise ArchiveError(f"empty member name at position {len(names)}")
                member, conflict = resolver.resolve(name)
                if conflict:
                    logger.warning("name conflict resolved: %s -> %s", name, member)
                zf.writestr(member, data)
                names.append(member)
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise ArchiveError(f"cannot write archive {path}: {e}") from e
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    logger.debug("archive written path=%s members=%d", path, len(names))
    return names
