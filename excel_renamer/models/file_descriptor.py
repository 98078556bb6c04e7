from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

"""FileDescriptor model: read-only reference to an input file.

The core only ever needs the name and the size. ``path`` is filled in when
the file lives on disk so the CLI can fetch its bytes at commit time.
"""

__all__ = [
    "FileDescriptor",
]


@dataclass(frozen=True)
class FileDescriptor:
    name: str  # File name including extension
    size: int = 0  # Size in bytes (display only)
    path: Path | None = None  # Location on disk, if any

    @classmethod
    def from_path(cls, path: Path) -> FileDescriptor:
        return cls(name=path.name, size=path.stat().st_size, path=path)
