from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the per-file error log.

One record per input file that could not be renamed (no reference match,
empty rendered name, unreadable bytes). Serialized as one JSON object per
line with a fixed key set.
"""

__all__ = [
    "ErrorRecord",
]

NO_MATCH = "NO_MATCH"
READ_ERROR = "READ_ERROR"
EMPTY_NAME = "EMPTY_NAME"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Input file name
        candidate: Identifier extracted from the file name ("" if not computed)
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable description
    """
    timestamp: str
    file: str
    candidate: str
    error_type: str
    message: str

    @staticmethod
    def create(file: str, candidate: str, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            candidate=candidate,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
