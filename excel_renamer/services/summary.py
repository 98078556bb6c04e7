from __future__ import annotations

from ..models.processing_result import RunSummary

"""SUMMARY line rendering.

Format:
SUMMARY files={total} matched={m} unmatched={u} archived={a} skipped={s} elapsed_sec={e}
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(summary: RunSummary) -> str:
    """Render the SUMMARY line for a finished run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> s = RunSummary(total_files=3, matched_files=2, unmatched_files=1,
        ...                archived_files=2, skipped_files=1, start_time=start,
        ...                end_time=end, elapsed_seconds=2.0)
        >>> render_summary_line(s)
        'SUMMARY files=3 matched=2 unmatched=1 archived=2 skipped=1 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={summary.total_files} "
        f"matched={summary.matched_files} "
        f"unmatched={summary.unmatched_files} "
        f"archived={summary.archived_files} "
        f"skipped={summary.skipped_files} "
        f"elapsed_sec={_format_seconds(summary.elapsed_seconds)}"
    )
