from __future__ import annotations

from datetime import UTC, datetime

import pytest

from excel_renamer.models.processing_result import RunSummary
from excel_renamer.services.summary import _format_seconds, render_summary_line


def _summary(elapsed: float) -> RunSummary:
    now = datetime(2024, 1, 1, tzinfo=UTC)
    return RunSummary(
        total_files=3,
        matched_files=2,
        unmatched_files=1,
        archived_files=2,
        skipped_files=1,
        start_time=now,
        end_time=now,
        elapsed_seconds=elapsed,
    )


def test_render_summary_line():
    assert render_summary_line(_summary(1.25)) == (
        "SUMMARY files=3 matched=2 unmatched=1 archived=2 skipped=1 elapsed_sec=1.25"
    )


@pytest.mark.parametrize(
    "value, expected",
    [(0, "0"), (2.0, "2"), (0.5, "0.5"), (1.23456, "1.235"), (0.000123, "0.000123")],
)
def test_format_seconds(value: float, expected: str):
    assert _format_seconds(value) == expected
