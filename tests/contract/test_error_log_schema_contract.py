from __future__ import annotations

import json
from pathlib import Path

from excel_renamer.cli import main as cli_main

"""Error log contract: JSON Lines with a fixed key set, one line per failed file."""

KEYS = {"timestamp", "file", "candidate", "error_type", "message"}


def test_error_log_lines(write_config: Path, reference_xlsx: Path, source_files, temp_workdir: Path):
    (temp_workdir / "files" / "sem_cadastro.pdf").write_bytes(b"x")
    assert cli_main([]) == 2

    [log] = list((temp_workdir / "logs").glob("errors-*.log"))
    records = [json.loads(line) for line in log.read_text(encoding="utf-8").splitlines()]
    assert [r["file"] for r in records] == ["99999_holerite.pdf", "sem_cadastro.pdf"]
    for r in records:
        assert set(r) == KEYS
        assert r["timestamp"].endswith("Z")
        assert r["error_type"] == "NO_MATCH"
