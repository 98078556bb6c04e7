# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import pandas as pd
import pytest

from excel_renamer.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "files").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _fresh_logger():
    # The app logger binds sys.stdout at creation; capsys swaps it per test
    reset_logging()
    yield
    reset_logging()


def make_excel(path: Path, rows: list[dict[str, object]], sheet: str = "Plan1") -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, index=False)
    return path


@pytest.fixture()
def employee_rows() -> list[dict[str, object]]:
    return [
        {"matricula": 12345, "nome": "Ana Silva", "setor": "RH"},
        {"matricula": 23456, "nome": "João Souza", "setor": "TI"},
        {"matricula": 34567, "nome": "Maria Conceição", "setor": "Financeiro"},
    ]


@pytest.fixture()
def reference_xlsx(temp_workdir: Path, employee_rows) -> Path:
    return make_excel(temp_workdir / "funcionarios.xlsx", employee_rows)


@pytest.fixture()
def source_files(temp_workdir: Path) -> list[Path]:
    files = []
    for name, payload in [
        ("12345_holerite.pdf", b"%PDF-ana"),
        ("23456 - holerite.pdf", b"%PDF-joao"),
        ("99999_holerite.pdf", b"%PDF-unknown"),
    ]:
        f = temp_workdir / "files" / name
        f.write_bytes(payload)
        files.append(f)
    return files


@pytest.fixture()
def sample_config_yaml() -> str:
    return """reference_file: ./funcionarios.xlsx
source_directory: ./files
match_column: matricula
template: "{nome} - {setor}"
output: ./out/renomeados.zip
unmatched_policy: skip
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "rename.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def excel_factory():
    """Return the helper that writes rows into a real .xlsx file."""
    return make_excel
