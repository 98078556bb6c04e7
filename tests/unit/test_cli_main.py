from __future__ import annotations

import zipfile
from pathlib import Path

from excel_renamer.cli import main as cli_main


def test_no_config_and_no_flags_is_fatal(temp_workdir: Path, capsys):
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR config: config file not found" in out
    assert "--reference" in out


def test_explicit_missing_config(temp_workdir: Path, capsys):
    code = cli_main(["--config", "config/nope.yml", "--template", "{nome}"])
    assert code == 1
    assert "config file not found" in capsys.readouterr().out


def test_flags_only_run(temp_workdir: Path, reference_xlsx: Path, source_files, capsys):
    code = cli_main([
        "--reference", str(reference_xlsx),
        "--source-dir", "files",
        "--match-column", "matricula",
        "--template", "{nome}",
        "--output", "saida.zip",
    ])
    out = capsys.readouterr().out
    assert code == 2
    assert "INFO 12345_holerite.pdf -> Ana Silva.pdf" in out
    assert "WARN 99999_holerite.pdf: reference data not found (candidate: 99999)" in out
    with zipfile.ZipFile(temp_workdir / "saida.zip") as zf:
        assert zf.namelist() == ["Ana Silva.pdf", "João Souza.pdf"]


def test_cli_flags_override_config(write_config: Path, reference_xlsx: Path, source_files, temp_workdir: Path):
    code = cli_main(["--template", "{setor}", "--unmatched-policy", "marked"])
    assert code == 2
    with zipfile.ZipFile(temp_workdir / "out" / "renomeados.zip") as zf:
        assert zf.namelist() == ["RH.pdf", "TI.pdf", "UNPROCESSED_99999_holerite.pdf"]
        assert zf.read("UNPROCESSED_99999_holerite.pdf") == b"%PDF-unknown"


def test_config_from_environment(temp_workdir: Path, reference_xlsx: Path, source_files, monkeypatch):
    alt = temp_workdir / "alt.yml"
    alt.write_text(
        "reference_file: funcionarios.xlsx\nsource_directory: files\ntemplate: '{nome}'\noutput: alt.zip\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("EXCEL_RENAMER_CONFIG", str(alt))
    assert cli_main([]) == 2
    assert (temp_workdir / "alt.zip").exists()


def test_dry_run_writes_no_archive(write_config: Path, reference_xlsx: Path, source_files, temp_workdir: Path, capsys):
    code = cli_main(["--dry-run"])
    out = capsys.readouterr().out
    assert code == 2
    assert not (temp_workdir / "out" / "renomeados.zip").exists()
    assert "archived=0 skipped=1" in out
    assert list((temp_workdir / "logs").glob("errors-*.log"))


def test_missing_source_directory(write_config: Path, reference_xlsx: Path, temp_workdir: Path, capsys):
    code = cli_main(["--source-dir", "nowhere"])
    assert code == 1
    assert "ERROR directory not found: nowhere" in capsys.readouterr().out


def test_unknown_match_column_is_fatal(write_config: Path, reference_xlsx: Path, source_files, capsys):
    code = cli_main(["--match-column", "cargo"])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR reference:" in out
    assert "cargo" in out


def test_empty_source_directory(write_config: Path, reference_xlsx: Path, temp_workdir: Path, capsys):
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY files=0 matched=0 unmatched=0 archived=0 skipped=0" in out
    assert not (temp_workdir / "out" / "renomeados.zip").exists()


def test_inspect_data(write_config: Path, reference_xlsx: Path, capsys):
    code = cli_main(["--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "FILE: funcionarios.xlsx" in out
    assert "SHEET: Plan1 cols=['matricula', 'nome', 'setor'] rows=3" in out
    assert "suggested_match_column=matricula" in out
    assert "sample_rows=" in out


def test_inspect_data_missing_reference(temp_workdir: Path, capsys):
    code = cli_main(["--inspect-data", "--reference", "x.xlsx", "--source-dir", ".", "--template", "{a}"])
    assert code == 1
    assert "inspect: reference file not found" in capsys.readouterr().out


def test_debug_flag(write_config: Path, reference_xlsx: Path, source_files, capsys):
    cli_main(["--debug", "--dry-run"])
    assert "DEBUG debug mode enabled" in capsys.readouterr().out
