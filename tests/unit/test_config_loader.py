from __future__ import annotations

from pathlib import Path

import pytest

from excel_renamer.config.loader import DEFAULT_OUTPUT, ConfigError, RenameConfig, load_config
from excel_renamer.services.extractor import NAME_LIKE_TERMS


def test_load_config_basic(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.reference_file == "./funcionarios.xlsx"
    assert cfg.source_directory == "./files"
    assert cfg.match_column == "matricula"
    assert cfg.template == "{nome} - {setor}"
    assert cfg.output == "./out/renomeados.zip"
    assert cfg.unmatched_policy == "skip"


def test_defaults_for_optional_keys(temp_workdir: Path):
    p = temp_workdir / "config" / "min.yml"
    p.write_text("reference_file: r.xlsx\nsource_directory: .\ntemplate: '{nome}'\n", encoding="utf-8")
    cfg = load_config(p)
    assert cfg.match_column is None
    assert cfg.output == DEFAULT_OUTPUT == "arquivos_renomeados.zip"
    assert cfg.sheet is None
    assert cfg.recursive is False
    assert cfg.duplicate_keys == "last"
    assert cfg.name_like_terms == NAME_LIKE_TERMS
    assert cfg.max_workers is None


def test_custom_name_like_terms(temp_workdir: Path):
    p = temp_workdir / "config" / "terms.yml"
    p.write_text(
        "reference_file: r.xlsx\nsource_directory: .\ntemplate: '{x}'\nname_like_terms: [aluno, paciente]\n",
        encoding="utf-8",
    )
    assert load_config(p).name_like_terms == ("aluno", "paciente")


def test_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "nope.yml")


def test_invalid_yaml(temp_workdir: Path):
    p = temp_workdir / "config" / "bad.yml"
    p.write_text("template: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(p)


def test_root_must_be_mapping(temp_workdir: Path):
    p = temp_workdir / "config" / "list.yml"
    p.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(p)


def test_with_overrides_ignores_none():
    cfg = RenameConfig(reference_file="r.xlsx", source_directory=".", template="{nome}")
    changed = cfg.with_overrides(template="{id}", output=None, recursive=True)
    assert changed.template == "{id}"
    assert changed.output == DEFAULT_OUTPUT
    assert changed.recursive is True
    assert cfg.with_overrides(output=None) is cfg
