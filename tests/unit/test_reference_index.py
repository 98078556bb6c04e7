from __future__ import annotations

import logging

import pytest

from excel_renamer.models.reference_row import ReferenceRow
from excel_renamer.services.reference_index import build_index


def test_every_non_empty_row_is_retrievable_by_trimmed_key():
    rows = [
        {"matricula": " 123 ", "nome": "Ana"},
        {"matricula": "456", "nome": "Bruno"},
        {"matricula": 789, "nome": "Carla"},
    ]
    index = build_index(rows, "matricula")
    assert set(index.by_exact_key) == {"123", "456", "789"}
    assert index.by_exact_key["123"].value("nome") == "Ana"
    assert index.by_exact_key["789"].value("nome") == "Carla"
    assert len(index) == 3


def test_rows_without_match_value_are_skipped():
    rows = [
        {"nome": "Ana"},
        {"nome": "   "},
        {"nome": ""},
        {"cargo": "sem nome"},
    ]
    index = build_index(rows, "nome")
    assert list(index.by_exact_key) == ["Ana"]
    assert index.skipped_rows == 3


def test_match_column_absent_everywhere_gives_empty_index():
    index = build_index([{"nome": "Ana"}, {"nome": "Bruno"}], "matricula")
    assert len(index) == 0
    assert index.by_normalized_key == {}
    assert index.skipped_rows == 2


def test_normalized_side_index_points_to_raw_key():
    index = build_index([{"nome": "  João  da   Silva "}], "nome")
    assert index.by_normalized_key == {"joao da silva": "João  da   Silva"}


def test_duplicate_keys_last_write_wins_by_default(caplog):
    rows = [{"id": "1", "nome": "Primeiro"}, {"id": "1", "nome": "Segundo"}]
    with caplog.at_level(logging.WARNING, logger="excel_renamer.services.reference_index"):
        index = build_index(rows, "id")
    assert index.by_exact_key["1"].value("nome") == "Segundo"
    assert index.duplicate_keys == ["1"]
    assert "duplicate values" in caplog.text


def test_duplicate_keys_first_policy():
    rows = [{"id": "1", "nome": "Primeiro"}, {"id": "1", "nome": "Segundo"}]
    index = build_index(rows, "id", duplicate_policy="first")
    assert index.by_exact_key["1"].value("nome") == "Primeiro"


def test_unknown_duplicate_policy_rejected():
    with pytest.raises(ValueError):
        build_index([], "id", duplicate_policy="ambiguous")


def test_accepts_reference_rows_and_keeps_load_order():
    rows = [ReferenceRow.from_mapping({"nome": n}, row_number=i) for i, n in enumerate(["Zé", "Ana", "Bia"], 1)]
    index = build_index(rows, "nome")
    assert list(index.by_exact_key) == ["Zé", "Ana", "Bia"]
    assert list(index.by_normalized_key) == ["ze", "ana", "bia"]
    assert index.get("Ana") is rows[1]
