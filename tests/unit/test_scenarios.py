from __future__ import annotations

from excel_renamer.models.file_descriptor import FileDescriptor
from excel_renamer.services.extractor import extract
from excel_renamer.services.orchestrator import preview
from excel_renamer.services.reference_index import build_index

"""End-to-end scenarios over the pure pipeline (no files on disk)."""


def test_scenario_code_column_and_extension_placeholder():
    index = build_index([{"matricula": "12345", "nome": "Ana Silva"}], "matricula")
    [item] = preview([FileDescriptor("12345.pdf", 10)], index, "matricula", "{nome}.{extensao}")
    assert item.new_name == "Ana Silva.pdf"
    assert item.error is None
    assert item.size == 10


def test_scenario_name_column_with_separators_and_accents():
    index = build_index([{"nome": "João Silva"}], "nome")
    assert extract("Joao_Silva_relatorio.pdf", "nome") == "Joao_Silva_relatorio"
    [item] = preview([FileDescriptor("Joao_Silva_relatorio.pdf", 1)], index, "nome", "{nome}")
    assert item.error is None
    assert item.matched_key == "João Silva"
    assert item.new_name == "João Silva.pdf"


def test_scenario_unknown_file():
    index = build_index([{"matricula": "1", "nome": "Ana"}], "matricula")
    [item] = preview([FileDescriptor("unknown_file.pdf", 3)], index, "matricula", "{nome}")
    assert item.new_name == "unknown_file.pdf"
    assert item.error == "reference data not found"
    assert item.candidate == "unknown"


def test_scenario_extension_only_template():
    index = build_index([{"id": "report"}], "id")
    [item] = preview([FileDescriptor("report.CSV", 0)], index, "id", "{extensao}")
    assert item.new_name == "CSV"


def test_scenario_illegal_characters_in_values():
    index = build_index([{"id": "7", "depto": "A/B"}], "id")
    [item] = preview([FileDescriptor("7.txt", 0)], index, "id", "{depto}")
    assert item.new_name == "A_B.txt"
