from __future__ import annotations

import math

import pytest

from excel_renamer.models.reference_row import ReferenceRow, cell_to_str


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, ""),
        (math.nan, ""),
        (12345.0, "12345"),
        (12.5, "12.5"),
        (7, "7"),
        ("  texto ", "  texto "),
        (True, "True"),
    ],
)
def test_cell_to_str(value, expected):
    assert cell_to_str(value) == expected


def test_missing_column_yields_empty_string():
    row = ReferenceRow.from_mapping({"nome": "Ana"})
    assert row.value("nome") == "Ana"
    assert row.value("cargo") == ""


def test_values_are_coerced_and_read_only():
    row = ReferenceRow.from_mapping({"matricula": 12345.0, "obs": None}, row_number=4)
    assert row.to_dict() == {"matricula": "12345", "obs": ""}
    assert row.row_number == 4
    with pytest.raises(TypeError):
        row.values["matricula"] = "x"  # type: ignore[index]


def test_column_order_is_preserved():
    row = ReferenceRow.from_mapping({"b": 1, "a": 2, "c": 3})
    assert row.columns == ["b", "a", "c"]


def test_from_mapping_returns_existing_row_unchanged():
    row = ReferenceRow.from_mapping({"a": "1"})
    assert ReferenceRow.from_mapping(row) is row
