from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.reference_row import ReferenceRow, cell_to_str

"""Reference sheet reader (Excel / CSV -> ReferenceRow list).

- First row is the header, every following row is a data row.
- Only one sheet is read (the first one unless a name is given).
- Blank cells become "" and fully blank rows are skipped.

Parsing is delegated to pandas (openpyxl engine for .xlsx/.xlsm). Cells are
read as objects so numeric identifiers keep their integer form.
"""

__all__ = [
    "EXCEL_SUFFIXES",
    "CSV_SUFFIXES",
    "COMMON_MATCH_COLUMNS",
    "ReferenceDataError",
    "ReferenceLoadError",
    "EmptyReferenceError",
    "MissingColumnsError",
    "ReferenceSheet",
    "read_reference_file",
    "sheet_from_dataframe",
    "require_columns",
    "suggest_match_column",
]

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
CSV_SUFFIXES = {".csv"}

# Pre-selected match column candidates, compared lowercased
COMMON_MATCH_COLUMNS = ("matricula", "matrícula", "id", "código", "codigo", "nome", "name")


class ReferenceDataError(Exception):
    """Base class for reference sheet load errors."""


class ReferenceLoadError(ReferenceDataError):
    """Raised when the reference file cannot be read or has an unsupported format."""


class EmptyReferenceError(ReferenceDataError):
    """Raised when the reference sheet has no columns or no data rows."""


class MissingColumnsError(ReferenceDataError):
    """Raised when a required column (e.g. the match column) is not in the header."""


@dataclass
class ReferenceSheet:
    sheet_name: str
    columns: list[str]
    rows: list[ReferenceRow]

    def preview_rows(self, limit: int = 10) -> list[dict[str, str]]:
        return [r.to_dict() for r in self.rows[:limit]]


def _read_csv(path: Path, encoding: str | None) -> pd.DataFrame:
    encodings = [encoding] if encoding else ["utf-8-sig", "latin-1"]
    last_error: Exception | None = None
    for enc in encodings:
        try:
            # sep=None sniffs "," vs ";" (spreadsheets exported with pt-BR locale use ";")
            return pd.read_csv(
                path, sep=None, engine="python", dtype=str, keep_default_na=False, encoding=enc
            )
        except UnicodeDecodeError as e:
            last_error = e
    raise ReferenceLoadError(f"cannot decode csv '{path.name}': {last_error}")


def read_reference_file(
    path: Path, *, sheet: str | None = None, encoding: str | None = None
) -> ReferenceSheet:
    """Read the reference spreadsheet at ``path``.

    Args:
        path: .xlsx / .xlsm / .csv file
        sheet: Sheet name (Excel only). None reads the first sheet.
        encoding: CSV encoding. None tries utf-8 (with BOM) then latin-1.

    Raises:
        ReferenceLoadError: missing file, unsupported format, parse failure
        EmptyReferenceError: no header or no data rows
    """
    if not path.exists():
        raise ReferenceLoadError(f"reference file not found: {path}")
    suffix = path.suffix.lower()
    try:
        if suffix in CSV_SUFFIXES:
            df = _read_csv(path, encoding)
            sheet_name = path.stem
        elif suffix in EXCEL_SUFFIXES:
            with pd.ExcelFile(path, engine="openpyxl") as xls:
                if sheet is not None and sheet not in xls.sheet_names:
                    raise ReferenceLoadError(f"sheet '{sheet}' not found in '{path.name}'")
                sheet_name = sheet if sheet is not None else str(xls.sheet_names[0])
                df = xls.parse(sheet_name, header=0, dtype=object)
        else:
            raise ReferenceLoadError(f"unsupported reference format: '{path.suffix}'")
    except ReferenceDataError:
        raise
    except pd.errors.EmptyDataError as e:
        raise EmptyReferenceError(f"reference file '{path.name}' is empty") from e
    except Exception as e:  # openpyxl / zipfile raise assorted types for corrupt workbooks
        raise ReferenceLoadError(f"cannot read reference file '{path.name}': {e}") from e

    return sheet_from_dataframe(df, sheet_name)


def sheet_from_dataframe(df: pd.DataFrame, sheet_name: str) -> ReferenceSheet:
    """Convert a header-parsed DataFrame into a ReferenceSheet."""
    columns = [str(c).strip() for c in df.columns.tolist()]
    if not columns:
        raise EmptyReferenceError(f"sheet '{sheet_name}' has no columns")

    rows: list[ReferenceRow] = []
    for n, (_, raw) in enumerate(df.iterrows(), start=1):
        values: dict[str, Any] = {
            col: cell_to_str(val) for col, val in zip(columns, raw.tolist(), strict=False)
        }
        # Skip rows where every cell is blank
        if all(not v.strip() for v in values.values()):
            continue
        rows.append(ReferenceRow(values=values, row_number=n))

    if not rows:
        raise EmptyReferenceError(f"sheet '{sheet_name}' has no data rows")
    return ReferenceSheet(sheet_name=sheet_name, columns=columns, rows=rows)


def require_columns(sheet: ReferenceSheet, required: Iterable[str]) -> None:
    """Raise MissingColumnsError unless every column in ``required`` is in the header."""
    missing = set(required) - set(sheet.columns)
    if missing:
        raise MissingColumnsError(f"sheet '{sheet.sheet_name}' missing columns: {sorted(missing)}")


def suggest_match_column(columns: list[str]) -> str | None:
    """Pick a default match column: first well-known identifier column, else the first one."""
    for col in columns:
        if col.lower() in COMMON_MATCH_COLUMNS:
            return col
    return columns[0] if columns else None
