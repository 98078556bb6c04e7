from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

"""ReferenceRow model for the reference spreadsheet.

A ReferenceRow is one data row of the reference sheet: an ordered mapping
from column name to cell value. Every value is a string. Looking up a column
the row does not have yields an empty string instead of raising, so template
placeholders that name unknown columns degrade to empty segments.
"""

__all__ = [
    "ReferenceRow",
    "cell_to_str",
]


def cell_to_str(value: Any) -> str:
    """Coerce a raw cell value (pandas / openpyxl / csv) to its string form.

    - None / NaN -> ""
    - integral floats (12345.0, produced by pandas for numeric columns) -> "12345"
    - everything else -> str(value)
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, str):
        return value
    # pandas.NaT / pd.NA compare unequal to themselves
    try:
        if value != value:
            return ""
    except (TypeError, ValueError):
        pass
    return str(value)


@dataclass(frozen=True)
class ReferenceRow:
    """Immutable row of the reference sheet.

    Attributes:
        values: Column name -> cell value (string), in sheet column order
        row_number: 1-based data row number (first row after the header = 1).
            0 when the row did not come from a sheet (built in code).
    """
    values: Mapping[str, str] = field(default_factory=dict)
    row_number: int = 0

    def __post_init__(self) -> None:
        coerced = {str(k): cell_to_str(v) for k, v in self.values.items()}
        object.__setattr__(self, "values", MappingProxyType(coerced))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], row_number: int = 0) -> ReferenceRow:
        if isinstance(data, ReferenceRow):
            return data
        return cls(values=dict(data), row_number=row_number)

    def value(self, column: str) -> str:
        """Return the cell value for ``column`` or "" when the column is absent."""
        return self.values.get(column, "")

    @property
    def columns(self) -> list[str]:
        return list(self.values.keys())

    def to_dict(self) -> dict[str, str]:
        return dict(self.values)
