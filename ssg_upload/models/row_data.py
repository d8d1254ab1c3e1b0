from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .diagnostic import Diagnostic

"""Row-level data shapes flowing through the pipeline.

- RawRow: header -> cell value for one decoded sheet row (empty cells = "")
- SheetSet: sheet name -> ordered RawRows, one per uploaded workbook
- MappedRecord: nested API-shaped dict built from one RawRow
- SheetMapping: mapper output for a whole sheet
"""

__all__ = [
    "MappedRecord",
    "RawRow",
    "SheetMapping",
    "SheetSet",
    "display_row",
]

RawRow = dict[str, Any]
SheetSet = dict[str, list[RawRow]]
MappedRecord = dict[str, Any]

# Header occupies sheet row 1 and rows are shown 1-based.
FIRST_DATA_ROW = 2


def display_row(index: int) -> int:
    """Display row number for the zero-based data row ``index``."""
    return index + FIRST_DATA_ROW


@dataclass(frozen=True)
class SheetMapping:
    """Records and missing-required-field diagnostics for one sheet.

    ``records[i]`` was built from data row ``i``; records are produced even for
    rows that raised diagnostics.
    """
    records: list[MappedRecord] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
