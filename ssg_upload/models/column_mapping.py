from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

"""ColumnMapping model: one spreadsheet column bound to one nested record slot."""

__all__ = [
    "ColumnMapping",
]


@dataclass(frozen=True)
class ColumnMapping:
    """Immutable rule mapping a source column to a dot-delimited target path.

    ``source_column`` is matched case- and spelling-exact against the sheet
    header. ``target_path`` addresses a slot in the nested record, e.g.
    ``trainee.idType.code``.
    """
    source_column: str  # Header text in the uploaded sheet
    target_path: str  # Dot-delimited path into the mapped record
    required: bool = False  # Missing/empty value -> Diagnostic
    transform: Callable[[Any], Any] | None = None  # Applied to present values only

    @property
    def path_parts(self) -> tuple[str, ...]:
        return tuple(self.target_path.split("."))
