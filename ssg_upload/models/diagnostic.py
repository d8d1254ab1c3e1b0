from __future__ import annotations

from dataclasses import dataclass, field

"""Diagnostic and ValidationVerdict models.

A Diagnostic describes one mapping or validation failure. ``row`` is the
display row (sheet index + 2) for diagnostics raised while processing a sheet
and ``None`` for records built programmatically.
"""

__all__ = [
    "Diagnostic",
    "ValidationVerdict",
]


@dataclass(frozen=True)
class Diagnostic:
    field: str  # Source column (mapper) or record path (validator)
    message: str
    row: int | None = None

    def __str__(self) -> str:
        if self.row is None:
            return f"{self.field}: {self.message}"
        return f"row {self.row} {self.field}: {self.message}"


@dataclass(frozen=True)
class ValidationVerdict:
    """Outcome of validating one record. ``valid`` is exactly ``not errors``."""
    errors: tuple[Diagnostic, ...] = field(default_factory=tuple)

    @property
    def valid(self) -> bool:
        return not self.errors
