from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator, Sequence
from typing import Any

from ..models.column_mapping import ColumnMapping
from ..models.diagnostic import Diagnostic
from ..models.record_kind import RecordKind
from ..models.row_data import MappedRecord, RawRow, SheetMapping, display_row

"""Column-to-record mapper.

Applies a MappingSet to decoded rows. Per row and in declaration order:
- required column missing -> Diagnostic (row = index + 2), mapping skipped
- value present -> transform (if any), written at target_path, creating
  intermediate dicts on the way
- optional column missing -> nothing written

Containers are only created when a value is written beneath them, so a row
with no venue columns filled produces no ``venue`` key at all.
Configuration defects (duplicate or colliding target paths, paths outside
the record kind's shape) raise MappingConfigError when the MappingSet is
built, never while rows are processed.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "MappingConfigError",
    "MappingSet",
    "is_missing",
    "map_row",
    "map_sheet",
    "set_path",
]


class MappingConfigError(Exception):
    """Raised for an invalid mapping table."""


class MappingSet:
    """Validated, ordered collection of ColumnMappings for one record kind."""

    def __init__(
        self,
        kind: RecordKind | None,
        mappings: Iterable[ColumnMapping],
        allowed_paths: Iterable[str] | None = None,
    ) -> None:
        self.kind = kind
        self.mappings: tuple[ColumnMapping, ...] = tuple(mappings)
        self.allowed_paths = frozenset(allowed_paths) if allowed_paths is not None else None
        self._validate()

    def _validate(self) -> None:
        label = self.kind.value if self.kind is not None else "<ad hoc>"
        seen: set[str] = set()
        for m in self.mappings:
            if any(part == "" for part in m.path_parts):
                raise MappingConfigError(f"{label}: malformed target path '{m.target_path}'")
            if m.target_path in seen:
                raise MappingConfigError(f"{label}: duplicate target path '{m.target_path}'")
            seen.add(m.target_path)
            if self.allowed_paths is not None and m.target_path not in self.allowed_paths:
                raise MappingConfigError(
                    f"{label}: target path '{m.target_path}' is not a field of the record"
                )
        # a leaf may not also be a container of another mapping's leaf
        for path in seen:
            prefix = path + "."
            clash = next((other for other in seen if other.startswith(prefix)), None)
            if clash is not None:
                raise MappingConfigError(f"{label}: target path '{path}' collides with '{clash}'")

    def __iter__(self) -> Iterator[ColumnMapping]:
        return iter(self.mappings)

    def __len__(self) -> int:
        return len(self.mappings)

    @property
    def source_columns(self) -> list[str]:
        return [m.source_column for m in self.mappings]

    @property
    def required_columns(self) -> list[str]:
        return [m.source_column for m in self.mappings if m.required]


def is_missing(value: Any) -> bool:
    """True for absent, None, empty/whitespace-only text and NaN."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, float):
        return math.isnan(value)
    return False


def set_path(record: MappedRecord, path: str, value: Any) -> None:
    """Write ``value`` at a dot-delimited ``path``, creating intermediate dicts."""
    keys = path.split(".")
    current = record
    for key in keys[:-1]:
        nxt = current.get(key)
        if nxt is None:
            nxt = {}
            current[key] = nxt
        elif not isinstance(nxt, dict):
            raise MappingConfigError(f"target path '{path}' crosses non-object field '{key}'")
        current = nxt
    current[keys[-1]] = value


def map_row(
    row: RawRow, mappings: Iterable[ColumnMapping], row_number: int | None = None
) -> tuple[MappedRecord, list[Diagnostic]]:
    """Map one RawRow; returns the (possibly partial) record and its diagnostics."""
    record: MappedRecord = {}
    diagnostics: list[Diagnostic] = []
    for mapping in mappings:
        raw = row.get(mapping.source_column)
        if is_missing(raw):
            if mapping.required:
                diagnostics.append(
                    Diagnostic(
                        row=row_number,
                        field=mapping.source_column,
                        message=f'Required field "{mapping.source_column}" is missing',
                    )
                )
            continue
        value = mapping.transform(raw) if mapping.transform is not None else raw
        set_path(record, mapping.target_path, value)
    return record, diagnostics


def map_sheet(rows: Sequence[RawRow], mappings: MappingSet | Sequence[ColumnMapping]) -> SheetMapping:
    """Map every row of a sheet.

    A plain sequence of mappings is validated as an ad hoc MappingSet first, so
    a defective table fails before any row is touched.
    """
    mapping_set = mappings if isinstance(mappings, MappingSet) else MappingSet(None, mappings)
    records: list[MappedRecord] = []
    diagnostics: list[Diagnostic] = []
    for index, row in enumerate(rows):
        record, row_diags = map_row(row, mapping_set, display_row(index))
        records.append(record)
        diagnostics.extend(row_diags)
    logger.debug(
        "mapped %d rows kind=%s diagnostics=%d",
        len(records),
        mapping_set.kind.value if mapping_set.kind is not None else "-",
        len(diagnostics),
    )
    return SheetMapping(records=records, diagnostics=diagnostics)
