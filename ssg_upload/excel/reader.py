from __future__ import annotations

import math
from datetime import date, datetime, time
from io import BytesIO
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.row_data import RawRow, SheetSet

"""Spreadsheet decoder.

The first row of every sheet is the header; every following non-blank row
becomes a RawRow holding a key for each header column. Empty cells and cells
missing from short rows become "". pandas' default NA conversion is disabled
so that literal text such as "NA" survives as text.
"""

__all__ = [
    "DecodeError",
    "decode_workbook",
    "list_sheet_names",
    "read_workbook",
]


class DecodeError(Exception):
    """Raised when the bytes are not a readable spreadsheet or hold no sheets."""


def _open(data: bytes) -> pd.ExcelFile:
    if not data:
        raise DecodeError("uploaded file is empty")
    try:
        return pd.ExcelFile(BytesIO(data))
    except Exception as e:
        raise DecodeError(f"not a readable spreadsheet: {e}") from e


def _sheet_names(xls: pd.ExcelFile) -> list[str]:
    names = [str(n) for n in xls.sheet_names]
    if not names:
        raise DecodeError("spreadsheet contains no sheets")
    return names


def list_sheet_names(data: bytes) -> list[str]:
    """Return sheet names in workbook order without parsing any rows."""
    with _open(data) as xls:
        return _sheet_names(xls)


def decode_workbook(data: bytes) -> SheetSet:
    """Decode every sheet of a workbook into ordered RawRows.

    Raises:
        DecodeError: empty bytes, unreadable container or zero sheets
    """
    sheets: SheetSet = {}
    with _open(data) as xls:
        for name in _sheet_names(xls):
            try:
                df = xls.parse(name, header=None, dtype=object, keep_default_na=False)
            except Exception as e:
                raise DecodeError(f"sheet '{name}' could not be read: {e}") from e
            sheets[name] = normalize_sheet(df)
    return sheets


def read_workbook(path: Path) -> SheetSet:
    try:
        data = path.read_bytes()
    except OSError as e:
        raise DecodeError(f"cannot read {path}: {e}") from e
    return decode_workbook(data)


def normalize_sheet(df: pd.DataFrame) -> list[RawRow]:
    """Turn a header-less DataFrame into RawRows using its first row as header.

    A sheet without a header row yields no rows. Rows whose cells are all
    empty are skipped.
    """
    if df.shape[0] == 0:
        return []
    columns = _header(df.iloc[0].tolist())
    rows: list[RawRow] = []
    for raw in df.iloc[1:].itertuples(index=False, name=None):
        values = [normalize_cell(v) for v in raw]
        if all(v == "" for v in values):
            continue
        row: RawRow = {}
        for i, col in enumerate(columns):
            row[col] = values[i] if i < len(values) else ""
        rows.append(row)
    return rows


def _header(cells: list[Any]) -> list[str]:
    columns: list[str] = []
    seen: dict[str, int] = {}
    for i, cell in enumerate(cells):
        name = normalize_cell(cell)
        name = str(name) if name != "" else f"Unnamed: {i}"
        # duplicate headers get pandas-style ".1", ".2" suffixes
        if name in seen:
            seen[name] += 1
            name = f"{name}.{seen[name]}"
        else:
            seen[name] = 0
        columns.append(name)
    return columns


def normalize_cell(value: Any) -> Any:
    """Normalize one cell value to a loosely typed scalar.

    - None / NaN / NaT -> ""
    - str -> stripped str
    - datetime at midnight -> "YYYY-MM-DD", other datetimes -> "YYYY-MM-DD HH:MM:SS"
    - time -> "HH:MM:SS"
    - integral float -> int
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return value
    if isinstance(value, datetime):  # includes pd.Timestamp
        if pd.isna(value):
            return ""
        if value.time() == time(0, 0):
            return value.strftime("%Y-%m-%d")
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return int(value)
        return value
    if pd.isna(value):
        return ""
    return value
