from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from ssg_upload.excel.reader import (
    DecodeError,
    decode_workbook,
    list_sheet_names,
    normalize_cell,
    read_workbook,
)


def test_decode_uses_first_row_as_header(make_workbook):
    data = make_workbook({
        "Course Runs": [
            ["Course Reference Number", "Mode of Training"],
            ["TGS-1", "1"],
            ["TGS-2", "2"],
        ]
    })
    sheets = decode_workbook(data)
    assert list(sheets) == ["Course Runs"]
    assert sheets["Course Runs"] == [
        {"Course Reference Number": "TGS-1", "Mode of Training": "1"},
        {"Course Reference Number": "TGS-2", "Mode of Training": "2"},
    ]


def test_decode_fills_empty_and_short_rows_with_empty_string(make_workbook):
    data = make_workbook({
        "Sessions": [
            ["Start Date", "Venue Room", "Venue Unit"],
            ["2025-01-01", None, None],
            ["2025-01-02", "R1", None],
        ]
    })
    rows = decode_workbook(data)["Sessions"]
    assert rows[0] == {"Start Date": "2025-01-01", "Venue Room": "", "Venue Unit": ""}
    assert rows[1] == {"Start Date": "2025-01-02", "Venue Room": "R1", "Venue Unit": ""}


def test_decode_skips_blank_rows(make_workbook):
    data = make_workbook({
        "S": [
            ["id", "name"],
            ["1", "Alice"],
            [None, None],
            ["2", "Bob"],
        ]
    })
    rows = decode_workbook(data)["S"]
    assert [r["name"] for r in rows] == ["Alice", "Bob"]


def test_decode_keeps_na_text(make_workbook):
    data = make_workbook({"S": [["Collection Status"], ["NA"]]})
    assert decode_workbook(data)["S"] == [{"Collection Status": "NA"}]


def test_decode_preserves_sheet_order_and_header_only_sheets(make_workbook):
    data = make_workbook({
        "Enrolments": [["Trainee ID"]],
        "Course Runs": [["Course Reference Number"], ["TGS-1"]],
    })
    sheets = decode_workbook(data)
    assert list(sheets) == ["Enrolments", "Course Runs"]
    assert sheets["Enrolments"] == []


def test_list_sheet_names(make_workbook):
    data = make_workbook({"A": [["c1"], ["1"]], "B": [["c1"], ["2"]]})
    assert list_sheet_names(data) == ["A", "B"]


def test_decode_empty_bytes_raises():
    with pytest.raises(DecodeError, match="empty"):
        decode_workbook(b"")


def test_decode_garbage_raises():
    with pytest.raises(DecodeError):
        decode_workbook(b"this is not a spreadsheet at all")
    with pytest.raises(DecodeError):
        list_sheet_names(b"PK\x03\x04 truncated zip")


def test_read_workbook_missing_file(tmp_path: Path):
    with pytest.raises(DecodeError, match="cannot read"):
        read_workbook(tmp_path / "missing.xlsx")


def test_read_workbook_from_disk(tmp_path: Path, make_workbook):
    path = tmp_path / "upload.xlsx"
    path.write_bytes(make_workbook({"S": [["h"], ["v"]]}))
    assert read_workbook(path) == {"S": [{"h": "v"}]}


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, ""),
        (float("nan"), ""),
        ("  padded  ", "padded"),
        (30.0, 30),
        (12.5, 12.5),
        (True, True),
        (datetime(2025, 3, 5), "2025-03-05"),
        (datetime(2025, 3, 5, 9, 30), "2025-03-05 09:30:00"),
    ],
)
def test_normalize_cell(raw, expected):
    assert normalize_cell(raw) == expected


def test_decode_native_date_cells(make_workbook):
    data = make_workbook({"S": [["Start Date"], [datetime(2025, 3, 5)]]})
    assert decode_workbook(data)["S"] == [{"Start Date": "2025-03-05"}]


def test_numeric_cells_stay_numbers(make_workbook):
    data = make_workbook({"Enrolments": [["Phone Number", "Course Run ID", "Discount Amount"], [91234567, 10026.0, 12.5]]})
    row = decode_workbook(data)["Enrolments"][0]
    assert row == {"Phone Number": 91234567, "Course Run ID": 10026, "Discount Amount": 12.5}
    assert type(row["Course Run ID"]) is int
