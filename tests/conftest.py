# Shared pytest fixtures
from __future__ import annotations

import asyncio
import tempfile
from collections.abc import Callable
from io import BytesIO
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from ssg_upload.models.record_kind import RecordKind
from ssg_upload.models.submission import SubmissionOutcome


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """api:
  base_url: https://api.example.test
  client_id: yaml-client
  client_secret: yaml-secret
  timeout_seconds: 10
training_provider:
  uen: T16GB0001A
submission:
  max_concurrency: 3
error_log_dir: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str, monkeypatch) -> Path:
    for var in ("SSG_API_BASE_URL", "SSG_CLIENT_ID", "SSG_CLIENT_SECRET", "SSG_UEN"):
        monkeypatch.delenv(var, raising=False)
    cfg = temp_workdir / "config" / "upload.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def workbook_bytes(sheets: dict[str, list[dict[str, Any]] | list[list[Any]]]) -> bytes:
    """Build an .xlsx in memory.

    A list of dicts is written with its keys as the header row; a list of
    lists is written verbatim (first list = header).
    """
    buf = BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            if rows and isinstance(rows[0], dict):
                pd.DataFrame(rows).to_excel(writer, sheet_name=name, index=False)
            else:
                pd.DataFrame(rows).to_excel(writer, sheet_name=name, header=False, index=False)
    return buf.getvalue()


@pytest.fixture()
def make_workbook() -> Callable[..., bytes]:
    return workbook_bytes


@pytest.fixture()
def course_run_row() -> dict[str, Any]:
    return {
        "Course Reference Number": "TGS-2020123456",
        "Registration Opening Date": "2025-01-01",
        "Registration Closing Date": "2025-01-15",
        "Course Start Date": "2025-02-01",
        "Course End Date": "2025-02-28",
        "Mode of Training": "1",
        "Course Admin Email": "admin@example.com",
        "Schedule Info Type Code": "01",
        "Schedule Info Type Description": "Weekday",
        "Vacancy Code": "A",
        "Vacancy Description": "Available",
    }


@pytest.fixture()
def enrolment_row() -> dict[str, Any]:
    return {
        "Course Run ID": "10026",
        "Course Reference Number": "TGS-2020123456",
        "Trainee ID": "S1234567A",
        "Trainee ID Type": "SB",
        "Trainee Full Name": "Tan Ah Kow",
        "Trainee Date of Birth": "1990-01-01",
        "Trainee Email": "tan@example.com",
        "Enrolment Date": "2025-01-20",
        "Sponsorship Type": "INDIVIDUAL",
        "Area Code": "",
        "Country Code": "65",
        "Phone Number": "91234567",
        "Discount Amount": "50.5",
        "Collection Status": "Full Payment",
        "Employer UEN": "",
        "Employer Full Name": "",
        "Employer Email": "",
        "Training Partner Code": "T16GB0001A-01",
        "Training Partner UEN": "T16GB0001A",
    }


class FakeSubmitter:
    """In-memory submitter; fails records whose predicate matches."""

    def __init__(self, fail_when: Callable[[dict[str, Any]], bool] | None = None) -> None:
        self.fail_when = fail_when
        self.calls: list[tuple[RecordKind, dict[str, Any]]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def submit(self, kind: RecordKind, record: dict[str, Any]) -> SubmissionOutcome:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            self.calls.append((kind, record))
            if self.fail_when is not None and self.fail_when(record):
                return SubmissionOutcome.failed("Validation error: rejected", 422)
            return SubmissionOutcome.ok(200)
        finally:
            self.in_flight -= 1


@pytest.fixture()
def fake_submitter() -> FakeSubmitter:
    return FakeSubmitter()


@pytest.fixture()
def submitter_factory() -> type[FakeSubmitter]:
    return FakeSubmitter
