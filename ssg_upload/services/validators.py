from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from ..models.diagnostic import Diagnostic, ValidationVerdict
from ..models.record_kind import RecordKind
from ..models.row_data import MappedRecord, display_row

"""Record validators per record kind.

Every check runs; each failing check appends exactly one Diagnostic, so an
operator sees all problems of a record at once. Date ordering compares the
canonical YYYYMMDD text lexically (fixed width, zero padded).
"""

__all__ = [
    "VALIDATORS",
    "is_valid_email",
    "validate_assessment",
    "validate_course_run",
    "validate_course_session",
    "validate_enrolment",
    "validate_record",
    "validate_records",
    "validate_uen",
]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
UEN_PATTERN = re.compile(r"^[A-Za-z0-9]{9,10}$")
COMPACT_DATE_PATTERN = re.compile(r"^\d{8}$")
HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

SCORE_MIN = 0
SCORE_MAX = 999


def _get(record: MappedRecord, path: str) -> Any:
    current: Any = record
    for key in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and EMAIL_PATTERN.match(value) is not None


def validate_uen(value: Any) -> bool:
    """Singapore UEN: 9 or 10 alphanumeric characters."""
    return isinstance(value, str) and UEN_PATTERN.match(value) is not None


def _is_compact_date(value: Any) -> bool:
    text = str(value)
    if not COMPACT_DATE_PATTERN.match(text):
        return False
    try:
        datetime.strptime(text, "%Y%m%d")
    except ValueError:
        return False
    return True


class _Checker:
    """Collects diagnostics for one record."""

    def __init__(self, record: MappedRecord, row: int | None) -> None:
        self.record = record
        self.row = row
        self.errors: list[Diagnostic] = []

    def fail(self, field: str, message: str) -> None:
        self.errors.append(Diagnostic(row=self.row, field=field, message=message))

    def require(self, path: str, message: str) -> bool:
        if _present(_get(self.record, path)):
            return True
        self.fail(path, message)
        return False

    def email(self, path: str) -> None:
        value = _get(self.record, path)
        if _present(value) and not is_valid_email(value):
            self.fail(path, "Invalid email format")

    def uen(self, path: str) -> None:
        value = _get(self.record, path)
        if _present(value) and not validate_uen(value):
            self.fail(path, "Invalid UEN format")

    def compact_date(self, path: str, label: str) -> bool:
        value = _get(self.record, path)
        if not _present(value):
            return False
        if _is_compact_date(value):
            return True
        self.fail(path, f"{label} must be a valid date in YYYYMMDD format")
        return False

    def ordered(self, first: str, second: str, field: str, message: str) -> None:
        if str(_get(self.record, first)) > str(_get(self.record, second)):
            self.fail(field, message)

    def verdict(self) -> ValidationVerdict:
        return ValidationVerdict(errors=tuple(self.errors))


def validate_course_run(record: MappedRecord, row: int | None = None) -> ValidationVerdict:
    c = _Checker(record, row)
    c.require("courseReferenceNumber", "Course Reference Number is required")
    c.require("registrationDates.opening", "Registration opening date is required")
    c.require("registrationDates.closing", "Registration closing date is required")
    c.require("courseDates.start", "Course start date is required")
    c.require("courseDates.end", "Course end date is required")
    c.require("modeOfTraining", "Mode of Training is required")
    if c.require("courseAdminEmail", "Course Admin Email is required"):
        c.email("courseAdminEmail")
    c.require("scheduleInfoType.code", "Schedule Info Type is required")
    c.require("courseVacancy.code", "Course Vacancy code is required")

    opening = c.compact_date("registrationDates.opening", "Registration opening date")
    closing = c.compact_date("registrationDates.closing", "Registration closing date")
    if opening and closing:
        c.ordered(
            "registrationDates.opening",
            "registrationDates.closing",
            "registrationDates",
            "Registration opening date must be before closing date",
        )
    start = c.compact_date("courseDates.start", "Course start date")
    end = c.compact_date("courseDates.end", "Course end date")
    if start and end:
        c.ordered("courseDates.start", "courseDates.end", "courseDates", "Course start date must be before end date")
    return c.verdict()


def validate_course_session(record: MappedRecord, row: int | None = None) -> ValidationVerdict:
    c = _Checker(record, row)
    c.require("startDate", "Start date is required")
    c.require("endDate", "End date is required")
    c.require("startTime", "Start time is required")
    c.require("endTime", "End time is required")
    c.require("modeOfTraining", "Mode of Training is required")

    start = c.compact_date("startDate", "Start date")
    end = c.compact_date("endDate", "End date")
    if start and end:
        c.ordered("startDate", "endDate", "startDate", "Start date must be before end date")
    times_ok = True
    for path, label in (("startTime", "Start time"), ("endTime", "End time")):
        value = _get(record, path)
        if not _present(value):
            times_ok = False
        elif not HHMM_PATTERN.match(str(value)):
            c.fail(path, f"{label} must be in HH:MM format")
            times_ok = False
    if times_ok and start and end and str(_get(record, "startDate")) == str(_get(record, "endDate")):
        c.ordered("startTime", "endTime", "startTime", "Start time must be before end time")
    return c.verdict()


def validate_enrolment(record: MappedRecord, row: int | None = None) -> ValidationVerdict:
    c = _Checker(record, row)
    c.require("course.run.id", "Course Run ID is required")
    c.require("course.referenceNumber", "Course Reference Number is required")
    c.require("trainee.id", "Trainee ID is required")
    c.require("trainee.idType.code", "Trainee ID Type is required")
    c.require("trainee.fullName", "Trainee Full Name is required")
    c.require("trainee.dateOfBirth", "Trainee Date of Birth is required")
    c.require("trainee.enrolmentDate", "Enrolment Date is required")
    c.require("trainee.sponsorshipType", "Sponsorship Type is required")
    c.require("trainingPartner.code", "Training Partner Code is required")
    c.email("trainee.emailAddress")
    c.email("employer.emailAddress")
    c.uen("employer.uen")
    c.uen("trainingPartner.uen")
    return c.verdict()


def validate_assessment(record: MappedRecord, row: int | None = None) -> ValidationVerdict:
    c = _Checker(record, row)
    c.require("course.runId", "Course Run ID is required")
    c.require("course.referenceNumber", "Course Reference Number is required")
    c.require("result", "Result is required")
    c.require("assessmentDate", "Assessment Date is required")
    c.require("trainee.id", "Trainee ID is required")
    c.require("trainee.idType.code", "Trainee ID Type is required")
    c.require("trainee.fullName", "Trainee Full Name is required")
    c.require("trainingPartner.code", "Training Partner Code is required")

    score = record.get("score")
    if score is not None:
        in_range = (
            isinstance(score, (int, float))
            and not isinstance(score, bool)
            and SCORE_MIN <= score <= SCORE_MAX
        )
        if not in_range:
            c.fail("score", f"Score must be between {SCORE_MIN} and {SCORE_MAX}")
    return c.verdict()


Validator = Callable[..., ValidationVerdict]

VALIDATORS: dict[RecordKind, Validator] = {
    RecordKind.COURSE_SESSIONS: validate_course_session,
    RecordKind.COURSE_RUNS: validate_course_run,
    RecordKind.ENROLMENTS: validate_enrolment,
    RecordKind.ASSESSMENTS: validate_assessment,
}


def validate_record(kind: RecordKind, record: MappedRecord, row: int | None = None) -> ValidationVerdict:
    return VALIDATORS[kind](record, row)


def validate_records(kind: RecordKind, records: Sequence[MappedRecord]) -> list[Diagnostic]:
    """Validate a sheet's records; diagnostics carry the same rows as the mapper's."""
    validator = VALIDATORS[kind]
    diagnostics: list[Diagnostic] = []
    for index, record in enumerate(records):
        diagnostics.extend(validator(record, display_row(index)).errors)
    return diagnostics
