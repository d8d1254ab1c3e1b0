from __future__ import annotations

import pytest

from ssg_upload.models.diagnostic import Diagnostic
from ssg_upload.models.record_kind import RecordKind
from ssg_upload.services.validators import (
    is_valid_email,
    validate_assessment,
    validate_course_run,
    validate_course_session,
    validate_enrolment,
    validate_record,
    validate_records,
    validate_uen,
)


def _course_run(**overrides):
    record = {
        "courseReferenceNumber": "TGS-2020123456",
        "registrationDates": {"opening": "20250101", "closing": "20250115"},
        "courseDates": {"start": "20250201", "end": "20250228"},
        "modeOfTraining": "1",
        "courseAdminEmail": "admin@example.com",
        "scheduleInfoType": {"code": "01", "description": "Weekday"},
        "courseVacancy": {"code": "A", "description": "Available"},
    }
    record.update(overrides)
    return record


def _assessment(**overrides):
    record = {
        "course": {"runId": "10026", "referenceNumber": "TGS-2020123456"},
        "result": "Pass",
        "assessmentDate": "20250301",
        "trainee": {"id": "S1234567A", "idType": {"code": "SB"}, "fullName": "Tan Ah Kow"},
        "trainingPartner": {"code": "T16GB0001A-01"},
        "score": 80,
    }
    record.update(overrides)
    return record


def _enrolment(**overrides):
    record = {
        "course": {"run": {"id": "10026"}, "referenceNumber": "TGS-2020123456"},
        "trainee": {
            "id": "S1234567A",
            "idType": {"code": "SB"},
            "fullName": "Tan Ah Kow",
            "dateOfBirth": "1990-01-01",
            "enrolmentDate": "2025-01-20",
            "sponsorshipType": "INDIVIDUAL",
            "emailAddress": "tan@example.com",
        },
        "trainingPartner": {"code": "T16GB0001A-01", "uen": "T16GB0001A"},
    }
    record.update(overrides)
    return record


def test_valid_course_run():
    verdict = validate_course_run(_course_run())
    assert verdict.valid
    assert verdict.errors == ()


def test_invalid_admin_email_yields_one_diagnostic():
    verdict = validate_course_run(_course_run(courseAdminEmail="not-an-email"))
    assert not verdict.valid
    assert verdict.errors == (Diagnostic(field="courseAdminEmail", message="Invalid email format"),)


def test_registration_dates_out_of_order():
    verdict = validate_course_run(_course_run(registrationDates={"opening": "20250201", "closing": "20250101"}))
    assert not verdict.valid
    assert [d.field for d in verdict.errors] == ["registrationDates"]
    assert verdict.errors[0].message == "Registration opening date must be before closing date"


def test_course_dates_out_of_order():
    verdict = validate_course_run(_course_run(courseDates={"start": "20250301", "end": "20250201"}))
    assert [d.field for d in verdict.errors] == ["courseDates"]


def test_equal_dates_are_accepted():
    verdict = validate_course_run(_course_run(courseDates={"start": "20250201", "end": "20250201"}))
    assert verdict.valid


def test_unparseable_date_reported_and_not_ordered():
    verdict = validate_course_run(_course_run(registrationDates={"opening": "soon", "closing": "20250101"}))
    assert [d.field for d in verdict.errors] == ["registrationDates.opening"]
    assert "YYYYMMDD" in verdict.errors[0].message


def test_missing_course_run_fields_each_reported():
    verdict = validate_course_run({})
    messages = [d.message for d in verdict.errors]
    assert messages == [
        "Course Reference Number is required",
        "Registration opening date is required",
        "Registration closing date is required",
        "Course start date is required",
        "Course end date is required",
        "Mode of Training is required",
        "Course Admin Email is required",
        "Schedule Info Type is required",
        "Course Vacancy code is required",
    ]


def test_three_independent_failures_all_reported():
    record = _assessment(score=1000)
    record["trainee"] = {"idType": {"code": "SB"}, "fullName": "Tan Ah Kow"}
    record["result"] = ""
    verdict = validate_assessment(record)
    assert not verdict.valid
    assert len(verdict.errors) == 3
    assert {d.field for d in verdict.errors} == {"trainee.id", "result", "score"}


def test_enrolment_failures_not_short_circuited():
    record = _enrolment()
    del record["trainee"]["id"]
    record["trainee"]["emailAddress"] = "bad@"
    record["employer"] = {"uen": "x"}
    verdict = validate_enrolment(record)
    assert [d.field for d in verdict.errors] == ["trainee.id", "trainee.emailAddress", "employer.uen"]


def test_valid_enrolment():
    assert validate_enrolment(_enrolment()).valid


def test_employer_email_checked_when_present():
    verdict = validate_enrolment(_enrolment(employer={"emailAddress": "hr at example.com"}))
    assert [d.field for d in verdict.errors] == ["employer.emailAddress"]


@pytest.mark.parametrize("score, ok", [(0, True), (999, True), (50.5, True), (-1, False), (1000, False), ("80", False), (True, False)])
def test_assessment_score_range(score, ok):
    verdict = validate_assessment(_assessment(score=score))
    assert verdict.valid is ok
    if not ok:
        assert verdict.errors == (Diagnostic(field="score", message="Score must be between 0 and 999"),)


def test_assessment_score_is_optional():
    record = _assessment()
    del record["score"]
    assert validate_assessment(record).valid


def test_valid_course_session():
    record = {
        "startDate": "20250301",
        "endDate": "20250301",
        "startTime": "09:00",
        "endTime": "17:00",
        "modeOfTraining": "1",
    }
    assert validate_course_session(record).valid


def test_course_session_time_order_on_same_day():
    record = {
        "startDate": "20250301",
        "endDate": "20250301",
        "startTime": "17:00",
        "endTime": "09:00",
        "modeOfTraining": "1",
    }
    verdict = validate_course_session(record)
    assert [d.message for d in verdict.errors] == ["Start time must be before end time"]


def test_course_session_time_order_ignored_across_days():
    record = {
        "startDate": "20250301",
        "endDate": "20250302",
        "startTime": "17:00",
        "endTime": "09:00",
        "modeOfTraining": "1",
    }
    assert validate_course_session(record).valid


def test_course_session_bad_time_format():
    record = {
        "startDate": "20250301",
        "endDate": "20250301",
        "startTime": "noon",
        "endTime": "25:00",
        "modeOfTraining": "1",
    }
    verdict = validate_course_session(record)
    assert [d.field for d in verdict.errors] == ["startTime", "endTime"]


@pytest.mark.parametrize(
    "value, ok",
    [("admin@example.com", True), ("a@b.c", True), ("not-an-email", False), ("a b@c.d", False), ("a@b", False), (None, False)],
)
def test_is_valid_email(value, ok):
    assert is_valid_email(value) is ok


@pytest.mark.parametrize("value, ok", [("T16GB0001A", True), ("201912345K", True), ("12345678", False), ("T16-GB001", False)])
def test_validate_uen(value, ok):
    assert validate_uen(value) is ok


def test_validate_record_dispatches_by_kind():
    assert validate_record(RecordKind.COURSE_RUNS, _course_run()).valid
    verdict = validate_record(RecordKind.ASSESSMENTS, {}, row=7)
    assert not verdict.valid
    assert all(d.row == 7 for d in verdict.errors)


def test_validate_records_uses_display_rows():
    records = [_course_run(), _course_run(courseAdminEmail="nope")]
    diags = validate_records(RecordKind.COURSE_RUNS, records)
    assert diags == [Diagnostic(row=3, field="courseAdminEmail", message="Invalid email format")]
