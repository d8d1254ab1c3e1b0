from __future__ import annotations

from ..models.column_mapping import ColumnMapping
from ..models.record_kind import RecordKind
from .mapper import MappingSet
from .transforms import to_compact_date, to_hhmm, to_number

"""Column mapping tables per record kind.

Column header strings are exact match keys for the upload templates the
operators fill in; do not reword them. Each table is checked against the
record shape of its kind when this module is imported.
"""

__all__ = [
    "COURSE_RUN_MAPPINGS",
    "COURSE_SESSION_MAPPINGS",
    "ENROLMENT_MAPPINGS",
    "MAPPING_SETS",
    "RECORD_FIELDS",
    "mapping_set_for",
]

_VENUE_FIELDS = (
    "venue.block",
    "venue.street",
    "venue.floor",
    "venue.unit",
    "venue.building",
    "venue.postalCode",
    "venue.room",
    "venue.wheelChairAccess",
    "venue.primaryVenue",
)

# Leaf paths of each API record shape.
RECORD_FIELDS: dict[RecordKind, frozenset[str]] = {
    RecordKind.COURSE_SESSIONS: frozenset({
        "sessionId",
        "startDate",
        "endDate",
        "startTime",
        "endTime",
        "modeOfTraining",
        *_VENUE_FIELDS,
    }),
    RecordKind.COURSE_RUNS: frozenset({
        "courseReferenceNumber",
        "sequenceNumber",
        "registrationDates.opening",
        "registrationDates.closing",
        "courseDates.start",
        "courseDates.end",
        "scheduleInfoType.code",
        "scheduleInfoType.description",
        "scheduleInfo",
        "intakeSize",
        "threshold",
        "registeredUserCount",
        "modeOfTraining",
        "courseAdminEmail",
        "courseVacancy.code",
        "courseVacancy.description",
        *_VENUE_FIELDS,
    }),
    RecordKind.ENROLMENTS: frozenset({
        "course.run.id",
        "course.referenceNumber",
        "trainee.id",
        "trainee.idType.code",
        "trainee.idType.description",
        "trainee.fullName",
        "trainee.dateOfBirth",
        "trainee.emailAddress",
        "trainee.enrolmentDate",
        "trainee.sponsorshipType",
        "trainee.contactNumber.areaCode",
        "trainee.contactNumber.countryCode",
        "trainee.contactNumber.phoneNumber",
        "trainee.fees.discountAmount",
        "trainee.fees.collectionStatus",
        "employer.uen",
        "employer.fullName",
        "employer.emailAddress",
        "employer.areaCode",
        "employer.countryCode",
        "employer.phoneNumber",
        "trainingPartner.code",
        "trainingPartner.uen",
    }),
}

COURSE_SESSION_MAPPINGS: tuple[ColumnMapping, ...] = (
    ColumnMapping("Start Date", "startDate", required=True, transform=to_compact_date),
    ColumnMapping("End Date", "endDate", required=True, transform=to_compact_date),
    ColumnMapping("Start Time", "startTime", required=True, transform=to_hhmm),
    ColumnMapping("End Time", "endTime", required=True, transform=to_hhmm),
    ColumnMapping("Mode of Training", "modeOfTraining", required=True),
    ColumnMapping("Venue Block", "venue.block"),
    ColumnMapping("Venue Street", "venue.street"),
    ColumnMapping("Venue Floor", "venue.floor"),
    ColumnMapping("Venue Unit", "venue.unit"),
    ColumnMapping("Venue Building", "venue.building"),
    ColumnMapping("Venue Postal Code", "venue.postalCode"),
    ColumnMapping("Venue Room", "venue.room"),
)

COURSE_RUN_MAPPINGS: tuple[ColumnMapping, ...] = (
    ColumnMapping("Course Reference Number", "courseReferenceNumber", required=True),
    ColumnMapping("Registration Opening Date", "registrationDates.opening", required=True, transform=to_compact_date),
    ColumnMapping("Registration Closing Date", "registrationDates.closing", required=True, transform=to_compact_date),
    ColumnMapping("Course Start Date", "courseDates.start", required=True, transform=to_compact_date),
    ColumnMapping("Course End Date", "courseDates.end", required=True, transform=to_compact_date),
    ColumnMapping("Schedule Info Type Code", "scheduleInfoType.code", required=True),
    ColumnMapping("Schedule Info Type Description", "scheduleInfoType.description", required=True),
    ColumnMapping("Schedule Info", "scheduleInfo"),
    ColumnMapping("Mode of Training", "modeOfTraining", required=True),
    ColumnMapping("Course Admin Email", "courseAdminEmail", required=True),
    ColumnMapping("Intake Size", "intakeSize", transform=to_number),
    ColumnMapping("Threshold", "threshold", transform=to_number),
    ColumnMapping("Vacancy Code", "courseVacancy.code", required=True),
    ColumnMapping("Vacancy Description", "courseVacancy.description", required=True),
    ColumnMapping("Venue Block", "venue.block"),
    ColumnMapping("Venue Street", "venue.street"),
    ColumnMapping("Venue Floor", "venue.floor"),
    ColumnMapping("Venue Unit", "venue.unit"),
    ColumnMapping("Venue Building", "venue.building"),
    ColumnMapping("Venue Postal Code", "venue.postalCode"),
    ColumnMapping("Venue Room", "venue.room"),
)

ENROLMENT_MAPPINGS: tuple[ColumnMapping, ...] = (
    ColumnMapping("Course Run ID", "course.run.id", required=True),
    ColumnMapping("Course Reference Number", "course.referenceNumber", required=True),
    ColumnMapping("Trainee ID", "trainee.id", required=True),
    ColumnMapping("Trainee ID Type", "trainee.idType.code", required=True),
    ColumnMapping("Trainee Full Name", "trainee.fullName", required=True),
    ColumnMapping("Trainee Date of Birth", "trainee.dateOfBirth", required=True),
    ColumnMapping("Trainee Email", "trainee.emailAddress"),
    ColumnMapping("Enrolment Date", "trainee.enrolmentDate", required=True),
    ColumnMapping("Sponsorship Type", "trainee.sponsorshipType", required=True),
    ColumnMapping("Area Code", "trainee.contactNumber.areaCode", transform=to_number),
    ColumnMapping("Country Code", "trainee.contactNumber.countryCode", transform=to_number),
    ColumnMapping("Phone Number", "trainee.contactNumber.phoneNumber"),
    ColumnMapping("Discount Amount", "trainee.fees.discountAmount", transform=to_number),
    ColumnMapping("Collection Status", "trainee.fees.collectionStatus"),
    ColumnMapping("Employer UEN", "employer.uen"),
    ColumnMapping("Employer Full Name", "employer.fullName"),
    ColumnMapping("Employer Email", "employer.emailAddress"),
    ColumnMapping("Training Partner Code", "trainingPartner.code", required=True),
    ColumnMapping("Training Partner UEN", "trainingPartner.uen"),
)

MAPPING_SETS: dict[RecordKind, MappingSet] = {
    RecordKind.COURSE_SESSIONS: MappingSet(
        RecordKind.COURSE_SESSIONS, COURSE_SESSION_MAPPINGS, RECORD_FIELDS[RecordKind.COURSE_SESSIONS]
    ),
    RecordKind.COURSE_RUNS: MappingSet(
        RecordKind.COURSE_RUNS, COURSE_RUN_MAPPINGS, RECORD_FIELDS[RecordKind.COURSE_RUNS]
    ),
    RecordKind.ENROLMENTS: MappingSet(
        RecordKind.ENROLMENTS, ENROLMENT_MAPPINGS, RECORD_FIELDS[RecordKind.ENROLMENTS]
    ),
}


def mapping_set_for(kind: RecordKind) -> MappingSet:
    try:
        return MAPPING_SETS[kind]
    except KeyError:
        raise ValueError(f"no spreadsheet mapping for record kind '{kind.value}'") from None
