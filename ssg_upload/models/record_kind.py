from __future__ import annotations

from enum import Enum

"""RecordKind enum: the API entity types handled by the upload pipeline."""

__all__ = [
    "RecordKind",
]


class RecordKind(Enum):
    """Record kinds with their CLI names.

    - COURSE_SESSIONS: preview only, the API has no bulk session endpoint
    - COURSE_RUNS: published one run per request
    - ENROLMENTS: created one enrolment per request
    - ASSESSMENTS: single programmatic records only (no sheet mapping)
    """
    COURSE_SESSIONS = "course-sessions"
    COURSE_RUNS = "course-runs"
    ENROLMENTS = "enrolments"
    ASSESSMENTS = "assessments"

    @classmethod
    def from_cli(cls, name: str) -> RecordKind:
        try:
            return cls(name.strip().lower())
        except ValueError as e:
            choices = ", ".join(k.value for k in cls)
            raise ValueError(f"unknown record kind '{name}' (expected one of: {choices})") from e

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").title()

    @property
    def sheet_keywords(self) -> tuple[str, ...]:
        """Case-insensitive fragments identifying sheets meant for this kind."""
        return _SHEET_KEYWORDS[self]

    @property
    def submittable(self) -> bool:
        return self is not RecordKind.COURSE_SESSIONS

    def accepts_sheet(self, sheet_name: str) -> bool:
        lowered = sheet_name.lower()
        return any(k in lowered for k in self.sheet_keywords)


_SHEET_KEYWORDS: dict[RecordKind, tuple[str, ...]] = {
    RecordKind.COURSE_SESSIONS: ("session", "sessions"),
    RecordKind.COURSE_RUNS: ("course run", "runs"),
    RecordKind.ENROLMENTS: ("enrolment", "enrolments"),
    RecordKind.ASSESSMENTS: ("assessment", "assessments"),
}
