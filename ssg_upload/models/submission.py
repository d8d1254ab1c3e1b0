from __future__ import annotations

from dataclasses import dataclass, field

"""Submission outcome models for the external API collaborator."""

__all__ = [
    "SubmissionOutcome",
    "SubmissionReport",
]


@dataclass(frozen=True)
class SubmissionOutcome:
    """Result of submitting one record.

    ``index`` is the record's position in the submitted batch (0-based); the
    client leaves it at -1 and the orchestrator fills it in.
    """
    success: bool
    reason: str | None = None  # Operator-facing failure message
    status_code: int | None = None  # HTTP status when a response was received
    index: int = -1

    @classmethod
    def ok(cls, status_code: int | None = None) -> SubmissionOutcome:
        return cls(success=True, status_code=status_code)

    @classmethod
    def failed(cls, reason: str, status_code: int | None = None) -> SubmissionOutcome:
        return cls(success=False, reason=reason, status_code=status_code)


@dataclass(frozen=True)
class SubmissionReport:
    """Per-record outcomes of one bulk submission, in record order.

    The aggregate counts are informational; failed records are not retried.
    """
    outcomes: list[SubmissionOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.success)

    @property
    def total(self) -> int:
        return len(self.outcomes)
