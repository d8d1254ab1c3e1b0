from __future__ import annotations

import asyncio
import logging
from dataclasses import replace

from ..api.client import Submitter
from ..excel.reader import DecodeError, decode_workbook
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.config_models import DEFAULT_MAX_CONCURRENCY
from ..models.diagnostic import Diagnostic, ValidationVerdict
from ..models.record_kind import RecordKind
from ..models.row_data import MappedRecord, SheetSet
from ..models.submission import SubmissionOutcome, SubmissionReport
from ..models.upload_result import UploadState
from .mapper import map_sheet
from .mappings import mapping_set_for
from .progress import ProgressTracker
from .validators import validate_record, validate_records

logger = logging.getLogger(__name__)

"""Upload orchestration.

An UploadSession drives one uploaded workbook through
decode -> sheet choice -> map -> validate -> submit. Each session owns its
SheetSet, records and diagnostics exclusively; nothing is shared between
sessions.

Submission policy:
- confirm() is refused while the chosen sheet has any diagnostic
- every record is submitted independently; a failure never stops or rolls
  back its siblings and nothing is retried
- submissions run concurrently, at most ``max_concurrency`` at a time
- if the session is cancelled or reloaded while submissions are in flight,
  they still complete but their outcomes are not recorded on the session
"""


class UploadStateError(Exception):
    """Raised for an operation that is not allowed in the session's current state."""


class UploadSession:
    def __init__(
        self,
        kind: RecordKind,
        submitter: Submitter | None = None,
        *,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        error_log: ErrorLogBuffer | None = None,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.kind = kind
        self.mapping_set = mapping_set_for(kind)
        self.submitter = submitter
        self.max_concurrency = max_concurrency
        self.error_log = error_log
        self.state = UploadState.IDLE
        self.file_name: str | None = None
        self.selected_sheet: str | None = None
        self.last_report: SubmissionReport | None = None
        self._sheets: SheetSet = {}
        self._records: list[MappedRecord] = []
        self._mapping_diagnostics: list[Diagnostic] = []
        self._validation_diagnostics: list[Diagnostic] = []
        # bumped on cancel/reload so in-flight submissions can tell they are stale
        self._generation = 0

    # ---- read-only views -------------------------------------------------

    @property
    def sheet_names(self) -> list[str]:
        return list(self._sheets)

    @property
    def records(self) -> list[MappedRecord]:
        return list(self._records)

    @property
    def mapping_diagnostics(self) -> list[Diagnostic]:
        return list(self._mapping_diagnostics)

    @property
    def validation_diagnostics(self) -> list[Diagnostic]:
        return list(self._validation_diagnostics)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return self._mapping_diagnostics + self._validation_diagnostics

    @property
    def can_confirm(self) -> bool:
        return (
            self.state is UploadState.SHEET_CHOSEN
            and self.kind.submittable
            and self.submitter is not None
            and bool(self._records)
            and not self.diagnostics
        )

    def accepted_sheets(self) -> list[str]:
        """Sheets whose name looks meant for this record kind."""
        return [name for name in self._sheets if self.kind.accepts_sheet(name)]

    def preferred_sheet(self) -> str | None:
        accepted = self.accepted_sheets()
        if accepted:
            return accepted[0]
        return self.sheet_names[0] if self._sheets else None

    # ---- transitions -----------------------------------------------------

    def load(self, data: bytes, file_name: str = "<upload>") -> list[str]:
        """Decode an uploaded workbook and auto-select its first sheet.

        Any previous session data is discarded first. On DecodeError the
        session returns to IDLE and the error propagates.
        """
        self._reset()
        self.file_name = file_name
        self.state = UploadState.DECODING
        try:
            sheets = decode_workbook(data)
        except DecodeError as e:
            logger.debug(f"decode failed file={file_name}: {e}")
            if self.error_log is not None:
                self.error_log.append(
                    ErrorRecord.create(file_name, "<FILE_LEVEL>", -1, "DECODE_ERROR", str(e))
                )
            self._reset()
            raise
        self._sheets = sheets
        self.state = UploadState.SHEET_CHOSEN
        logger.info(f"decoded {file_name}: {len(sheets)} sheet(s)")
        self._evaluate(self.sheet_names[0])
        return self.sheet_names

    def choose_sheet(self, sheet_name: str) -> list[Diagnostic]:
        """Select another sheet; it is re-mapped and re-validated."""
        if self.state is not UploadState.SHEET_CHOSEN:
            raise UploadStateError(f"cannot choose a sheet while {self.state.value}")
        if sheet_name not in self._sheets:
            raise ValueError(f"unknown sheet '{sheet_name}' (available: {', '.join(self._sheets)})")
        self._evaluate(sheet_name)
        return self.diagnostics

    def cancel(self) -> None:
        """Return to IDLE from any state, dropping all session data."""
        if self.state is not UploadState.IDLE:
            logger.debug(f"upload cancelled in state {self.state.value}")
        self._reset()

    async def confirm(self) -> SubmissionReport:
        """Submit every record of the chosen sheet."""
        if not self.can_confirm:
            raise UploadStateError(self._confirm_refusal())
        generation = self._generation
        records = list(self._records)
        self.state = UploadState.SUBMITTING
        logger.info(f"submitting {len(records)} {self.kind.label} record(s) from sheet '{self.selected_sheet}'")

        outcomes = await dispatch_records(self.kind, records, self.submitter, self.max_concurrency)
        report = SubmissionReport(outcomes=outcomes)

        if generation != self._generation:
            logger.debug(f"session moved on; ignoring {report.total} submission outcome(s)")
            return report

        for outcome in outcomes:
            if outcome.success:
                logger.info(f"{self.kind.label} record {outcome.index + 1} submitted")
            else:
                logger.error(f"{self.kind.label} record {outcome.index + 1} failed: {outcome.reason}")
                if self.error_log is not None:
                    self.error_log.append(
                        ErrorRecord.create(
                            self.file_name or "<upload>",
                            self.selected_sheet or "<FILE_LEVEL>",
                            outcome.index + 2,
                            "SUBMISSION_FAILED",
                            outcome.reason or "submission failed",
                        )
                    )
        self._reset()
        self.last_report = report
        return report

    def log_diagnostics(self) -> None:
        """Buffer the current sheet's diagnostics into the error log."""
        if self.error_log is None:
            return
        file_name = self.file_name or "<upload>"
        sheet = self.selected_sheet or "<FILE_LEVEL>"
        self.error_log.extend(
            [ErrorRecord.from_diagnostic(file_name, sheet, d, "MISSING_REQUIRED") for d in self._mapping_diagnostics]
            + [ErrorRecord.from_diagnostic(file_name, sheet, d, "VALIDATION") for d in self._validation_diagnostics]
        )

    # ---- internals -------------------------------------------------------

    def _evaluate(self, sheet_name: str) -> None:
        rows = self._sheets[sheet_name]
        mapped = map_sheet(rows, self.mapping_set)
        self.selected_sheet = sheet_name
        self._records = mapped.records
        self._mapping_diagnostics = list(mapped.diagnostics)
        self._validation_diagnostics = validate_records(self.kind, mapped.records)
        logger.debug(
            f"sheet '{sheet_name}': records={len(self._records)} "
            f"mapping_diagnostics={len(self._mapping_diagnostics)} "
            f"validation_diagnostics={len(self._validation_diagnostics)}"
        )

    def _confirm_refusal(self) -> str:
        if self.state is not UploadState.SHEET_CHOSEN:
            return f"cannot confirm while {self.state.value}"
        if not self.kind.submittable:
            return f"{self.kind.label} records cannot be submitted"
        if self.submitter is None:
            return "no submission client configured"
        if not self._records:
            return f"sheet '{self.selected_sheet}' has no records"
        return f"sheet '{self.selected_sheet}' has {len(self.diagnostics)} diagnostic(s)"

    def _reset(self) -> None:
        self._generation += 1
        self.state = UploadState.IDLE
        self.file_name = None
        self.selected_sheet = None
        self._sheets = {}
        self._records = []
        self._mapping_diagnostics = []
        self._validation_diagnostics = []


async def dispatch_records(
    kind: RecordKind,
    records: list[MappedRecord],
    submitter: Submitter,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> list[SubmissionOutcome]:
    """Submit records concurrently (bounded); one outcome per record, in record order."""
    semaphore = asyncio.Semaphore(max_concurrency)

    with ProgressTracker(len(records), description=f"Submitting {kind.label}") as progress:

        async def _submit_one(index: int, record: MappedRecord) -> SubmissionOutcome:
            async with semaphore:
                outcome = await submitter.submit(kind, record)
            progress.advance(outcome.success)
            return replace(outcome, index=index)

        tasks = [_submit_one(i, r) for i, r in enumerate(records)]
        results = await asyncio.gather(*tasks, return_exceptions=True)

    outcomes: list[SubmissionOutcome] = []
    for index, result in enumerate(results):
        if isinstance(result, BaseException):
            # submitter broke its contract; still reported per record
            outcomes.append(SubmissionOutcome(success=False, reason=str(result) or type(result).__name__, index=index))
        else:
            outcomes.append(result)
    return outcomes


async def submit_record(
    kind: RecordKind, record: MappedRecord, submitter: Submitter | None
) -> tuple[ValidationVerdict, SubmissionOutcome | None]:
    """Validate one programmatically built record and submit it when valid.

    Diagnostics carry no row. Returns the verdict and the outcome (None when
    the record was invalid or no submitter was given).
    """
    verdict = validate_record(kind, record)
    if not verdict.valid or submitter is None:
        return verdict, None
    if not kind.submittable:
        raise UploadStateError(f"{kind.label} records cannot be submitted")
    outcome = await submitter.submit(kind, record)
    return verdict, replace(outcome, index=0)
