from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from .diagnostic import Diagnostic

"""ErrorRecord model for the JSON Lines error log.

One record per diagnostic, decode failure or failed submission. ``row`` is -1
when the problem is not tied to a sheet row (decode errors, records built
programmatically). The key set is fixed by ssg_upload/logging/error_log_schema.json.
"""

__all__ = [
    "ERROR_TYPES",
    "ErrorRecord",
]

ERROR_TYPES = (
    "DECODE_ERROR",
    "MISSING_REQUIRED",
    "VALIDATION",
    "SUBMISSION_FAILED",
)


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: uploaded file name
        sheet: sheet name ("<FILE_LEVEL>" when not sheet specific)
        row: display row number, -1 when unknown
        field: source column or record path ("" when not field specific)
        error_type: one of ERROR_TYPES
        message: operator-facing message
    """
    timestamp: str
    file: str
    sheet: str
    row: int
    field: str
    error_type: str
    message: str

    @staticmethod
    def create(
        file: str, sheet: str, row: int, error_type: str, message: str, field: str = ""
    ) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            field=field,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_diagnostic(file: str, sheet: str, diagnostic: Diagnostic, error_type: str) -> ErrorRecord:
        return ErrorRecord.create(
            file=file,
            sheet=sheet,
            row=diagnostic.row if diagnostic.row is not None else -1,
            error_type=error_type,
            message=diagnostic.message,
            field=diagnostic.field,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
