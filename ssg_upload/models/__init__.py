"""Domain models for the spreadsheet -> SSG API upload pipeline.

This package contains the data classes passed between the decoder, mapper,
validators, orchestrator and submission client.
"""

from .column_mapping import ColumnMapping
from .config_models import ApiConfig, UploadConfig
from .diagnostic import Diagnostic, ValidationVerdict
from .record_kind import RecordKind
from .row_data import MappedRecord, RawRow, SheetMapping, SheetSet
from .submission import SubmissionOutcome, SubmissionReport
from .upload_result import UploadState, UploadSummary

__all__ = [
    # Configuration models
    "ApiConfig",
    "UploadConfig",
    # Pipeline models
    "ColumnMapping",
    "Diagnostic",
    "MappedRecord",
    "RawRow",
    "RecordKind",
    "SheetMapping",
    "SheetSet",
    "ValidationVerdict",
    # Submission / result models
    "SubmissionOutcome",
    "SubmissionReport",
    "UploadState",
    "UploadSummary",
]
