from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Upload session state and run summary models.

State transitions of an UploadSession:
IDLE -> DECODING -> SHEET_CHOSEN (-> SHEET_CHOSEN on sheet change)
-> SUBMITTING -> IDLE; decode failure and cancel both return to IDLE.
"""


class UploadState(Enum):
    IDLE = "idle"
    DECODING = "decoding"
    SHEET_CHOSEN = "sheet_chosen"
    SUBMITTING = "submitting"


@dataclass(frozen=True)
class UploadSummary:
    """Aggregated metrics for the SUMMARY output line."""
    sheet: str  # Chosen sheet ("-" when no sheet was processed)
    kind: str  # RecordKind CLI name
    records: int  # Mapped records in the chosen sheet
    diagnostics: int  # Mapper + validator diagnostics
    submitted: int  # Successful submissions
    failed: int  # Failed submissions
    elapsed_seconds: float
