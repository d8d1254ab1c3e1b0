from __future__ import annotations

from ..models.upload_result import UploadSummary

"""SUMMARY line rendering.

The console logger adds the "SUMMARY" label itself, so the CLI logs
render_summary_body(); render_summary_line() is the full contract line.
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_body(summary: UploadSummary) -> str:
    """Key=value fields of the SUMMARY line, without the label."""
    sheet = summary.sheet.replace(" ", "_") if summary.sheet else "-"
    return (
        f"sheet={sheet} "
        f"kind={summary.kind} "
        f"records={summary.records} "
        f"diagnostics={summary.diagnostics} "
        f"submitted={summary.submitted} "
        f"failed={summary.failed} "
        f"elapsed_sec={_format_seconds(summary.elapsed_seconds)}"
    )


def render_summary_line(summary: UploadSummary) -> str:
    """Render the SUMMARY line for one upload run.

    >>> s = UploadSummary(sheet="Runs", kind="course-runs", records=3, diagnostics=0,
    ...                   submitted=2, failed=1, elapsed_seconds=1.5)
    >>> render_summary_line(s)
    'SUMMARY sheet=Runs kind=course-runs records=3 diagnostics=0 submitted=2 failed=1 elapsed_sec=1.5'
    """
    return f"SUMMARY {render_summary_body(summary)}"
