from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

import requests

from ..models.config_models import ApiConfig
from ..models.record_kind import RecordKind
from ..models.row_data import MappedRecord
from ..models.submission import SubmissionOutcome

"""Submission collaborator for the SSG training API.

The pipeline only needs `submit(kind, record) -> SubmissionOutcome`. The
requests-based client below wraps each record in its API envelope, posts it
and maps HTTP failures to operator messages. Blocking calls run in a worker
thread so that the orchestrator can keep several submissions in flight.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ENDPOINTS",
    "SsgApiClient",
    "SubmissionError",
    "Submitter",
    "build_payload",
    "error_message_for_status",
]

ENDPOINTS: dict[RecordKind, str] = {
    RecordKind.COURSE_RUNS: "/courses/courseRuns/publish",
    RecordKind.ENROLMENTS: "/tpg/enrolments",
    RecordKind.ASSESSMENTS: "/tpg/assessments",
}


class SubmissionError(Exception):
    """Raised inside the client when a record cannot be delivered."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class Submitter(Protocol):
    async def submit(self, kind: RecordKind, record: MappedRecord) -> SubmissionOutcome: ...


def build_payload(kind: RecordKind, record: MappedRecord, uen: str | None = None) -> dict[str, Any]:
    """Wrap a mapped record in the request envelope of its endpoint."""
    if kind is RecordKind.COURSE_RUNS:
        if not uen:
            raise SubmissionError("training provider UEN is not configured")
        run = {k: v for k, v in record.items() if k != "courseReferenceNumber"}
        return {
            "course": {
                "courseReferenceNumber": record.get("courseReferenceNumber"),
                "trainingProvider": {"uen": uen},
                "runs": [run],
            }
        }
    if kind is RecordKind.ENROLMENTS:
        return {"enrolment": record}
    if kind is RecordKind.ASSESSMENTS:
        return {"assessment": record}
    raise SubmissionError(f"record kind '{kind.value}' cannot be submitted")


def error_message_for_status(status: int, data: Any = None) -> str:
    if status == 401:
        return "Authentication failed. Please check your API credentials."
    if status == 403:
        return "Access denied. You do not have permission for this operation."
    if status == 404:
        return "Resource not found."
    if status == 422:
        detail = data.get("message") if isinstance(data, dict) else None
        return f"Validation error: {detail or 'Invalid request data'}"
    if status == 429:
        return "Rate limit exceeded. Please try again later."
    if status >= 500:
        return "SSG API server error. Please try again later."
    return "An unexpected error occurred"


class SsgApiClient:
    """Posts records to the SSG API with requests.

    Constructed once per run from ApiConfig and passed to whatever submits;
    tests substitute any object with a matching ``submit`` coroutine.
    """

    def __init__(
        self,
        config: ApiConfig,
        training_provider_uen: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config
        self.training_provider_uen = training_provider_uen
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})
        if config.client_id:
            self.session.headers["clientId"] = config.client_id
        if config.client_secret:
            self.session.headers["clientSecret"] = config.client_secret

    def url_for(self, kind: RecordKind) -> str:
        try:
            endpoint = ENDPOINTS[kind]
        except KeyError:
            raise SubmissionError(f"record kind '{kind.value}' cannot be submitted") from None
        return self.config.base_url.rstrip("/") + endpoint

    def post_record(self, kind: RecordKind, record: MappedRecord) -> int:
        """Blocking POST of one record; returns the HTTP status on success."""
        url = self.url_for(kind)
        payload = build_payload(kind, record, self.training_provider_uen)
        logger.debug(f"POST {url}")
        try:
            response = self.session.post(url, json=payload, timeout=self.config.timeout_seconds)
        except requests.Timeout as e:
            raise SubmissionError("Request timed out. Please try again.") from e
        except requests.ConnectionError as e:
            raise SubmissionError("Network error. Please check your connection.") from e
        except requests.RequestException as e:
            raise SubmissionError(f"Request failed: {e}") from e

        if not response.ok:
            try:
                data = response.json()
            except ValueError:
                data = None
            logger.debug(f"response {response.status_code}: {data if data is not None else response.text[:200]}")
            raise SubmissionError(error_message_for_status(response.status_code, data), response.status_code)
        return response.status_code

    async def submit(self, kind: RecordKind, record: MappedRecord) -> SubmissionOutcome:
        try:
            status = await asyncio.to_thread(self.post_record, kind, record)
        except SubmissionError as e:
            return SubmissionOutcome.failed(str(e), e.status_code)
        return SubmissionOutcome.ok(status)

    def close(self) -> None:
        self.session.close()
