from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

"""Config dataclasses for the SSG bulk upload tool.

These are produced by ``ssg_upload.config.loader.load_config`` and passed
explicitly to the CLI, the orchestrator and the API client. There is no
module-level client or configuration singleton.
"""

DEFAULT_BASE_URL = "https://uat-api.ssg-wsg.sg"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_CONCURRENCY = 5


@dataclass(frozen=True)
class ApiConfig:
    """Remote API connection settings.

    Environment variables (SSG_API_BASE_URL / SSG_CLIENT_ID / SSG_CLIENT_SECRET)
    take precedence over these values; see the loader.
    """
    base_url: str = DEFAULT_BASE_URL
    client_id: str | None = None
    client_secret: str | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class UploadConfig:
    """Root configuration object for an upload run."""
    api: ApiConfig
    training_provider_uen: str | None  # Required to publish course runs
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY  # Concurrent submissions cap
    error_log_dir: Path = Path("./logs")
