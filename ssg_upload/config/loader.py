from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_TIMEOUT_SECONDS,
    ApiConfig,
    UploadConfig,
)

"""Config loader.

Responsibilities:
- Load YAML (config/upload.yml by default)
- Validate against upload_schema.json (shipped with the package)
- Apply defaults
- Apply environment overrides; the CLI loads .env into the environment
  beforehand, so .env values win over the YAML file
"""

SCHEMA_PATH = Path(__file__).parent / "upload_schema.json"
DEFAULT_CONFIG_PATH = Path("config/upload.yml")

ENV_BASE_URL = "SSG_API_BASE_URL"
ENV_CLIENT_ID = "SSG_CLIENT_ID"
ENV_CLIENT_SECRET = "SSG_CLIENT_SECRET"
ENV_UEN = "SSG_UEN"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path = DEFAULT_CONFIG_PATH, environ: Mapping[str, str] | None = None) -> UploadConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    env = os.environ if environ is None else environ
    api_raw = data.get("api", {})
    api = ApiConfig(
        base_url=env.get(ENV_BASE_URL) or api_raw.get("base_url", DEFAULT_BASE_URL),
        client_id=env.get(ENV_CLIENT_ID) or api_raw.get("client_id"),
        client_secret=env.get(ENV_CLIENT_SECRET) or api_raw.get("client_secret"),
        timeout_seconds=float(api_raw.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
    )
    uen = env.get(ENV_UEN) or data.get("training_provider", {}).get("uen")
    return UploadConfig(
        api=api,
        training_provider_uen=uen,
        max_concurrency=data.get("submission", {}).get("max_concurrency", DEFAULT_MAX_CONCURRENCY),
        error_log_dir=Path(data.get("error_log_dir", "./logs")),
    )
