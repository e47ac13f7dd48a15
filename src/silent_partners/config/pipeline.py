"""Extraction pipeline connection settings."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, optional_env_var, require_env_vars

PIPELINE_URL_ENV = "SILENT_PARTNERS_PIPELINE_URL"
PIPELINE_API_KEY_ENV = "SILENT_PARTNERS_PIPELINE_API_KEY"
PIPELINE_TIMEOUT_ENV = "SILENT_PARTNERS_PIPELINE_TIMEOUT"
PIPELINE_TIMEOUT_SECONDS = 120.0


@dataclass(frozen=True)
class PipelineConfig:
    """Holds the pipeline base URL (e.g. ``https://host/api/v5``) and credentials."""

    base_url: str
    api_key: str | None = None
    timeout_seconds: float = PIPELINE_TIMEOUT_SECONDS


def get_pipeline_config() -> PipelineConfig:
    values = require_env_vars((PIPELINE_URL_ENV,))
    return PipelineConfig(
        base_url=values[PIPELINE_URL_ENV],
        api_key=optional_env_var(PIPELINE_API_KEY_ENV),
        timeout_seconds=env_float(PIPELINE_TIMEOUT_ENV, PIPELINE_TIMEOUT_SECONDS, minimum=0.0),
    )
