"""Application configuration helpers."""

from __future__ import annotations

from .env import env_float, env_int, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .ingestion import IngestionConfig, get_ingestion_config
from .pipeline import PipelineConfig, get_pipeline_config

__all__ = [
    "ConfigurationError",
    "IngestionConfig",
    "MissingConfigurationError",
    "PipelineConfig",
    "env_float",
    "env_int",
    "get_ingestion_config",
    "get_pipeline_config",
    "optional_env_var",
    "require_env_vars",
]
