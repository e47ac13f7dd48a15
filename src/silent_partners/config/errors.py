"""Errors raised while reading Silent Partners settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A setting is present but unusable (bad number, unknown matcher name)."""


class MissingConfigurationError(ConfigurationError):
    """A required ``SILENT_PARTNERS_*`` variable is unset or blank."""
