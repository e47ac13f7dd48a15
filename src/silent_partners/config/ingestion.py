"""Ingestion defaults: matcher strategy and pending-relationship buffer."""

from __future__ import annotations

from dataclasses import dataclass

from silent_partners.domain.ingestion import DEFAULT_PENDING_LIMIT
from silent_partners.domain.resolution import EntityMatcher, build_matcher

from .env import env_int, optional_env_var
from .errors import ConfigurationError

PENDING_LIMIT_ENV = "SILENT_PARTNERS_PENDING_LIMIT"
MATCHER_ENV = "SILENT_PARTNERS_MATCHER"
DEFAULT_MATCHER = "heuristic"


@dataclass(frozen=True, slots=True)
class IngestionConfig:
    pending_limit: int = DEFAULT_PENDING_LIMIT
    matcher: str = DEFAULT_MATCHER

    def build_matcher(self) -> EntityMatcher:
        try:
            return build_matcher(self.matcher)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc


def get_ingestion_config() -> IngestionConfig:
    config = IngestionConfig(
        pending_limit=env_int(PENDING_LIMIT_ENV, DEFAULT_PENDING_LIMIT, minimum=0),
        matcher=optional_env_var(MATCHER_ENV) or DEFAULT_MATCHER,
    )
    config.build_matcher()
    return config
