"""Streaming ingestion: typed facts, per-run sessions and the adapter."""

from __future__ import annotations

from .adapter import IngestionAdapter, IngestionHandle, IngestionResult
from .facts import (
    EntityFact,
    IngestionFact,
    MalformedFactError,
    RelationshipFact,
    validate_fact,
)
from .session import DEFAULT_PENDING_LIMIT, IngestionSession

__all__ = [
    "DEFAULT_PENDING_LIMIT",
    "EntityFact",
    "IngestionAdapter",
    "IngestionFact",
    "IngestionHandle",
    "IngestionResult",
    "IngestionSession",
    "MalformedFactError",
    "RelationshipFact",
    "validate_fact",
]
