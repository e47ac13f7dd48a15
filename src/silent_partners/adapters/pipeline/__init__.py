"""Public interface for the extraction pipeline adapter."""

from __future__ import annotations

from .client import PipelineClient, existing_context, iter_sse_payloads
from .schema import PipelineEntity, PipelineEvent, PipelineEventData, PipelineRelationship
from .translator import (
    PipelineStreamError,
    entity_fact,
    entity_facts,
    facts_from_event,
    facts_from_payload,
    pipeline_facts,
    relationship_fact,
)

__all__ = [
    "PipelineClient",
    "PipelineEntity",
    "PipelineEvent",
    "PipelineEventData",
    "PipelineRelationship",
    "PipelineStreamError",
    "entity_fact",
    "entity_facts",
    "existing_context",
    "facts_from_event",
    "facts_from_payload",
    "iter_sse_payloads",
    "pipeline_facts",
    "relationship_fact",
]
