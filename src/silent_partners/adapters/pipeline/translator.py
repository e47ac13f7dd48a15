"""Translate pipeline events into ingestion facts."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from silent_partners.domain.ingestion import EntityFact, RelationshipFact

from .schema import PipelineEntity, PipelineEvent, PipelineRelationship

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, AsyncIterator

    from silent_partners.domain.ingestion import IngestionFact

log = getLogger(__name__)

ERROR_EVENTS = frozenset({"pipeline_error", "error"})
COMPLETE_EVENTS = frozenset({"pipeline_complete", "extraction_complete", "research_complete"})
PROGRESS_EVENTS = frozenset(
    {
        "pipeline_started",
        "extraction_started",
        "research_started",
        "phase_started",
        "phase_complete",
        "pipeline_progress",
        "progress",
        "searching",
        "connecting",
        "research_found",
        "context_loaded",
        "context_resolved",
        "validation_issue",
        "validation_fixed",
    }
)


class PipelineStreamError(RuntimeError):
    """Raised when the pipeline reports a terminal error on the stream."""

    def __init__(
        self,
        message: str,
        *,
        error_type: str | None = None,
        recoverable: bool = False,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.recoverable = recoverable
        self.suggestion = suggestion


def entity_fact(payload: PipelineEntity) -> EntityFact:
    return EntityFact(
        name=payload.name,
        id=payload.id,
        type=payload.type,
        description=payload.description,
        importance=payload.importance,
        aliases=tuple(payload.aliases),
        sources=tuple(payload.sources),
    )


def entity_facts(items: list[object]) -> list[IngestionFact]:
    """Validate batch entity items one by one; malformed items are dropped with a warning."""

    facts: list[IngestionFact] = []
    for index, item in enumerate(items):
        try:
            payload = PipelineEntity.model_validate(item)
        except ValidationError as exc:
            log.warning("Dropping malformed entity %d: %s", index, exc.errors(include_url=False))
            continue
        facts.append(entity_fact(payload))
    return facts


def relationship_fact(payload: PipelineRelationship) -> RelationshipFact:
    return RelationshipFact(
        source=payload.source,
        target=payload.target,
        type=payload.type,
        label=payload.label,
        status=payload.status,
        confidence=payload.confidence,
    )


def facts_from_event(event: PipelineEvent) -> list[IngestionFact]:
    """Return the facts carried by ``event``.

    Entity and relationship events the producer flags as not new are skipped.
    Error events raise ``PipelineStreamError``; everything else yields nothing.
    """

    data = event.data
    kind = event.type
    if kind == "entity_found":
        if data.entities is not None:
            return entity_facts(data.entities)
        if data.entity is not None and data.is_new:
            return [entity_fact(data.entity)]
        return []
    if kind == "entity_merged":
        return [entity_fact(data.entity)] if data.entity is not None else []
    if kind == "relationship_found":
        if data.relationship is not None and data.is_new:
            return [relationship_fact(data.relationship)]
        return []
    if kind == "cross_reference_found":
        if data.relationship is None:
            return []
        log.info("Cross reference: %s <-> %s", data.new_entity, data.existing_entity)
        return [relationship_fact(data.relationship)]
    if kind in ERROR_EVENTS:
        raise PipelineStreamError(
            data.message or "Pipeline reported an error",
            error_type=data.error_type,
            recoverable=data.recoverable,
            suggestion=data.suggestion,
        )
    if kind in PROGRESS_EVENTS:
        if data.message:
            log.info("Pipeline %s: %s", kind, data.message)
        return []
    if kind in COMPLETE_EVENTS:
        log.info("Pipeline finished (%s)", kind)
        return []
    log.debug("Ignoring unknown pipeline event %r", kind)
    return []


def facts_from_payload(payload: object) -> list[IngestionFact]:
    """Validate a decoded event payload; malformed payloads are dropped with a warning."""

    try:
        event = PipelineEvent.model_validate(payload)
    except ValidationError as exc:
        log.warning("Dropping malformed pipeline event: %s", exc.errors(include_url=False))
        return []
    return facts_from_event(event)


async def pipeline_facts(payloads: AsyncIterable[object]) -> AsyncIterator[IngestionFact]:
    """Flatten a stream of decoded event payloads into ingestion facts."""

    async for payload in payloads:
        for fact in facts_from_payload(payload):
            yield fact
