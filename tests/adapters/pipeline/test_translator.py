from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import pytest

from silent_partners.adapters.pipeline import (
    PipelineEvent,
    PipelineStreamError,
    facts_from_event,
    facts_from_payload,
    pipeline_facts,
)
from silent_partners.domain.ingestion import EntityFact, RelationshipFact

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from silent_partners.domain.ingestion import IngestionFact


def _event(kind: str, **data: object) -> PipelineEvent:
    return PipelineEvent.model_validate({"type": kind, "data": data})


def test_entity_found_with_single_entity() -> None:
    facts = facts_from_event(
        _event(
            "entity_found",
            entity={
                "id": "E1",
                "name": "Acme Corp",
                "type": "corporation",
                "description": "  ",
                "importance": 8,
            },
            is_new=True,
        )
    )

    assert facts == [
        EntityFact(id="E1", name="Acme Corp", type="corporation", description=None, importance=8)
    ]


def test_entity_found_with_batch_of_entities() -> None:
    facts = facts_from_event(
        _event("entity_found", entities=[{"name": "Acme"}, {"name": "Globex", "id": "g"}])
    )

    assert [fact.key for fact in facts if isinstance(fact, EntityFact)] == ["acme", "g"]


def test_malformed_batch_entity_does_not_drop_its_siblings(
    caplog: pytest.LogCaptureFixture,
) -> None:
    facts = facts_from_payload(
        {
            "type": "entity_found",
            "data": {"entities": [{"name": "Acme"}, {"name": "Globex"}, {"id": "x"}]},
        }
    )

    assert facts == [EntityFact(name="Acme"), EntityFact(name="Globex")]
    assert "Dropping malformed entity 2" in caplog.text


def test_events_flagged_as_not_new_are_skipped() -> None:
    assert facts_from_event(_event("entity_found", entity={"name": "Acme"}, is_new=False)) == []
    relationship = {"source": "Acme", "target": "Globex", "type": "owns"}
    event = _event("relationship_found", relationship=relationship, is_new=False)
    assert facts_from_event(event) == []


def test_entity_merged_is_forwarded_as_entity_fact() -> None:
    facts = facts_from_event(
        _event("entity_merged", entity={"name": "ACME Corporation"}, merged_with="acme")
    )

    assert facts == [EntityFact(name="ACME Corporation")]


def test_relationship_events_become_relationship_facts() -> None:
    found = facts_from_event(
        _event(
            "relationship_found",
            relationship={
                "source": "E1",
                "target": "E2",
                "type": "owns",
                "label": "",
                "status": "suspected",
                "confidence": 0.7,
            },
        )
    )
    cross = facts_from_event(
        _event(
            "cross_reference_found",
            relationship={"source": "Initech", "target": "acme", "type": "supplies"},
            new_entity="Initech",
            existing_entity="Acme",
        )
    )

    assert found == [
        RelationshipFact(
            source="E1", target="E2", type="owns", label=None, status="suspected", confidence=0.7
        )
    ]
    assert cross == [RelationshipFact(source="Initech", target="acme", type="supplies")]


def test_error_event_raises_stream_error() -> None:
    with pytest.raises(PipelineStreamError, match="quota exceeded") as excinfo:
        facts_from_event(
            _event(
                "pipeline_error",
                message="quota exceeded",
                error_type="rate_limit",
                recoverable=True,
                suggestion="retry later",
            )
        )

    assert excinfo.value.error_type == "rate_limit"
    assert excinfo.value.recoverable
    assert excinfo.value.suggestion == "retry later"


def test_progress_and_unknown_events_carry_no_facts(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="silent_partners")

    assert facts_from_event(_event("phase_started", message="Extracting entities")) == []
    assert facts_from_event(_event("pipeline_complete")) == []
    assert facts_from_event(_event("something_new")) == []
    assert "Extracting entities" in caplog.text


def test_malformed_payload_is_dropped(caplog: pytest.LogCaptureFixture) -> None:
    assert facts_from_payload({"data": {"entity": {"name": "Acme"}}}) == []
    assert facts_from_payload({"type": "entity_found", "data": {"entity": {"id": "x"}}}) == []
    assert facts_from_payload({"type": "pipeline_started", "data": None}) == []
    assert "Dropping malformed pipeline event" in caplog.text


def test_pipeline_facts_flattens_payload_stream() -> None:
    async def payloads() -> AsyncIterator[object]:
        yield {"type": "pipeline_started", "data": {"message": "go"}}
        yield {"type": "entity_found", "data": {"entities": [{"name": "A"}, {"name": "B"}]}}
        relationship = {"source": "A", "target": "B"}
        yield {"type": "relationship_found", "data": {"relationship": relationship}}
        yield {"type": "pipeline_complete", "data": {}}

    async def collect() -> list[IngestionFact]:
        return [fact async for fact in pipeline_facts(payloads())]

    facts = asyncio.run(collect())

    assert facts == [
        EntityFact(name="A"),
        EntityFact(name="B"),
        RelationshipFact(source="A", target="B"),
    ]
