"""Translate between JSON graph documents and domain graphs.

Import is lenient the same way ingestion is: duplicate entity ids, dangling
relationship endpoints, self-loops and repeated relationships are dropped
with a warning so the resulting graph always satisfies its invariants. Only
a document that does not have the basic shape raises ``GraphDocumentError``.
"""

from __future__ import annotations

import json
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from silent_partners.domain.model import (
    DEFAULT_GRAPH_TITLE,
    Entity,
    EntityType,
    Graph,
    InvestigationContext,
    Relationship,
    RelationshipStatus,
    clamp_importance,
    new_id,
    relationship_key,
)

from .schema import (
    DocumentEntity,
    DocumentInvestigationContext,
    DocumentRelationship,
    GraphDocument,
)

if TYPE_CHECKING:
    from silent_partners.domain.model import RelationshipKey

log = getLogger(__name__)


class GraphDocumentError(ValueError):
    """Raised when a JSON document cannot be read as a graph."""

    def __init__(self, message: str, *, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


def parse_document(payload: object) -> GraphDocument:
    try:
        return GraphDocument.model_validate(payload)
    except ValidationError as exc:
        details = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors(include_url=False)
        ]
        raise GraphDocumentError("Invalid graph document", errors=details) from exc


def _entity(payload: DocumentEntity) -> Entity:
    return Entity(
        id=payload.id,
        name=payload.name,
        type=EntityType.coerce(payload.type),
        description=payload.description or "",
        importance=clamp_importance(payload.importance),
        aliases=frozenset(payload.aliases),
        sources=frozenset(payload.sources),
    )


def _relationship(payload: DocumentRelationship) -> Relationship:
    return Relationship(
        id=payload.id or new_id(),
        source=payload.source,
        target=payload.target,
        type=payload.type or "",
        label=payload.label or "",
        status=RelationshipStatus.coerce(payload.status),
        confidence=payload.confidence,
    )


def _context(payload: DocumentInvestigationContext | None) -> InvestigationContext | None:
    if payload is None:
        return None
    return InvestigationContext(
        topic=payload.topic,
        domain=payload.domain,
        focus=payload.focus,
        key_questions=tuple(payload.key_questions),
    )


def graph_from_document(document: GraphDocument) -> Graph:
    entities: dict[str, Entity] = {}
    for payload in document.entities:
        if payload.id in entities:
            log.warning("Skipping entity with duplicate id %r (%s)", payload.id, payload.name)
            continue
        entities[payload.id] = _entity(payload)

    relationships: list[Relationship] = []
    seen: set[RelationshipKey] = set()
    for index, payload in enumerate(document.relationships):
        missing = [token for token in (payload.source, payload.target) if token not in entities]
        if missing:
            log.warning("Skipping relationship %d: unknown entity %s", index, ", ".join(missing))
            continue
        if payload.source == payload.target:
            log.warning("Skipping relationship %d: self-loop on %s", index, payload.source)
            continue
        key = relationship_key(payload.source, payload.target, payload.type)
        if key in seen:
            log.warning("Skipping relationship %d: duplicate %s", index, key[1])
            continue
        seen.add(key)
        relationships.append(_relationship(payload))

    return Graph(
        entities=tuple(entities.values()),
        relationships=tuple(relationships),
        title=(document.title or "").strip() or DEFAULT_GRAPH_TITLE,
        description=document.description or "",
        investigation_context=_context(document.investigation_context),
    )


def document_from_graph(graph: Graph) -> GraphDocument:
    context = graph.investigation_context
    return GraphDocument(
        title=graph.title,
        description=graph.description,
        entities=[
            DocumentEntity(
                id=entity.id,
                name=entity.name,
                type=str(entity.type),
                description=entity.description or None,
                importance=entity.importance,
                aliases=sorted(entity.aliases),
                sources=sorted(entity.sources),
            )
            for entity in graph.entities
        ],
        relationships=[
            DocumentRelationship(
                id=relationship.id,
                source=relationship.source,
                target=relationship.target,
                type=relationship.type,
                label=relationship.label,
                status=str(relationship.status),
                confidence=relationship.confidence,
            )
            for relationship in graph.relationships
        ],
        investigation_context=(
            None
            if context is None
            else DocumentInvestigationContext(
                topic=context.topic,
                domain=context.domain,
                focus=context.focus,
                key_questions=list(context.key_questions),
            )
        ),
    )


def loads_graph(text: str) -> Graph:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise GraphDocumentError(f"Invalid JSON: {exc.msg}") from exc
    return graph_from_document(parse_document(payload))


def dumps_graph(graph: Graph, *, indent: int | None = 2) -> str:
    document = document_from_graph(graph)
    return document.model_dump_json(by_alias=True, exclude_none=True, indent=indent)


def load_graph(path: str | Path) -> Graph:
    source = Path(path)
    log.debug("Loading graph document %s", source)
    return loads_graph(source.read_text(encoding="utf-8"))


def dump_graph(graph: Graph, path: str | Path) -> None:
    target = Path(path)
    target.write_text(dumps_graph(graph) + "\n", encoding="utf-8")
    log.debug("Wrote graph document %s", target)
