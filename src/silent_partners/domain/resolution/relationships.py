"""Relationship endpoint resolution.

Responsibilities of this stage:
- map raw endpoint tokens (producer ids, canonical ids, names) onto entity ids
- classify each request as RESOLVED/UNRESOLVED/SELF_LOOP/DUPLICATE
- stay stateless: callers own retry queues and the mutation of graph state

Out of scope for this stage:
- adding the relationship to a graph
- confidence coalescing policy (``raise_confidence`` is offered to callers)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from silent_partners.domain.model import Relationship, relationship_key

from .contracts import (
    DuplicateRelationship,
    RelationshipEndpoint,
    ResolvedRelationship,
    SelfLoopRelationship,
    UnresolvedRelationship,
)
from .normalize import name_key

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from silent_partners.domain.model import Entity, RawRelationship

    from .contracts import RelationshipResolution

type EntityIdMap = Mapping[str, str]


def resolve_endpoint(
    token: str,
    *,
    entity_id_map: EntityIdMap,
    entities: Sequence[Entity],
) -> str | None:
    """Return the canonical entity id ``token`` refers to, if any.

    Lookup order: exact session-map key, lower-cased session-map key, canonical
    id, case-insensitive entity name, case-insensitive alias.
    """

    known_ids = {entity.id for entity in entities}
    mapped = entity_id_map.get(token)
    if mapped is None:
        mapped = entity_id_map.get(name_key(token))
    if mapped is not None and mapped in known_ids:
        return mapped
    if token in known_ids:
        return token

    key = name_key(token)
    if not key:
        return None
    for entity in entities:
        if name_key(entity.name) == key:
            return entity.id
    for entity in entities:
        if any(name_key(alias) == key for alias in entity.aliases):
            return entity.id
    return None


def find_duplicate(
    source: str,
    target: str,
    relationship_type: str | None,
    relationships: Iterable[Relationship],
) -> Relationship | None:
    """Return the relationship already representing this undirected fact."""

    wanted = relationship_key(source, target, relationship_type)
    for relationship in relationships:
        if relationship.key == wanted:
            return relationship
    return None


def resolve_relationship(
    raw: RawRelationship,
    *,
    entity_id_map: EntityIdMap,
    entities: Sequence[Entity],
    relationships: Iterable[Relationship],
) -> RelationshipResolution:
    """Resolve ``raw`` against the given entity and relationship sets."""

    source = resolve_endpoint(raw.source, entity_id_map=entity_id_map, entities=entities)
    target = resolve_endpoint(raw.target, entity_id_map=entity_id_map, entities=entities)

    missing: list[RelationshipEndpoint] = []
    if source is None:
        missing.append(RelationshipEndpoint.SOURCE)
    if target is None:
        missing.append(RelationshipEndpoint.TARGET)
    if source is None or target is None:
        return UnresolvedRelationship(raw=raw, missing=tuple(missing))

    if source == target:
        return SelfLoopRelationship(raw=raw, entity_id=source)

    existing = find_duplicate(source, target, raw.type, relationships)
    if existing is not None:
        return DuplicateRelationship(raw=raw, existing=existing)

    return ResolvedRelationship(
        relationship=Relationship(
            source=source,
            target=target,
            type=raw.type or "",
            label=raw.label or "",
            status=raw.status,
            confidence=raw.confidence,
        )
    )


def raise_confidence(existing: Relationship, incoming: float | None) -> Relationship:
    """Return ``existing`` with confidence ``max(existing, incoming)``; never lowers it."""

    if incoming is None:
        return existing
    if existing.confidence is not None and existing.confidence >= incoming:
        return existing
    return existing.with_confidence(incoming)
