"""Pure graph transformations behind the store's merge-aware commands.

Responsibilities of this module:
- add-or-merge a single entity
- merge a batch of entities and relationships against a graph
- compact a whole graph (entity collapse + relationship rewiring)

Every function takes a ``Graph`` and returns a new one; nothing here touches
store state, so the reducer stays a plain function of its inputs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from silent_partners.domain.model import new_id
from silent_partners.domain.resolution import (
    DuplicateRelationship,
    ResolvedRelationship,
    merge_entities,
    name_key,
    raise_confidence,
    resolve_relationship,
)

from .state import BatchOutcome, DeduplicationOutcome, EntityOutcome

if TYPE_CHECKING:
    from collections.abc import Iterable

    from silent_partners.domain.model import (
        Entity,
        Graph,
        RawRelationship,
        Relationship,
        RelationshipKey,
    )
    from silent_partners.domain.resolution import EntityMatcher

log = logging.getLogger(__name__)


class _EntityPool:
    """Ordered entity list with id positions, used while folding a batch."""

    def __init__(self, entities: Iterable[Entity]) -> None:
        self.entities: list[Entity] = list(entities)
        self._positions = {entity.id: index for index, entity in enumerate(self.entities)}

    def append(self, entity: Entity) -> Entity:
        if entity.id in self._positions:
            entity = entity.with_changes(id=new_id())
        self._positions[entity.id] = len(self.entities)
        self.entities.append(entity)
        return entity

    def replace(self, entity: Entity) -> None:
        self.entities[self._positions[entity.id]] = entity


def _absorb(pool: _EntityPool, incoming: Entity, matcher: EntityMatcher) -> tuple[Entity, bool]:
    match = matcher.find_match(incoming, pool.entities)
    if match is None:
        return pool.append(incoming), False
    merged = merge_entities(match, incoming)
    pool.replace(merged)
    return merged, True


def add_or_merge_entity(
    graph: Graph,
    entity: Entity,
    *,
    matcher: EntityMatcher,
) -> tuple[Graph, EntityOutcome]:
    pool = _EntityPool(graph.entities)
    result, merged = _absorb(pool, entity, matcher)
    if merged:
        log.debug("Merged %r into %s", entity.name, result.id)
    return graph.with_entities(pool.entities), EntityOutcome(entity_id=result.id, merged=merged)


def merge_batch(
    graph: Graph,
    entities: Iterable[Entity],
    relationships: Iterable[RawRelationship],
    *,
    matcher: EntityMatcher,
) -> tuple[Graph, BatchOutcome]:
    """Merge a batch of entities, then resolve relationships against the union.

    Entities collapse against the existing graph and against earlier entities
    of the same batch. Relationships whose endpoints cannot be resolved, that
    loop back onto one entity, or that duplicate a known fact are excluded; a
    duplicate still raises the confidence of the relationship it repeats.
    """

    pool = _EntityPool(graph.entities)
    entity_ids: dict[str, str] = {}
    added = merged_count = 0
    for incoming in entities:
        result, merged = _absorb(pool, incoming, matcher)
        if merged:
            merged_count += 1
        else:
            added += 1
        entity_ids[incoming.id] = result.id
        entity_ids[name_key(incoming.name)] = result.id

    relationship_list: list[Relationship] = list(graph.relationships)
    positions = {relationship.id: index for index, relationship in enumerate(relationship_list)}
    relationships_added = coalesced = dropped = 0
    for raw in relationships:
        resolution = resolve_relationship(
            raw,
            entity_id_map=entity_ids,
            entities=pool.entities,
            relationships=relationship_list,
        )
        if isinstance(resolution, ResolvedRelationship):
            positions[resolution.relationship.id] = len(relationship_list)
            relationship_list.append(resolution.relationship)
            relationships_added += 1
        elif isinstance(resolution, DuplicateRelationship):
            existing = resolution.existing
            updated = raise_confidence(existing, raw.confidence)
            if updated is not existing:
                relationship_list[positions[existing.id]] = updated
                coalesced += 1
        else:
            log.debug(
                "Dropping relationship %s -> %s: %s", raw.source, raw.target, resolution.status
            )
            dropped += 1

    outcome = BatchOutcome(
        entities_added=added,
        entities_merged=merged_count,
        relationships_added=relationships_added,
        relationships_coalesced=coalesced,
        relationships_dropped=dropped,
        entity_ids=entity_ids,
    )
    return graph.with_contents(entities=pool.entities, relationships=relationship_list), outcome


def deduplicate_graph(
    graph: Graph,
    *,
    matcher: EntityMatcher,
) -> tuple[Graph, DeduplicationOutcome]:
    """Collapse duplicate entities and rewire relationships onto survivors."""

    accumulator = _EntityPool(())
    remap: dict[str, str] = {}
    for entity in graph.entities:
        result, _merged = _absorb(accumulator, entity, matcher)
        remap[entity.id] = result.id

    relationship_list: list[Relationship] = []
    index_by_key: dict[RelationshipKey, int] = {}
    removed = 0
    for relationship in graph.relationships:
        source = remap.get(relationship.source)
        target = remap.get(relationship.target)
        if source is None or target is None or source == target:
            removed += 1
            continue
        rewired = relationship
        if (source, target) != (relationship.source, relationship.target):
            rewired = relationship.rewired(source=source, target=target)
        index = index_by_key.get(rewired.key)
        if index is not None:
            survivor = relationship_list[index]
            relationship_list[index] = raise_confidence(survivor, rewired.confidence)
            removed += 1
            continue
        index_by_key[rewired.key] = len(relationship_list)
        relationship_list.append(rewired)

    outcome = DeduplicationOutcome(
        entities_collapsed=len(graph.entities) - len(accumulator.entities),
        relationships_removed=removed,
        remap=remap,
    )
    compacted = graph.with_contents(
        entities=accumulator.entities,
        relationships=relationship_list,
    )
    return compacted, outcome
