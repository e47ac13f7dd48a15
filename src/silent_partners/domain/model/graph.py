"""Graph snapshot: entity set, relationship set and investigation metadata."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from silent_partners.domain.model.entity import Entity
    from silent_partners.domain.model.relationship import Relationship

DEFAULT_GRAPH_TITLE = "Untitled Network"


@dataclass(frozen=True, slots=True, kw_only=True)
class InvestigationContext:
    topic: str = ""
    domain: str = ""
    focus: str = ""
    key_questions: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class Graph:
    """Immutable snapshot of one investigation graph.

    Insertion order of ``entities`` matters: the matcher scans it front to
    back, so earlier-created entities win ties.
    """

    entities: tuple[Entity, ...] = ()
    relationships: tuple[Relationship, ...] = ()
    title: str = DEFAULT_GRAPH_TITLE
    description: str = ""
    investigation_context: InvestigationContext | None = None
    _entities_by_id: dict[str, Entity] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entities", tuple(self.entities))
        object.__setattr__(self, "relationships", tuple(self.relationships))
        object.__setattr__(self, "_entities_by_id", {entity.id: entity for entity in self.entities})

    def entity_for(self, entity_id: str) -> Entity | None:
        return self._entities_by_id.get(entity_id)

    def has_entity(self, entity_id: str) -> bool:
        return entity_id in self._entities_by_id

    def relationship_for(self, relationship_id: str) -> Relationship | None:
        for relationship in self.relationships:
            if relationship.id == relationship_id:
                return relationship
        return None

    def relationships_touching(self, entity_id: str) -> tuple[Relationship, ...]:
        return tuple(rel for rel in self.relationships if rel.touches(entity_id))

    def with_metadata(self, **changes: object) -> Graph:
        """Return a copy with title, description or investigation context replaced."""

        return replace(self, **changes)  # type: ignore[arg-type]

    def with_entities(self, entities: Iterable[Entity]) -> Graph:
        return replace(self, entities=tuple(entities))

    def with_relationships(self, relationships: Iterable[Relationship]) -> Graph:
        return replace(self, relationships=tuple(relationships))

    def with_contents(
        self,
        *,
        entities: Iterable[Entity],
        relationships: Iterable[Relationship],
    ) -> Graph:
        return replace(self, entities=tuple(entities), relationships=tuple(relationships))

    def validate_invariants(self) -> None:
        """Raise ``ValueError`` if any referential invariant is broken."""

        if len(self._entities_by_id) != len(self.entities):
            raise ValueError("Entity ids are not unique")
        seen_keys: set[object] = set()
        for relationship in self.relationships:
            endpoints = (("source", relationship.source), ("target", relationship.target))
            for role, endpoint in endpoints:
                if endpoint not in self._entities_by_id:
                    raise ValueError(
                        f"Relationship {relationship.id} {role} does not exist: {endpoint}"
                    )
            if relationship.key in seen_keys:
                raise ValueError(f"Duplicate relationship for {sorted(relationship.key[0])}")
            seen_keys.add(relationship.key)
