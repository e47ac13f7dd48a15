"""Typed commands accepted by the graph store.

Every state change is expressed as one of these values and handed to
``GraphStore.dispatch``; nothing else mutates graph state.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from silent_partners.domain.model import (
        Entity,
        EntityType,
        Graph,
        InvestigationContext,
        RawRelationship,
        RelationshipStatus,
    )


@dataclass(frozen=True, slots=True)
class SetGraph:
    graph: Graph


@dataclass(frozen=True, slots=True, kw_only=True)
class UpdateGraphMetadata:
    title: str | None = None
    description: str | None = None


@dataclass(frozen=True, slots=True)
class UpdateInvestigationContext:
    context: InvestigationContext | None


@dataclass(frozen=True, slots=True)
class AddEntity:
    """Append as-is; duplicate names are the investigator's decision."""

    entity: Entity


@dataclass(frozen=True, slots=True)
class AddOrMergeEntity:
    entity: Entity


@dataclass(frozen=True, slots=True, kw_only=True)
class UpdateEntity:
    entity_id: str
    name: str | None = None
    type: EntityType | None = None
    description: str | None = None
    importance: int | None = None


@dataclass(frozen=True, slots=True)
class DeleteEntity:
    entity_id: str


@dataclass(frozen=True, slots=True, kw_only=True)
class AddRelationship:
    relationship: RawRelationship
    entity_id_map: Mapping[str, str] = field(default_factory=dict[str, str])


@dataclass(frozen=True, slots=True, kw_only=True)
class UpdateRelationship:
    relationship_id: str
    type: str | None = None
    label: str | None = None
    status: RelationshipStatus | None = None
    confidence: float | None = None


@dataclass(frozen=True, slots=True)
class DeleteRelationship:
    relationship_id: str


@dataclass(frozen=True, slots=True)
class AddEntitiesAndRelationships:
    entities: tuple[Entity, ...] = ()
    relationships: tuple[RawRelationship, ...] = ()


@dataclass(frozen=True, slots=True)
class DeduplicateGraph:
    pass


@dataclass(frozen=True, slots=True)
class ClearGraph:
    pass


@dataclass(frozen=True, slots=True)
class SelectEntity:
    entity_id: str | None


@dataclass(frozen=True, slots=True)
class SelectRelationship:
    relationship_id: str | None


@dataclass(frozen=True, slots=True)
class BeginIngestion:
    session_id: str


@dataclass(frozen=True, slots=True)
class EndIngestion:
    session_id: str


type GraphCommand = (
    SetGraph
    | UpdateGraphMetadata
    | UpdateInvestigationContext
    | AddEntity
    | AddOrMergeEntity
    | UpdateEntity
    | DeleteEntity
    | AddRelationship
    | UpdateRelationship
    | DeleteRelationship
    | AddEntitiesAndRelationships
    | DeduplicateGraph
    | ClearGraph
    | SelectEntity
    | SelectRelationship
    | BeginIngestion
    | EndIngestion
)
