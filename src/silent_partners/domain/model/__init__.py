"""Public domain model surface."""

from __future__ import annotations

from silent_partners.domain.model.entity import (
    DEFAULT_IMPORTANCE,
    MAX_IMPORTANCE,
    MIN_IMPORTANCE,
    Entity,
    clamp_importance,
    new_id,
)
from silent_partners.domain.model.enums import EntityType, RelationshipStatus
from silent_partners.domain.model.graph import DEFAULT_GRAPH_TITLE, Graph, InvestigationContext
from silent_partners.domain.model.relationship import (
    DEFAULT_RELATIONSHIP_TYPE,
    RawRelationship,
    Relationship,
    RelationshipKey,
    clamp_confidence,
    normalize_relationship_type,
    relationship_key,
)

__all__ = [  # noqa: RUF022
    # entity
    "Entity",
    "new_id",
    "clamp_importance",
    "DEFAULT_IMPORTANCE",
    "MIN_IMPORTANCE",
    "MAX_IMPORTANCE",
    # relationship
    "Relationship",
    "RawRelationship",
    "RelationshipKey",
    "relationship_key",
    "normalize_relationship_type",
    "clamp_confidence",
    "DEFAULT_RELATIONSHIP_TYPE",
    # graph
    "Graph",
    "InvestigationContext",
    "DEFAULT_GRAPH_TITLE",
    # enums
    "EntityType",
    "RelationshipStatus",
]
