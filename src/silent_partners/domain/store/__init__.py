"""Graph state store: typed commands, a pure reducer and one writer."""

from __future__ import annotations

from .commands import (
    AddEntitiesAndRelationships,
    AddEntity,
    AddOrMergeEntity,
    AddRelationship,
    BeginIngestion,
    ClearGraph,
    DeduplicateGraph,
    DeleteEntity,
    DeleteRelationship,
    EndIngestion,
    GraphCommand,
    SelectEntity,
    SelectRelationship,
    SetGraph,
    UpdateEntity,
    UpdateGraphMetadata,
    UpdateInvestigationContext,
    UpdateRelationship,
)
from .operations import add_or_merge_entity, deduplicate_graph, merge_batch
from .reducer import reduce
from .state import (
    BatchOutcome,
    DeduplicationOutcome,
    EntityOutcome,
    GraphState,
    Outcome,
    RelationshipOutcome,
    StoreMode,
    Transition,
)
from .store import GraphStore, Listener

__all__ = [
    "AddEntitiesAndRelationships",
    "AddEntity",
    "AddOrMergeEntity",
    "AddRelationship",
    "BatchOutcome",
    "BeginIngestion",
    "ClearGraph",
    "DeduplicateGraph",
    "DeduplicationOutcome",
    "DeleteEntity",
    "DeleteRelationship",
    "EndIngestion",
    "EntityOutcome",
    "GraphCommand",
    "GraphState",
    "GraphStore",
    "Listener",
    "Outcome",
    "RelationshipOutcome",
    "SelectEntity",
    "SelectRelationship",
    "SetGraph",
    "StoreMode",
    "Transition",
    "UpdateEntity",
    "UpdateGraphMetadata",
    "UpdateInvestigationContext",
    "UpdateRelationship",
    "add_or_merge_entity",
    "deduplicate_graph",
    "merge_batch",
    "reduce",
]
