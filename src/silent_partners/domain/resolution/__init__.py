"""Entity resolution core for integrating extracted facts into one graph.

Layered flow, leaf first:
1) normalize entity names into comparison keys
2) match a candidate entity against a pool (pluggable strategy)
3) merge matched records field by field
4) resolve relationship endpoints and reject self-loops and duplicates
"""

from __future__ import annotations

from .contracts import (
    DuplicateRelationship,
    MatchKind,
    RelationshipEndpoint,
    RelationshipResolution,
    RelationshipResolutionStatus,
    ResolvedRelationship,
    SelfLoopRelationship,
    UnresolvedRelationship,
)
from .match import (
    EntityMatcher,
    ExactNameMatcher,
    HeuristicNameMatcher,
    build_matcher,
    match_kind,
)
from .merge import merge_entities
from .normalize import name_key, normalize_name
from .relationships import (
    EntityIdMap,
    find_duplicate,
    raise_confidence,
    resolve_endpoint,
    resolve_relationship,
)

__all__ = [
    "DuplicateRelationship",
    "EntityIdMap",
    "EntityMatcher",
    "ExactNameMatcher",
    "HeuristicNameMatcher",
    "MatchKind",
    "RelationshipEndpoint",
    "RelationshipResolution",
    "RelationshipResolutionStatus",
    "ResolvedRelationship",
    "SelfLoopRelationship",
    "UnresolvedRelationship",
    "build_matcher",
    "find_duplicate",
    "match_kind",
    "merge_entities",
    "name_key",
    "normalize_name",
    "raise_confidence",
    "resolve_endpoint",
    "resolve_relationship",
]
