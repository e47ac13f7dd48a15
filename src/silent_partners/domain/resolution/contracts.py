"""Shared resolution contract components.

This module intentionally holds only:
- match/resolution status enums
- the tagged resolution outcomes produced by the relationship resolver
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from silent_partners.domain.model import RawRelationship, Relationship


class MatchKind(StrEnum):
    """Which name heuristic declared two entities the same."""

    EXACT = "exact"
    CONTAINMENT = "containment"
    ABBREVIATION = "abbreviation"


class RelationshipEndpoint(StrEnum):
    SOURCE = "source"
    TARGET = "target"


class RelationshipResolutionStatus(StrEnum):
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"
    SELF_LOOP = "self_loop"
    DUPLICATE = "duplicate"


@dataclass(frozen=True, slots=True, kw_only=True)
class ResolvedRelationship:
    """Both endpoints resolved; ``relationship`` carries a fresh id."""

    relationship: Relationship
    status: Literal[RelationshipResolutionStatus.RESOLVED] = RelationshipResolutionStatus.RESOLVED


@dataclass(frozen=True, slots=True, kw_only=True)
class UnresolvedRelationship:
    """At least one endpoint token matched nothing."""

    raw: RawRelationship
    missing: tuple[RelationshipEndpoint, ...]
    status: Literal[RelationshipResolutionStatus.UNRESOLVED] = (
        RelationshipResolutionStatus.UNRESOLVED
    )

    def __post_init__(self) -> None:
        if not self.missing:
            raise ValueError("Unresolved relationship must name at least one missing endpoint")


@dataclass(frozen=True, slots=True, kw_only=True)
class SelfLoopRelationship:
    """Both endpoints resolved to the same entity."""

    raw: RawRelationship
    entity_id: str
    status: Literal[RelationshipResolutionStatus.SELF_LOOP] = RelationshipResolutionStatus.SELF_LOOP


@dataclass(frozen=True, slots=True, kw_only=True)
class DuplicateRelationship:
    """The fact is already represented by ``existing``."""

    raw: RawRelationship
    existing: Relationship
    status: Literal[RelationshipResolutionStatus.DUPLICATE] = RelationshipResolutionStatus.DUPLICATE


type RelationshipResolution = (
    ResolvedRelationship | UnresolvedRelationship | SelfLoopRelationship | DuplicateRelationship
)
