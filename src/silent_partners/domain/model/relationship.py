"""Relationship records and the undirected identity key used for deduplication."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from silent_partners.domain.model.entity import new_id
from silent_partners.domain.model.enums import RelationshipStatus

DEFAULT_RELATIONSHIP_TYPE = "related_to"

type RelationshipKey = tuple[frozenset[str], str]


def clamp_confidence(value: float | None) -> float | None:
    if value is None:
        return None
    return max(0.0, min(1.0, float(value)))


def normalize_relationship_type(value: str | None) -> str:
    """Case-insensitive comparison form of a relationship type."""

    text = (value or "").strip().casefold()
    return text or DEFAULT_RELATIONSHIP_TYPE


def relationship_key(source: str, target: str, relationship_type: str | None) -> RelationshipKey:
    """Identity of a relationship regardless of direction."""

    return frozenset((source, target)), normalize_relationship_type(relationship_type)


@dataclass(frozen=True, slots=True, kw_only=True)
class Relationship:
    """An edge between two entities currently in the graph."""

    source: str
    target: str
    id: str = field(default_factory=new_id)
    type: str = DEFAULT_RELATIONSHIP_TYPE
    label: str = ""
    status: RelationshipStatus = RelationshipStatus.CONFIRMED
    confidence: float | None = None

    def __post_init__(self) -> None:
        if self.source == self.target:
            raise ValueError(f"Relationship {self.id} would be a self-loop on {self.source}")
        relationship_type = (self.type or "").strip() or DEFAULT_RELATIONSHIP_TYPE
        object.__setattr__(self, "type", relationship_type)
        object.__setattr__(self, "label", (self.label or "").strip() or relationship_type)
        object.__setattr__(self, "status", RelationshipStatus.coerce(self.status))
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))

    @property
    def key(self) -> RelationshipKey:
        return relationship_key(self.source, self.target, self.type)

    def touches(self, entity_id: str) -> bool:
        return entity_id in (self.source, self.target)

    def rewired(self, *, source: str, target: str) -> Relationship:
        """Return a copy with rewired endpoint ids."""

        return replace(self, source=source, target=target)

    def with_confidence(self, confidence: float | None) -> Relationship:
        return replace(self, confidence=confidence)

    def with_changes(self, **changes: object) -> Relationship:
        """Return a copy with ``changes`` applied (invariants re-checked)."""

        return replace(self, **changes)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True, kw_only=True)
class RawRelationship:
    """A relationship request whose endpoints are still unresolved tokens.

    ``source``/``target`` may be a producer-local id, a canonical entity id or
    a plain entity name.
    """

    source: str
    target: str
    type: str | None = None
    label: str | None = None
    status: RelationshipStatus = RelationshipStatus.CONFIRMED
    confidence: float | None = None
    id: str | None = None
