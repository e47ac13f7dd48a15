"""Typed facts accepted by the ingestion adapter.

Producers emit loosely-shaped payloads; wire adapters translate them into one
of the two closed fact variants below. ``validate_fact`` is the boundary
check: anything that is not a well-formed fact is rejected before it reaches
the matcher.
"""

from __future__ import annotations

from dataclasses import dataclass

from silent_partners.domain.model import (
    Entity,
    EntityType,
    RawRelationship,
    RelationshipStatus,
    clamp_importance,
)
from silent_partners.domain.resolution import name_key


class MalformedFactError(ValueError):
    """Raised when an inbound fact lacks a required field."""


@dataclass(frozen=True, slots=True, kw_only=True)
class EntityFact:
    """An entity reported by a producer, optionally under a producer-local id."""

    name: str
    id: str | None = None
    type: str | None = None
    description: str | None = None
    importance: float | None = None
    aliases: tuple[str, ...] = ()
    sources: tuple[str, ...] = ()

    @property
    def key(self) -> str:
        """Session key: the producer id when given, else the lower-cased name."""
        return self.id or name_key(self.name)

    def to_entity(self) -> Entity:
        return Entity(
            name=self.name,
            type=EntityType.coerce(self.type),
            description=self.description or "",
            importance=clamp_importance(self.importance),
            aliases=frozenset(self.aliases),
            sources=frozenset(self.sources),
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class RelationshipFact:
    """A relationship whose endpoints are producer ids or plain names."""

    source: str
    target: str
    type: str | None = None
    label: str | None = None
    status: str | None = None
    confidence: float | None = None

    def to_raw(self) -> RawRelationship:
        return RawRelationship(
            source=self.source,
            target=self.target,
            type=self.type,
            label=self.label,
            status=RelationshipStatus.coerce(self.status),
            confidence=self.confidence,
        )


type IngestionFact = EntityFact | RelationshipFact


def _blank(value: object) -> bool:
    return not isinstance(value, str) or not value.strip()


def validate_fact(item: object) -> IngestionFact:
    """Return ``item`` if it is a well-formed fact, else raise ``MalformedFactError``."""

    if isinstance(item, EntityFact):
        if _blank(item.name):
            raise MalformedFactError(f"Entity fact without a name (id={item.id!r})")
        return item
    if isinstance(item, RelationshipFact):
        if _blank(item.source) or _blank(item.target):
            raise MalformedFactError(
                f"Relationship fact without both endpoints ({item.source!r} -> {item.target!r})"
            )
        return item
    raise MalformedFactError(f"Unsupported fact type: {type(item).__name__}")
