"""
Base building blocks:
entity identity and the invariants every entity record carries.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from uuid import uuid4

from silent_partners.domain.model.enums import EntityType

MIN_IMPORTANCE = 1
MAX_IMPORTANCE = 10
DEFAULT_IMPORTANCE = 5


def new_id() -> str:
    return uuid4().hex


def clamp_importance(value: int | float | None) -> int:
    if value is None:
        return DEFAULT_IMPORTANCE
    return max(MIN_IMPORTANCE, min(MAX_IMPORTANCE, int(value)))


@dataclass(frozen=True, slots=True, kw_only=True)
class Entity:
    """One node of the investigation graph.

    Entities are immutable values; the store replaces them wholesale, so a
    snapshot handed to subscribers can never change underneath them.
    ``aliases`` keeps every name that was merged into this entity.
    """

    name: str
    id: str = field(default_factory=new_id)
    type: EntityType = EntityType.UNKNOWN
    description: str = ""
    importance: int = DEFAULT_IMPORTANCE
    aliases: frozenset[str] = field(default_factory=frozenset[str])
    sources: frozenset[str] = field(default_factory=frozenset[str])

    def __post_init__(self) -> None:
        name = self.name.strip() if isinstance(self.name, str) else ""
        if not name:
            raise ValueError("Entity name must not be empty")
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "type", EntityType.coerce(self.type))
        object.__setattr__(self, "description", self.description or "")
        object.__setattr__(self, "importance", clamp_importance(self.importance))
        object.__setattr__(self, "aliases", frozenset(self.aliases))
        object.__setattr__(self, "sources", frozenset(self.sources))

    def with_changes(self, **changes: object) -> Entity:
        """Return a copy with ``changes`` applied (invariants re-checked)."""

        return replace(self, **changes)  # type: ignore[arg-type]
