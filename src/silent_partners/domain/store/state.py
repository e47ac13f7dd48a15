"""Store state and the outcomes reported for each dispatched command."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import TYPE_CHECKING

from silent_partners.domain.model import Graph

if TYPE_CHECKING:
    from silent_partners.domain.resolution import RelationshipResolutionStatus


class StoreMode(StrEnum):
    IDLE = "idle"
    INGESTING = "ingesting"


@dataclass(frozen=True, slots=True, kw_only=True)
class GraphState:
    """Everything the store owns. Replaced, never mutated."""

    graph: Graph = field(default_factory=Graph)
    selected_entity_id: str | None = None
    selected_relationship_id: str | None = None
    active_sessions: frozenset[str] = frozenset()
    version: int = 0

    @property
    def mode(self) -> StoreMode:
        return StoreMode.INGESTING if self.active_sessions else StoreMode.IDLE

    def with_graph(self, graph: Graph) -> GraphState:
        return replace(self, graph=graph)

    def evolve(self, **changes: object) -> GraphState:
        return replace(self, **changes)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True, kw_only=True)
class Outcome:
    """What a command did. ``applied`` is False for no-ops."""

    applied: bool = True
    reason: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class EntityOutcome(Outcome):
    entity_id: str | None = None
    merged: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class RelationshipOutcome(Outcome):
    relationship_id: str | None = None
    status: RelationshipResolutionStatus | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class BatchOutcome(Outcome):
    """Summary of one batch merge.

    ``entity_ids`` maps every incoming entity id and lower-cased name to the
    canonical id it ended up as.
    """

    entities_added: int = 0
    entities_merged: int = 0
    relationships_added: int = 0
    relationships_coalesced: int = 0
    relationships_dropped: int = 0
    entity_ids: dict[str, str] = field(default_factory=dict[str, str])


@dataclass(frozen=True, slots=True, kw_only=True)
class DeduplicationOutcome(Outcome):
    """Summary of a compaction pass; ``remap`` maps every old id to its survivor."""

    entities_collapsed: int = 0
    relationships_removed: int = 0
    remap: dict[str, str] = field(default_factory=dict[str, str])


@dataclass(frozen=True, slots=True, kw_only=True)
class Transition:
    state: GraphState
    outcome: Outcome
