"""Single-writer graph store.

All graph mutations funnel through ``GraphStore.dispatch``: one lock, one
reducer call, one state swap. Subscribers are notified after the lock is
released, in version order. Readers only ever see complete immutable snapshots.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable
from typing import TYPE_CHECKING, cast

from silent_partners.domain.model import Graph
from silent_partners.domain.resolution import HeuristicNameMatcher

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
    SelectEntity,
    SelectRelationship,
    SetGraph,
    UpdateEntity,
    UpdateGraphMetadata,
    UpdateInvestigationContext,
    UpdateRelationship,
)
from .reducer import reduce
from .state import GraphState

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from silent_partners.domain.model import (
        Entity,
        EntityType,
        InvestigationContext,
        RawRelationship,
        RelationshipStatus,
    )
    from silent_partners.domain.resolution import EntityMatcher

    from .commands import GraphCommand
    from .state import (
        BatchOutcome,
        DeduplicationOutcome,
        EntityOutcome,
        Outcome,
        RelationshipOutcome,
        StoreMode,
    )

type Listener = Callable[[GraphState, GraphCommand, Outcome], None]

log = logging.getLogger(__name__)


class GraphStore:
    """Authoritative, versioned state for one investigation graph."""

    def __init__(
        self,
        graph: Graph | None = None,
        *,
        matcher: EntityMatcher | None = None,
    ) -> None:
        if graph is not None:
            graph.validate_invariants()
        self._state = GraphState(graph=graph or Graph())
        self._matcher: EntityMatcher = matcher or HeuristicNameMatcher()
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []
        self._notifications: deque[tuple[GraphState, GraphCommand, Outcome]] = deque()
        self._delivering = False

    @property
    def state(self) -> GraphState:
        return self._state

    @property
    def version(self) -> int:
        return self._state.version

    @property
    def mode(self) -> StoreMode:
        return self._state.mode

    @property
    def matcher(self) -> EntityMatcher:
        return self._matcher

    def snapshot(self) -> Graph:
        """Current graph; immutable, safe to hand to renderers and exporters."""
        return self._state.graph

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every applied mutation. Returns an unsubscribe."""

        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, command: GraphCommand) -> Outcome:
        """Apply ``command`` atomically and notify subscribers if it changed state."""

        with self._lock:
            transition = reduce(self._state, command, matcher=self._matcher)
            outcome = transition.outcome
            if not outcome.applied:
                log.debug("Ignored %s: %s", type(command).__name__, outcome.reason)
                return outcome
            self._state = transition.state.evolve(version=self._state.version + 1)
            self._notifications.append((self._state, command, outcome))
        self._deliver()
        return outcome

    def _deliver(self) -> None:
        """Send queued notifications outside the lock, one at a time, in version order.

        Only one caller delivers at a time. A dispatch made while another caller
        (or a listener of this one) is delivering is queued and sent by that
        caller, so every listener sees versions in ascending order.
        """

        with self._lock:
            if self._delivering:
                return
            self._delivering = True
        while True:
            with self._lock:
                if not self._notifications:
                    self._delivering = False
                    return
                state, command, outcome = self._notifications.popleft()
                listeners = tuple(self._listeners)
            try:
                for listener in listeners:
                    listener(state, command, outcome)
            except BaseException:
                with self._lock:
                    self._delivering = False
                raise

    # Convenience wrappers, one per command.

    def set_graph(self, graph: Graph) -> Outcome:
        return self.dispatch(SetGraph(graph))

    def update_metadata(
        self,
        *,
        title: str | None = None,
        description: str | None = None,
    ) -> Outcome:
        return self.dispatch(UpdateGraphMetadata(title=title, description=description))

    def update_investigation_context(self, context: InvestigationContext | None) -> Outcome:
        return self.dispatch(UpdateInvestigationContext(context))

    def add_entity(self, entity: Entity) -> EntityOutcome:
        return cast("EntityOutcome", self.dispatch(AddEntity(entity)))

    def add_or_merge_entity(self, entity: Entity) -> EntityOutcome:
        return cast("EntityOutcome", self.dispatch(AddOrMergeEntity(entity)))

    def update_entity(
        self,
        entity_id: str,
        *,
        name: str | None = None,
        type: EntityType | None = None,  # noqa: A002
        description: str | None = None,
        importance: int | None = None,
    ) -> Outcome:
        return self.dispatch(
            UpdateEntity(
                entity_id=entity_id,
                name=name,
                type=type,
                description=description,
                importance=importance,
            )
        )

    def delete_entity(self, entity_id: str) -> Outcome:
        return self.dispatch(DeleteEntity(entity_id))

    def add_relationship(
        self,
        relationship: RawRelationship,
        *,
        entity_id_map: Mapping[str, str] | None = None,
    ) -> RelationshipOutcome:
        command = AddRelationship(relationship=relationship, entity_id_map=entity_id_map or {})
        return cast("RelationshipOutcome", self.dispatch(command))

    def update_relationship(
        self,
        relationship_id: str,
        *,
        type: str | None = None,  # noqa: A002
        label: str | None = None,
        status: RelationshipStatus | None = None,
        confidence: float | None = None,
    ) -> Outcome:
        return self.dispatch(
            UpdateRelationship(
                relationship_id=relationship_id,
                type=type,
                label=label,
                status=status,
                confidence=confidence,
            )
        )

    def delete_relationship(self, relationship_id: str) -> Outcome:
        return self.dispatch(DeleteRelationship(relationship_id))

    def add_entities_and_relationships(
        self,
        entities: Iterable[Entity],
        relationships: Iterable[RawRelationship] = (),
    ) -> BatchOutcome:
        command = AddEntitiesAndRelationships(tuple(entities), tuple(relationships))
        return cast("BatchOutcome", self.dispatch(command))

    def deduplicate(self) -> DeduplicationOutcome:
        return cast("DeduplicationOutcome", self.dispatch(DeduplicateGraph()))

    def clear(self) -> Outcome:
        return self.dispatch(ClearGraph())

    def select_entity(self, entity_id: str | None) -> Outcome:
        return self.dispatch(SelectEntity(entity_id))

    def select_relationship(self, relationship_id: str | None) -> Outcome:
        return self.dispatch(SelectRelationship(relationship_id))

    def begin_ingestion(self, session_id: str) -> Outcome:
        return self.dispatch(BeginIngestion(session_id))

    def end_ingestion(self, session_id: str) -> Outcome:
        return self.dispatch(EndIngestion(session_id))
