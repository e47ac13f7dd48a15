"""Pure reducer: ``(state, command) -> Transition``.

Each handler returns a complete new state, so an invariant can never be
observed half-applied. Handlers that cannot apply a command return the
unchanged state with ``applied=False`` instead of raising.
"""

from __future__ import annotations

from functools import singledispatch
from typing import TYPE_CHECKING

from silent_partners.domain.model import DEFAULT_GRAPH_TITLE, Graph, relationship_key
from silent_partners.domain.resolution import (
    EntityMatcher,
    HeuristicNameMatcher,
    RelationshipResolutionStatus,
    ResolvedRelationship,
    find_duplicate,
    resolve_relationship,
)

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
from .operations import add_or_merge_entity, deduplicate_graph, merge_batch
from .state import EntityOutcome, GraphState, Outcome, RelationshipOutcome, Transition

if TYPE_CHECKING:
    from .commands import GraphCommand

_DEFAULT_MATCHER = HeuristicNameMatcher()


def reduce(
    state: GraphState,
    command: GraphCommand,
    *,
    matcher: EntityMatcher | None = None,
) -> Transition:
    """Apply ``command`` to ``state`` and return the resulting transition."""

    return _apply(command, state, matcher or _DEFAULT_MATCHER)


def _unchanged(state: GraphState, reason: str, outcome: Outcome | None = None) -> Transition:
    return Transition(state=state, outcome=outcome or Outcome(applied=False, reason=reason))


@singledispatch
def _apply(command: object, state: GraphState, _matcher: EntityMatcher) -> Transition:
    raise TypeError(f"Unsupported graph command: {type(command).__name__}")


@_apply.register
def _(command: SetGraph, state: GraphState, _matcher: EntityMatcher) -> Transition:
    try:
        command.graph.validate_invariants()
    except ValueError as exc:
        return _unchanged(state, f"invalid_graph: {exc}")
    return Transition(
        state=state.evolve(
            graph=command.graph,
            selected_entity_id=None,
            selected_relationship_id=None,
        ),
        outcome=Outcome(),
    )


@_apply.register
def _(command: UpdateGraphMetadata, state: GraphState, _matcher: EntityMatcher) -> Transition:
    changes: dict[str, str] = {}
    if command.title is not None:
        changes["title"] = command.title.strip() or DEFAULT_GRAPH_TITLE
    if command.description is not None:
        changes["description"] = command.description
    if not changes:
        return _unchanged(state, "no_changes")
    graph = state.graph.with_metadata(**changes)
    return Transition(state=state.with_graph(graph), outcome=Outcome())


@_apply.register
def _(
    command: UpdateInvestigationContext,
    state: GraphState,
    _matcher: EntityMatcher,
) -> Transition:
    graph = state.graph.with_metadata(investigation_context=command.context)
    return Transition(state=state.with_graph(graph), outcome=Outcome())


@_apply.register
def _(command: AddEntity, state: GraphState, _matcher: EntityMatcher) -> Transition:
    entity = command.entity
    if state.graph.has_entity(entity.id):
        return _unchanged(
            state,
            "duplicate_id",
            EntityOutcome(applied=False, reason="duplicate_id", entity_id=entity.id),
        )
    graph = state.graph.with_entities((*state.graph.entities, entity))
    return Transition(state=state.with_graph(graph), outcome=EntityOutcome(entity_id=entity.id))


@_apply.register
def _(command: AddOrMergeEntity, state: GraphState, matcher: EntityMatcher) -> Transition:
    graph, outcome = add_or_merge_entity(state.graph, command.entity, matcher=matcher)
    return Transition(state=state.with_graph(graph), outcome=outcome)


@_apply.register
def _(command: UpdateEntity, state: GraphState, _matcher: EntityMatcher) -> Transition:
    current = state.graph.entity_for(command.entity_id)
    if current is None:
        return _unchanged(state, "unknown_entity")

    changes: dict[str, object] = {}
    if command.name is not None and command.name.strip():
        changes["name"] = command.name
    if command.type is not None:
        changes["type"] = command.type
    if command.description is not None:
        changes["description"] = command.description
    if command.importance is not None:
        changes["importance"] = command.importance
    if not changes:
        return _unchanged(state, "no_changes")

    updated = current.with_changes(**changes)
    entities = tuple(
        updated if entity.id == current.id else entity for entity in state.graph.entities
    )
    return Transition(
        state=state.with_graph(state.graph.with_entities(entities)),
        outcome=EntityOutcome(entity_id=updated.id),
    )


@_apply.register
def _(command: DeleteEntity, state: GraphState, _matcher: EntityMatcher) -> Transition:
    entity_id = command.entity_id
    if not state.graph.has_entity(entity_id):
        return _unchanged(state, "unknown_entity")

    remaining = tuple(rel for rel in state.graph.relationships if not rel.touches(entity_id))
    remaining_ids = {rel.id for rel in remaining}
    graph = state.graph.with_contents(
        entities=(entity for entity in state.graph.entities if entity.id != entity_id),
        relationships=remaining,
    )
    selected_relationship = state.selected_relationship_id
    if selected_relationship is not None and selected_relationship not in remaining_ids:
        selected_relationship = None
    return Transition(
        state=state.evolve(
            graph=graph,
            selected_entity_id=(
                None if state.selected_entity_id == entity_id else state.selected_entity_id
            ),
            selected_relationship_id=selected_relationship,
        ),
        outcome=EntityOutcome(entity_id=entity_id),
    )


@_apply.register
def _(command: AddRelationship, state: GraphState, _matcher: EntityMatcher) -> Transition:
    resolution = resolve_relationship(
        command.relationship,
        entity_id_map=command.entity_id_map,
        entities=state.graph.entities,
        relationships=state.graph.relationships,
    )
    if not isinstance(resolution, ResolvedRelationship):
        return _unchanged(
            state,
            str(resolution.status),
            RelationshipOutcome(
                applied=False,
                reason=str(resolution.status),
                status=resolution.status,
            ),
        )
    relationship = resolution.relationship
    graph = state.graph.with_relationships((*state.graph.relationships, relationship))
    return Transition(
        state=state.with_graph(graph),
        outcome=RelationshipOutcome(
            relationship_id=relationship.id,
            status=RelationshipResolutionStatus.RESOLVED,
        ),
    )


@_apply.register
def _(command: UpdateRelationship, state: GraphState, _matcher: EntityMatcher) -> Transition:
    current = state.graph.relationship_for(command.relationship_id)
    if current is None:
        return _unchanged(state, "unknown_relationship")

    changes: dict[str, object] = {}
    if command.type is not None:
        changes["type"] = command.type
    if command.label is not None:
        changes["label"] = command.label
    if command.status is not None:
        changes["status"] = command.status
    if command.confidence is not None:
        changes["confidence"] = command.confidence
    if not changes:
        return _unchanged(state, "no_changes")

    if command.type is not None:
        new_key = relationship_key(current.source, current.target, command.type)
        others = (rel for rel in state.graph.relationships if rel.id != current.id)
        if new_key != current.key and find_duplicate(
            current.source, current.target, command.type, others
        ):
            return _unchanged(
                state,
                "duplicate",
                RelationshipOutcome(
                    applied=False,
                    reason="duplicate",
                    relationship_id=current.id,
                    status=RelationshipResolutionStatus.DUPLICATE,
                ),
            )

    updated = current.with_changes(**changes)
    relationships = tuple(
        updated if rel.id == current.id else rel for rel in state.graph.relationships
    )
    return Transition(
        state=state.with_graph(state.graph.with_relationships(relationships)),
        outcome=RelationshipOutcome(relationship_id=current.id),
    )


@_apply.register
def _(command: DeleteRelationship, state: GraphState, _matcher: EntityMatcher) -> Transition:
    if state.graph.relationship_for(command.relationship_id) is None:
        return _unchanged(state, "unknown_relationship")
    graph = state.graph.with_relationships(
        rel for rel in state.graph.relationships if rel.id != command.relationship_id
    )
    selected = state.selected_relationship_id
    return Transition(
        state=state.evolve(
            graph=graph,
            selected_relationship_id=None if selected == command.relationship_id else selected,
        ),
        outcome=RelationshipOutcome(relationship_id=command.relationship_id),
    )


@_apply.register
def _(
    command: AddEntitiesAndRelationships,
    state: GraphState,
    matcher: EntityMatcher,
) -> Transition:
    graph, outcome = merge_batch(
        state.graph,
        command.entities,
        command.relationships,
        matcher=matcher,
    )
    return Transition(state=state.with_graph(graph), outcome=outcome)


@_apply.register
def _(_command: DeduplicateGraph, state: GraphState, matcher: EntityMatcher) -> Transition:
    graph, outcome = deduplicate_graph(state.graph, matcher=matcher)
    selected_entity = state.selected_entity_id
    if selected_entity is not None:
        selected_entity = outcome.remap.get(selected_entity)
    selected_relationship = state.selected_relationship_id
    if selected_relationship is not None and graph.relationship_for(selected_relationship) is None:
        selected_relationship = None
    return Transition(
        state=state.evolve(
            graph=graph,
            selected_entity_id=selected_entity,
            selected_relationship_id=selected_relationship,
        ),
        outcome=outcome,
    )


@_apply.register
def _(_command: ClearGraph, state: GraphState, _matcher: EntityMatcher) -> Transition:
    return Transition(
        state=state.evolve(graph=Graph(), selected_entity_id=None, selected_relationship_id=None),
        outcome=Outcome(),
    )


@_apply.register
def _(command: SelectEntity, state: GraphState, _matcher: EntityMatcher) -> Transition:
    entity_id = command.entity_id
    if entity_id is not None and not state.graph.has_entity(entity_id):
        entity_id = None
    return Transition(
        state=state.evolve(selected_entity_id=entity_id, selected_relationship_id=None),
        outcome=Outcome(),
    )


@_apply.register
def _(command: SelectRelationship, state: GraphState, _matcher: EntityMatcher) -> Transition:
    relationship_id = command.relationship_id
    if relationship_id is not None and state.graph.relationship_for(relationship_id) is None:
        relationship_id = None
    return Transition(
        state=state.evolve(selected_relationship_id=relationship_id, selected_entity_id=None),
        outcome=Outcome(),
    )


@_apply.register
def _(command: BeginIngestion, state: GraphState, _matcher: EntityMatcher) -> Transition:
    if command.session_id in state.active_sessions:
        return _unchanged(state, "session_active")
    return Transition(
        state=state.evolve(active_sessions=state.active_sessions | {command.session_id}),
        outcome=Outcome(),
    )


@_apply.register
def _(command: EndIngestion, state: GraphState, _matcher: EntityMatcher) -> Transition:
    if command.session_id not in state.active_sessions:
        return _unchanged(state, "unknown_session")
    return Transition(
        state=state.evolve(active_sessions=state.active_sessions - {command.session_id}),
        outcome=Outcome(),
    )
