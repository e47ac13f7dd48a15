from __future__ import annotations

import pytest

from silent_partners.domain.model import (
    DEFAULT_GRAPH_TITLE,
    Entity,
    EntityType,
    Graph,
    InvestigationContext,
    RawRelationship,
    Relationship,
    RelationshipStatus,
)
from silent_partners.domain.resolution import RelationshipResolutionStatus
from silent_partners.domain.store import (
    AddEntity,
    AddOrMergeEntity,
    AddRelationship,
    BeginIngestion,
    ClearGraph,
    DeleteEntity,
    DeleteRelationship,
    EndIngestion,
    EntityOutcome,
    GraphState,
    RelationshipOutcome,
    SelectEntity,
    SelectRelationship,
    SetGraph,
    StoreMode,
    UpdateEntity,
    UpdateGraphMetadata,
    UpdateInvestigationContext,
    UpdateRelationship,
    reduce,
)


def test_reduce_is_pure(acme_globex_graph: Graph) -> None:
    state = GraphState(graph=acme_globex_graph)

    transition = reduce(state, DeleteEntity("acme"))

    assert state.graph is acme_globex_graph
    assert len(state.graph.entities) == 3
    assert len(transition.state.graph.entities) == 2


def test_reduce_rejects_unknown_commands() -> None:
    with pytest.raises(TypeError, match="Unsupported graph command"):
        reduce(GraphState(), object())  # type: ignore[arg-type]


def test_set_graph_replaces_and_clears_selection(acme_globex_graph: Graph) -> None:
    state = GraphState(graph=acme_globex_graph, selected_entity_id="acme")
    replacement = Graph(entities=(Entity(id="x", name="Initech"),))

    transition = reduce(state, SetGraph(replacement))

    assert transition.state.graph is replacement
    assert transition.state.selected_entity_id is None


@pytest.mark.parametrize(
    "relationships",
    [
        (Relationship(id="r", source="a", target="ghost"),),
        (
            Relationship(id="r1", source="a", target="b", type="owns"),
            Relationship(id="r2", source="b", target="a", type="Owns"),
        ),
    ],
)
def test_set_graph_rejects_graph_breaking_relationship_rules(
    acme_globex_graph: Graph, relationships: tuple[Relationship, ...]
) -> None:
    state = GraphState(graph=acme_globex_graph)
    invalid = Graph(
        entities=(Entity(id="a", name="Acme"), Entity(id="b", name="Globex")),
        relationships=relationships,
    )

    transition = reduce(state, SetGraph(invalid))

    assert not transition.outcome.applied
    assert (transition.outcome.reason or "").startswith("invalid_graph")
    assert transition.state is state


def test_add_entity_allows_duplicate_names_but_not_ids() -> None:
    state = GraphState()
    state = reduce(state, AddEntity(Entity(id="a", name="Acme"))).state
    state = reduce(state, AddEntity(Entity(id="b", name="Acme"))).state

    assert [entity.id for entity in state.graph.entities] == ["a", "b"]

    transition = reduce(state, AddEntity(Entity(id="a", name="Other")))
    assert not transition.outcome.applied
    assert transition.state is state


def test_add_or_merge_entity_tesla_scenario() -> None:
    state = GraphState()
    first = reduce(state, AddOrMergeEntity(Entity(name="Tesla Inc.")))
    second = reduce(first.state, AddOrMergeEntity(Entity(name="tesla")))

    entities = second.state.graph.entities
    assert len(entities) == 1
    assert {"Tesla Inc.", "tesla"} <= entities[0].aliases
    outcome = second.outcome
    assert isinstance(outcome, EntityOutcome)
    assert outcome.merged
    assert outcome.entity_id == entities[0].id


def test_delete_entity_cascades_exactly(acme_globex_graph: Graph) -> None:
    state = GraphState(
        graph=acme_globex_graph,
        selected_entity_id="alice",
        selected_relationship_id=None,
    )

    transition = reduce(state, DeleteEntity("alice"))

    graph = transition.state.graph
    assert not graph.has_entity("alice")
    assert [rel.id for rel in graph.relationships] == ["r2"]
    assert transition.state.selected_entity_id is None


def test_delete_entity_clears_selected_relationship_it_removed(acme_globex_graph: Graph) -> None:
    state = GraphState(graph=acme_globex_graph, selected_relationship_id="r1")

    transition = reduce(state, DeleteEntity("acme"))

    assert transition.state.selected_relationship_id is None
    assert transition.state.graph.relationships == ()


def test_delete_unknown_entity_is_a_no_op(acme_globex_graph: Graph) -> None:
    state = GraphState(graph=acme_globex_graph)

    transition = reduce(state, DeleteEntity("ghost"))

    assert not transition.outcome.applied
    assert transition.state is state


def test_update_entity_keeps_invariants(acme_globex_graph: Graph) -> None:
    state = GraphState(graph=acme_globex_graph)

    transition = reduce(
        state,
        UpdateEntity(entity_id="acme", name="  ", importance=99, type=EntityType.FINANCIAL),
    )

    updated = transition.state.graph.entity_for("acme")
    assert updated is not None
    assert updated.name == "Acme"
    assert updated.importance == 10
    assert updated.type is EntityType.FINANCIAL


def test_add_relationship_resolves_names(acme_globex_graph: Graph) -> None:
    state = GraphState(graph=acme_globex_graph)

    transition = reduce(
        state,
        AddRelationship(
            relationship=RawRelationship(source="Alice Moreau", target="Globex", type="advises")
        ),
    )

    outcome = transition.outcome
    assert isinstance(outcome, RelationshipOutcome)
    assert outcome.applied
    assert outcome.status is RelationshipResolutionStatus.RESOLVED
    added = transition.state.graph.relationship_for(outcome.relationship_id or "")
    assert added is not None
    assert (added.source, added.target) == ("alice", "globex")


@pytest.mark.parametrize(
    ("raw", "status"),
    [
        (RawRelationship(source="acme", target="Acme"), RelationshipResolutionStatus.SELF_LOOP),
        (
            RawRelationship(source="Initech", target="Acme"),
            RelationshipResolutionStatus.UNRESOLVED,
        ),
        (
            RawRelationship(source="Globex", target="Acme", type="owns", confidence=0.9),
            RelationshipResolutionStatus.DUPLICATE,
        ),
    ],
)
def test_add_relationship_drops_invalid_requests(
    acme_globex_graph: Graph,
    raw: RawRelationship,
    status: RelationshipResolutionStatus,
) -> None:
    state = GraphState(graph=acme_globex_graph)

    transition = reduce(state, AddRelationship(relationship=raw))

    assert transition.state is state
    assert isinstance(transition.outcome, RelationshipOutcome)
    assert transition.outcome.status is status
    assert not transition.outcome.applied


def _two_company_state() -> tuple[GraphState, str, str]:
    graph = Graph(entities=(Entity(id="a", name="Acme"), Entity(id="b", name="Globex")))
    owns = reduce(
        GraphState(graph=graph),
        AddRelationship(relationship=RawRelationship(source="a", target="b", type="owns")),
    )
    funds = reduce(
        owns.state,
        AddRelationship(relationship=RawRelationship(source="b", target="a", type="funds")),
    )
    owns_outcome = owns.outcome
    funds_outcome = funds.outcome
    assert isinstance(owns_outcome, RelationshipOutcome)
    assert isinstance(funds_outcome, RelationshipOutcome)
    assert owns_outcome.relationship_id is not None
    assert funds_outcome.relationship_id is not None
    return funds.state, owns_outcome.relationship_id, funds_outcome.relationship_id


def test_update_relationship_rejects_type_change_into_duplicate() -> None:
    state, _owns_id, funds_id = _two_company_state()

    transition = reduce(state, UpdateRelationship(relationship_id=funds_id, type="Owns"))

    assert not transition.outcome.applied
    assert transition.state is state


def test_update_relationship_applies_changes() -> None:
    state, owns_id, _funds_id = _two_company_state()

    transition = reduce(
        state,
        UpdateRelationship(
            relationship_id=owns_id,
            label="majority owner",
            status=RelationshipStatus.FORMER,
            confidence=0.75,
        ),
    )

    updated = transition.state.graph.relationship_for(owns_id)
    assert updated is not None
    assert updated.label == "majority owner"
    assert updated.status is RelationshipStatus.FORMER
    assert updated.confidence == 0.75
    assert updated.type == "owns"


def test_delete_relationship_clears_its_selection(acme_globex_graph: Graph) -> None:
    state = GraphState(graph=acme_globex_graph, selected_relationship_id="r2")

    transition = reduce(state, DeleteRelationship("r2"))

    assert transition.state.graph.relationship_for("r2") is None
    assert transition.state.selected_relationship_id is None
    assert len(transition.state.graph.entities) == 3


def test_selection_is_mutually_exclusive(acme_globex_graph: Graph) -> None:
    state = GraphState(graph=acme_globex_graph)

    state = reduce(state, SelectEntity("acme")).state
    assert state.selected_entity_id == "acme"

    state = reduce(state, SelectRelationship("r1")).state
    assert state.selected_relationship_id == "r1"
    assert state.selected_entity_id is None

    state = reduce(state, SelectEntity("ghost")).state
    assert state.selected_entity_id is None
    assert state.selected_relationship_id is None


def test_metadata_updates(acme_globex_graph: Graph) -> None:
    state = GraphState(graph=acme_globex_graph)
    context = InvestigationContext(topic="Shell companies", key_questions=("Who owns Globex?",))

    state = reduce(state, UpdateGraphMetadata(title="  ", description="Notes")).state
    state = reduce(state, UpdateInvestigationContext(context)).state

    assert state.graph.title == DEFAULT_GRAPH_TITLE
    assert state.graph.description == "Notes"
    assert state.graph.investigation_context == context
    assert not reduce(state, UpdateGraphMetadata()).outcome.applied


def test_clear_graph(acme_globex_graph: Graph) -> None:
    state = GraphState(graph=acme_globex_graph, selected_entity_id="acme")

    transition = reduce(state, ClearGraph())

    assert transition.state.graph == Graph()
    assert transition.state.selected_entity_id is None


def test_ingestion_mode_tracks_sessions() -> None:
    state = GraphState()
    assert state.mode is StoreMode.IDLE

    state = reduce(state, BeginIngestion("s1")).state
    state = reduce(state, BeginIngestion("s2")).state
    assert state.mode is StoreMode.INGESTING
    assert not reduce(state, BeginIngestion("s1")).outcome.applied

    state = reduce(state, EndIngestion("s1")).state
    assert state.mode is StoreMode.INGESTING
    state = reduce(state, EndIngestion("s2")).state
    assert state.mode is StoreMode.IDLE
    assert not reduce(state, EndIngestion("s2")).outcome.applied
