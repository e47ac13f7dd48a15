from __future__ import annotations

from silent_partners.domain.model import Entity, EntityType
from silent_partners.domain.resolution import merge_entities


def test_merge_keeps_existing_id_and_longer_name() -> None:
    existing = Entity(id="e1", name="tesla")
    incoming = Entity(id="e2", name="Tesla Inc.")

    merged = merge_entities(existing, incoming)

    assert merged.id == "e1"
    assert merged.name == "Tesla Inc."
    assert merged.aliases == {"tesla", "Tesla Inc."}


def test_merge_name_tie_keeps_existing() -> None:
    merged = merge_entities(Entity(name="ACME"), Entity(name="acme"))

    assert merged.name == "ACME"


def test_merge_field_rules() -> None:
    existing = Entity(
        name="Globex",
        type=EntityType.CORPORATION,
        description="Holding company",
        importance=4,
        sources=frozenset({"doc-1"}),
    )
    incoming = Entity(name="Globex", importance=8, sources=frozenset({"doc-2"}))

    merged = merge_entities(existing, incoming)

    assert merged.type is EntityType.CORPORATION
    assert merged.description == "Holding company"
    assert merged.importance == 8
    assert merged.sources == {"doc-1", "doc-2"}


def test_merge_prefers_set_incoming_type_and_description() -> None:
    existing = Entity(name="Globex", type=EntityType.ORGANIZATION, description="old")
    incoming = Entity(name="Globex", type=EntityType.CORPORATION, description="new")

    merged = merge_entities(existing, incoming)

    assert merged.type is EntityType.CORPORATION
    assert merged.description == "new"


def test_merge_is_idempotent() -> None:
    existing = Entity(name="IBM", aliases=frozenset({"Big Blue"}), sources=frozenset({"a"}))
    incoming = Entity(name="International Business Machines", sources=frozenset({"b"}))

    once = merge_entities(existing, incoming)

    assert merge_entities(once, incoming) == once


def test_merge_union_fields_are_order_independent() -> None:
    left = Entity(name="Initech", aliases=frozenset({"Initech LLC"}), sources=frozenset({"x"}))
    right = Entity(name="initech", aliases=frozenset({"INTC"}), sources=frozenset({"y"}))

    forward = merge_entities(left, right)
    backward = merge_entities(right, left)

    assert forward.aliases == backward.aliases
    assert forward.sources == backward.sources
