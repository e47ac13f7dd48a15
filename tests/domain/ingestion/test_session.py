from __future__ import annotations

import pytest

from silent_partners.domain.ingestion import EntityFact, IngestionSession, RelationshipFact


def _relationship(index: int) -> RelationshipFact:
    return RelationshipFact(source=f"s{index}", target=f"t{index}")


def test_bind_registers_producer_id_and_name() -> None:
    session = IngestionSession()

    session.bind(EntityFact(id="E1", name="Acme Corp"), "canonical")

    assert session.entity_ids == {"E1": "canonical", "acme corp": "canonical"}
    assert "E1" in session
    assert "acme corp" in session
    assert "globex" not in session


def test_defer_evicts_oldest_when_full() -> None:
    session = IngestionSession(pending_limit=2)

    assert session.defer(_relationship(1)) is None
    assert session.defer(_relationship(2)) is None
    evicted = session.defer(_relationship(3))

    assert evicted == _relationship(1)
    assert session.pending == 2
    assert session.take_pending() == [_relationship(2), _relationship(3)]
    assert session.pending == 0


def test_zero_limit_disables_buffering() -> None:
    session = IngestionSession(pending_limit=0)
    fact = _relationship(1)

    assert session.defer(fact) is fact
    assert session.pending == 0


def test_discard_clears_state_and_reports_leftovers() -> None:
    session = IngestionSession()
    session.bind(EntityFact(name="Acme"), "a")
    session.defer(_relationship(1))

    assert session.discard() == 1
    assert session.entity_ids == {}
    assert session.pending == 0


def test_negative_limit_is_rejected() -> None:
    with pytest.raises(ValueError, match="pending_limit"):
        IngestionSession(pending_limit=-1)


def test_sessions_get_distinct_ids() -> None:
    assert IngestionSession().session_id != IngestionSession().session_id
    assert IngestionSession(session_id="fixed").session_id == "fixed"
