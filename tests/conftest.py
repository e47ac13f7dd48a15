from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from silent_partners.domain.model import Entity, EntityType, Graph, Relationship
from silent_partners.domain.store import GraphStore

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in (
        "SILENT_PARTNERS_PENDING_LIMIT",
        "SILENT_PARTNERS_MATCHER",
        "SILENT_PARTNERS_PIPELINE_URL",
        "SILENT_PARTNERS_PIPELINE_API_KEY",
        "SILENT_PARTNERS_PIPELINE_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def store() -> GraphStore:
    return GraphStore()


@pytest.fixture
def acme_globex_graph() -> Graph:
    acme = Entity(id="acme", name="Acme", type=EntityType.CORPORATION)
    globex = Entity(id="globex", name="Globex", type=EntityType.CORPORATION)
    alice = Entity(id="alice", name="Alice Moreau", type=EntityType.PERSON)
    return Graph(
        entities=(acme, globex, alice),
        relationships=(
            Relationship(id="r1", source="alice", target="acme", type="director_of"),
            Relationship(id="r2", source="acme", target="globex", type="owns", confidence=0.4),
        ),
        title="Acme investigation",
    )


@pytest.fixture
def debug_logs(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    caplog.set_level(logging.DEBUG, logger="silent_partners")
    return caplog
