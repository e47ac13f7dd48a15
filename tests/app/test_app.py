from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import pytest

from silent_partners.adapters.json_document import dump_graph, load_graph
from silent_partners.adapters.pipeline import PipelineClient, PipelineStreamError
from silent_partners.app import (
    build_store,
    deduplicate_file,
    ingest_pipeline_events,
    merge_files,
    stream_into_file,
)
from silent_partners.config import IngestionConfig, PipelineConfig
from silent_partners.domain.model import Entity, Graph, Relationship
from silent_partners.domain.resolution import ExactNameMatcher

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path

CONFIG = IngestionConfig()


def _sse(*payloads: str) -> bytes:
    return "".join(f"data: {payload}\n\n" for payload in payloads).encode()


def _client(body: bytes) -> PipelineClient:
    return PipelineClient(
        PipelineConfig(base_url="https://pipeline.test"),
        transport=httpx.MockTransport(lambda _request: httpx.Response(200, content=body)),
    )


def test_build_store_uses_configured_matcher() -> None:
    store = build_store(config=IngestionConfig(matcher="exact"))

    assert isinstance(store.matcher, ExactNameMatcher)
    assert store.snapshot() == Graph()


def test_deduplicate_file_writes_output(tmp_path: Path) -> None:
    source = tmp_path / "graph.json"
    output = tmp_path / "compacted.json"
    dump_graph(
        Graph(
            entities=(
                Entity(id="a1", name="Acme"),
                Entity(id="a2", name="Acme Inc."),
                Entity(id="g", name="Globex"),
            ),
            relationships=(
                Relationship(id="r1", source="a1", target="g", type="owns"),
                Relationship(id="r2", source="a2", target="g", type="owns"),
            ),
        ),
        source,
    )

    outcome = deduplicate_file(source, output=output, config=CONFIG)

    compacted = load_graph(output)
    assert outcome.entities_collapsed == 1
    assert [entity.id for entity in compacted.entities] == ["a1", "g"]
    assert len(compacted.relationships) == 1
    assert len(load_graph(source).entities) == 3


def test_merge_files_merges_into_base(tmp_path: Path, acme_globex_graph: Graph) -> None:
    base = tmp_path / "base.json"
    incoming = tmp_path / "incoming.json"
    dump_graph(acme_globex_graph, base)
    dump_graph(
        Graph(
            entities=(Entity(id="x1", name="ACME Corp"), Entity(id="x2", name="Initech")),
            relationships=(Relationship(source="x2", target="x1", type="supplies"),),
        ),
        incoming,
    )

    outcome = merge_files(base, incoming, config=CONFIG)

    merged = load_graph(base)
    assert outcome.entities_merged == 1
    assert outcome.entities_added == 1
    assert len(merged.entities) == 4
    supplies = [rel for rel in merged.relationships if rel.type == "supplies"]
    assert len(supplies) == 1
    assert supplies[0].target == "acme"


def test_ingest_pipeline_events_populates_store() -> None:
    store = build_store(config=CONFIG)

    async def events() -> AsyncIterator[object]:
        yield {"type": "entity_found", "data": {"entity": {"id": "E1", "name": "Acme Corp"}}}
        yield {"type": "entity_found", "data": {"entity": {"id": "E2", "name": "Globex"}}}
        yield {
            "type": "relationship_found",
            "data": {"relationship": {"source": "E1", "target": "E2", "type": "owns"}},
        }

    result = asyncio.run(ingest_pipeline_events(store, events(), config=CONFIG))

    assert result.entities_added == 2
    assert result.relationships_added == 1
    assert len(store.snapshot().relationships) == 1


def test_stream_into_file_creates_graph(tmp_path: Path) -> None:
    path = tmp_path / "new.json"
    client = _client(
        _sse(
            '{"type": "entity_found", "data": {"entity": {"name": "Acme"}}}',
            '{"type": "entity_found", "data": {"entity": {"name": "Globex"}}}',
            '{"type": "relationship_found", "data": {"relationship": '
            '{"source": "Acme", "target": "Globex", "type": "owns"}}}',
            '{"type": "pipeline_complete", "data": {}}',
        )
    )

    result = stream_into_file(path, text="Acme owns Globex.", client=client, config=CONFIG)

    graph = load_graph(path)
    assert result.completed
    assert sorted(entity.name for entity in graph.entities) == ["Acme", "Globex"]
    assert len(graph.relationships) == 1


def test_stream_into_file_saves_progress_before_raising(
    tmp_path: Path, acme_globex_graph: Graph
) -> None:
    path = tmp_path / "graph.json"
    dump_graph(acme_globex_graph, path)
    client = _client(
        _sse(
            '{"type": "entity_found", "data": {"entity": {"name": "Initech"}}}',
            '{"type": "pipeline_error", "data": {"message": "upstream timeout"}}',
            '{"type": "entity_found", "data": {"entity": {"name": "Umbrella"}}}',
        )
    )

    with pytest.raises(PipelineStreamError, match="upstream timeout"):
        stream_into_file(path, research=("Acme", "Globex"), client=client, config=CONFIG)

    names = [entity.name for entity in load_graph(path).entities]
    assert "Initech" in names
    assert "Umbrella" not in names


@pytest.mark.parametrize(
    ("text", "research"),
    [(None, None), ("Acme owns Globex.", ("Acme", "Globex"))],
)
def test_stream_into_file_needs_exactly_one_source(
    tmp_path: Path, text: str | None, research: tuple[str, str] | None
) -> None:
    with pytest.raises(ValueError, match="exactly one"):
        stream_into_file(tmp_path / "graph.json", text=text, research=research, config=CONFIG)
