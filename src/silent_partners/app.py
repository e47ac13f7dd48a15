"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from silent_partners.adapters.json_document import dump_graph, load_graph
from silent_partners.adapters.pipeline import PipelineClient, pipeline_facts
from silent_partners.config import get_ingestion_config
from silent_partners.domain.ingestion import IngestionAdapter
from silent_partners.domain.model import RawRelationship
from silent_partners.domain.store import GraphStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterable

    from silent_partners.config import IngestionConfig
    from silent_partners.domain.ingestion import IngestionResult
    from silent_partners.domain.model import Graph
    from silent_partners.domain.store import BatchOutcome, DeduplicationOutcome


log = getLogger(__name__)


def build_store(
    graph: Graph | None = None,
    *,
    config: IngestionConfig | None = None,
) -> GraphStore:
    effective = config or get_ingestion_config()
    return GraphStore(graph, matcher=effective.build_matcher())


def deduplicate_file(
    source: str | Path,
    *,
    output: str | Path | None = None,
    config: IngestionConfig | None = None,
) -> DeduplicationOutcome:
    """Compact the graph stored in ``source`` and write it back (or to ``output``)."""

    store = build_store(load_graph(source), config=config)
    log.info("Deduplicating %s (%d entities)", source, len(store.snapshot().entities))
    outcome = store.deduplicate()
    dump_graph(store.snapshot(), output or source)
    log.info(
        "Deduplication finished: collapsed=%s, relationships_removed=%s",
        outcome.entities_collapsed,
        outcome.relationships_removed,
    )
    return outcome


def merge_files(
    base: str | Path,
    incoming: str | Path,
    *,
    output: str | Path | None = None,
    config: IngestionConfig | None = None,
) -> BatchOutcome:
    """Merge the graph in ``incoming`` into the graph in ``base``."""

    store = build_store(load_graph(base), config=config)
    other = load_graph(incoming)
    relationships = [
        RawRelationship(
            source=relationship.source,
            target=relationship.target,
            type=relationship.type,
            label=relationship.label,
            status=relationship.status,
            confidence=relationship.confidence,
        )
        for relationship in other.relationships
    ]
    outcome = store.add_entities_and_relationships(other.entities, relationships)
    dump_graph(store.snapshot(), output or base)
    log.info(
        "Merge finished: added=%s, merged=%s, relationships=%s, coalesced=%s, dropped=%s",
        outcome.entities_added,
        outcome.entities_merged,
        outcome.relationships_added,
        outcome.relationships_coalesced,
        outcome.relationships_dropped,
    )
    return outcome


async def ingest_pipeline_events(
    store: GraphStore,
    events: AsyncIterable[object],
    *,
    config: IngestionConfig | None = None,
) -> IngestionResult:
    """Feed decoded pipeline event payloads into ``store``."""

    effective = config or get_ingestion_config()
    adapter = IngestionAdapter(store, pending_limit=effective.pending_limit)
    return await adapter.run(
        pipeline_facts(events),
        on_entity=lambda entity: log.info("Entity: %s (%s)", entity.name, entity.type),
        on_relationship=lambda rel: log.info("Relationship: %s", rel.label),
    )


def stream_into_file(
    graph_path: str | Path,
    *,
    text: str | None = None,
    research: tuple[str, str] | None = None,
    client: PipelineClient | None = None,
    config: IngestionConfig | None = None,
) -> IngestionResult:
    """Stream an extraction (``text``) or research (``research``) run into a graph file.

    The file is created when it does not exist yet; whatever the session applied
    is written back, even if the stream failed part-way.
    """

    if (text is None) == (research is None):
        raise ValueError("Provide exactly one of text or research")

    path = Path(graph_path)
    effective = config or get_ingestion_config()
    store = build_store(load_graph(path) if path.exists() else None, config=effective)
    active_client = client or PipelineClient()
    existing = store.snapshot()
    if research is not None:
        events = active_client.stream_research(*research, existing=existing)
    else:
        events = active_client.stream_extraction(text or "", existing=existing)

    result = asyncio.run(ingest_pipeline_events(store, events, config=effective))
    dump_graph(store.snapshot(), path)
    if result.error is not None:
        raise result.error
    return result
