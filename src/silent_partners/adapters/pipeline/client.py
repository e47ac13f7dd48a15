"""HTTP client streaming server-sent events from the extraction pipeline."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from silent_partners.config import PipelineConfig, get_pipeline_config

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, AsyncIterator, Mapping

    from silent_partners.domain.model import Graph

log = getLogger(__name__)

EXTRACT_PATH = "extract"
RESEARCH_PATH = "research"


def _decode(data_lines: list[str]) -> object | None:
    raw = "\n".join(data_lines)
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        log.warning("Failed to parse SSE event: %r", raw[:200])
        return None


async def iter_sse_payloads(lines: AsyncIterable[str]) -> AsyncIterator[object]:
    """Decode the JSON ``data:`` payload of every event in a text/event-stream.

    Multi-line ``data`` fields are joined; comments and other fields are
    ignored. Payloads that are not valid JSON are logged and skipped.
    """

    data_lines: list[str] = []
    async for line in lines:
        if not line.strip():
            if data_lines:
                payload = _decode(data_lines)
                data_lines = []
                if payload is not None:
                    yield payload
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if field != "data":
            continue
        data_lines.append(value.removeprefix(" "))
    if data_lines:
        payload = _decode(data_lines)
        if payload is not None:
            yield payload


def existing_context(graph: Graph | None) -> dict[str, list[dict[str, str]]]:
    """Describe ``graph`` so the pipeline can cross-reference known entities."""

    if graph is None:
        return {"existing_entities": [], "existing_relationships": []}
    return {
        "existing_entities": [
            {"id": entity.id, "name": entity.name, "type": str(entity.type)}
            for entity in graph.entities
        ],
        "existing_relationships": [
            {"source": relationship.source, "target": relationship.target}
            for relationship in graph.relationships
        ],
    }


class PipelineClient:
    """Thin async wrapper around ``httpx.AsyncClient`` for the pipeline's SSE endpoints."""

    def __init__(
        self,
        config: PipelineConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or get_pipeline_config()
        self._transport = transport

    @property
    def config(self) -> PipelineConfig:
        return self._config

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "text/event-stream"}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        return headers

    async def iter_events(self, path: str, body: Mapping[str, object]) -> AsyncIterator[object]:
        """POST ``body`` to ``path`` and yield each decoded event payload."""

        base_url = self._config.base_url.rstrip("/") + "/"
        async with httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(self._config.timeout_seconds),
            transport=self._transport,
        ) as client:
            async with client.stream(
                "POST", path, json=dict(body), headers=self._headers()
            ) as response:
                response.raise_for_status()
                log.debug("Streaming pipeline events from %s", response.url)
                async for payload in iter_sse_payloads(response.aiter_lines()):
                    yield payload

    def stream_extraction(
        self,
        text: str,
        *,
        existing: Graph | None = None,
    ) -> AsyncIterator[object]:
        body: dict[str, object] = {"text": text, "stream": True, **existing_context(existing)}
        return self.iter_events(EXTRACT_PATH, body)

    def stream_research(
        self,
        entity1: str,
        entity2: str,
        *,
        existing: Graph | None = None,
    ) -> AsyncIterator[object]:
        context = existing_context(existing)
        body: dict[str, object] = {
            "entity1": entity1,
            "entity2": entity2,
            "stream": True,
            "existing_entities": context["existing_entities"],
        }
        return self.iter_events(RESEARCH_PATH, body)
