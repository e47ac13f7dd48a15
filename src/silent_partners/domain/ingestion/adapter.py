"""Streaming ingestion adapter.

Consumes an asynchronous stream of facts and forwards each one into the graph
store as it arrives. Every fact is handled to completion (validate, match,
merge or resolve, dispatch) before the next one is awaited, so the only
suspension point is waiting for the producer.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, cast

from silent_partners.domain.resolution import RelationshipResolutionStatus

from .facts import EntityFact, MalformedFactError, validate_fact
from .session import DEFAULT_PENDING_LIMIT, IngestionSession

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, Callable

    from silent_partners.domain.model import Entity, Relationship
    from silent_partners.domain.store import GraphStore

    from .facts import RelationshipFact

    type EntityCallback = Callable[[Entity], object]
    type RelationshipCallback = Callable[[Relationship], object]
    type ErrorCallback = Callable[[BaseException], object]
    type CompleteCallback = Callable[[IngestionResult], object]

log = logging.getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class IngestionResult:
    """Counters describing what one ingestion session did."""

    session_id: str
    entities_added: int = 0
    entities_merged: int = 0
    entities_repeated: int = 0
    relationships_added: int = 0
    relationships_deferred: int = 0
    relationships_dropped: int = 0
    facts_rejected: int = 0
    cancelled: bool = False
    error: BaseException | None = None

    @property
    def completed(self) -> bool:
        return not self.cancelled and self.error is None


@dataclass(slots=True, kw_only=True)
class _Callbacks:
    on_entity: EntityCallback | None = None
    on_relationship: RelationshipCallback | None = None
    on_error: ErrorCallback | None = None
    on_complete: CompleteCallback | None = None


@dataclass(slots=True)
class IngestionHandle:
    """Control surface of a running ingestion session."""

    session: IngestionSession
    task: asyncio.Task[IngestionResult] = field(repr=False)

    @property
    def session_id(self) -> str:
        return self.session.session_id

    def done(self) -> bool:
        return self.task.done()

    def cancel(self) -> None:
        """Stop consuming further facts. Facts already applied stay in the graph."""

        if self.task.done():
            return
        self.session.cancel_requested = True
        self.task.cancel()

    async def wait(self) -> IngestionResult:
        try:
            return await self.task
        except asyncio.CancelledError:
            # Cancelled before the consumer got to run its first step.
            if self.task.cancelled() and self.session.cancel_requested:
                return IngestionResult(session_id=self.session_id, cancelled=True)
            raise


class IngestionAdapter:
    """Bridge between fact producers and a ``GraphStore``."""

    def __init__(self, store: GraphStore, *, pending_limit: int = DEFAULT_PENDING_LIMIT) -> None:
        self._store = store
        self._pending_limit = pending_limit

    @property
    def store(self) -> GraphStore:
        return self._store

    def ingest(
        self,
        stream: AsyncIterable[object],
        *,
        on_entity: EntityCallback | None = None,
        on_relationship: RelationshipCallback | None = None,
        on_error: ErrorCallback | None = None,
        on_complete: CompleteCallback | None = None,
    ) -> IngestionHandle:
        """Start consuming ``stream`` on the running event loop."""

        session = IngestionSession(pending_limit=self._pending_limit)
        callbacks = _Callbacks(
            on_entity=on_entity,
            on_relationship=on_relationship,
            on_error=on_error,
            on_complete=on_complete,
        )
        task = asyncio.get_running_loop().create_task(
            self._consume(stream, session, callbacks),
            name=f"ingestion-{session.session_id}",
        )
        return IngestionHandle(session, task)

    async def run(
        self,
        stream: AsyncIterable[object],
        *,
        on_entity: EntityCallback | None = None,
        on_relationship: RelationshipCallback | None = None,
        on_error: ErrorCallback | None = None,
        on_complete: CompleteCallback | None = None,
    ) -> IngestionResult:
        handle = self.ingest(
            stream,
            on_entity=on_entity,
            on_relationship=on_relationship,
            on_error=on_error,
            on_complete=on_complete,
        )
        return await handle.wait()

    async def _consume(
        self,
        stream: AsyncIterable[object],
        session: IngestionSession,
        callbacks: _Callbacks,
    ) -> IngestionResult:
        result = IngestionResult(session_id=session.session_id)
        self._store.begin_ingestion(session.session_id)
        log.info("Ingestion session %s started", session.session_id)
        try:
            async for item in stream:
                self._handle(item, session, result, callbacks)
        except asyncio.CancelledError:
            if not session.cancel_requested:
                raise
            result.cancelled = True
            log.info("Ingestion session %s cancelled", session.session_id)
        except Exception as exc:
            result.error = exc
            log.warning("Ingestion session %s failed: %s", session.session_id, exc)
            if callbacks.on_error is not None:
                callbacks.on_error(exc)
        finally:
            leftover = session.discard()
            result.relationships_dropped += leftover
            self._store.end_ingestion(session.session_id)

        log.info(
            "Ingestion session %s finished: %d added, %d merged, %d relationship(s), %d dropped",
            session.session_id,
            result.entities_added,
            result.entities_merged,
            result.relationships_added,
            result.relationships_dropped,
        )
        if result.completed and callbacks.on_complete is not None:
            callbacks.on_complete(result)
        return result

    def _handle(
        self,
        item: object,
        session: IngestionSession,
        result: IngestionResult,
        callbacks: _Callbacks,
    ) -> None:
        try:
            fact = validate_fact(item)
        except MalformedFactError as exc:
            result.facts_rejected += 1
            log.warning("Dropping malformed fact: %s", exc)
            return
        if isinstance(fact, EntityFact):
            self._apply_entity(fact, session, result, callbacks)
        else:
            self._apply_relationship(fact, session, result, callbacks, retry=False)

    def _apply_entity(
        self,
        fact: EntityFact,
        session: IngestionSession,
        result: IngestionResult,
        callbacks: _Callbacks,
    ) -> None:
        if fact.key in session:
            result.entities_repeated += 1
            log.info("Entity %r already seen in session %s", fact.name, session.session_id)
            return

        outcome = self._store.add_or_merge_entity(fact.to_entity())
        entity_id = cast("str", outcome.entity_id)
        session.bind(fact, entity_id)
        if outcome.merged:
            result.entities_merged += 1
        else:
            result.entities_added += 1

        entity = self._store.snapshot().entity_for(entity_id)
        if entity is not None and callbacks.on_entity is not None:
            callbacks.on_entity(entity)

        for waiting in session.take_pending():
            self._apply_relationship(waiting, session, result, callbacks, retry=True)

    def _apply_relationship(
        self,
        fact: RelationshipFact,
        session: IngestionSession,
        result: IngestionResult,
        callbacks: _Callbacks,
        *,
        retry: bool,
    ) -> None:
        outcome = self._store.add_relationship(fact.to_raw(), entity_id_map=session.entity_ids)
        if outcome.applied:
            result.relationships_added += 1
            relationship = self._store.snapshot().relationship_for(outcome.relationship_id or "")
            if relationship is not None and callbacks.on_relationship is not None:
                callbacks.on_relationship(relationship)
            return

        if outcome.status is RelationshipResolutionStatus.UNRESOLVED:
            evicted = session.defer(fact)
            if evicted is not fact and not retry:
                result.relationships_deferred += 1
            if evicted is not None:
                result.relationships_dropped += 1
                log.debug(
                    "Dropping unresolved relationship %s -> %s", evicted.source, evicted.target
                )
            return

        result.relationships_dropped += 1
        log.debug("Dropping relationship %s -> %s: %s", fact.source, fact.target, outcome.status)
