"""Per-run ingestion state: the session entity-id map and the pending buffer."""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from silent_partners.domain.model import new_id
from silent_partners.domain.resolution import name_key

if TYPE_CHECKING:
    from .facts import EntityFact, RelationshipFact

log = logging.getLogger(__name__)

DEFAULT_PENDING_LIMIT = 256


class IngestionSession:
    """Ephemeral state of one ingestion run.

    ``entity_ids`` maps producer-local ids and lower-cased names onto canonical
    graph ids. Relationship facts whose endpoints are not known yet wait in a
    bounded FIFO buffer; when it is full the oldest fact is evicted.
    """

    def __init__(
        self,
        *,
        session_id: str | None = None,
        pending_limit: int = DEFAULT_PENDING_LIMIT,
    ) -> None:
        if pending_limit < 0:
            raise ValueError("pending_limit must not be negative")
        self.session_id = session_id or new_id()
        self.pending_limit = pending_limit
        self.entity_ids: dict[str, str] = {}
        self.cancel_requested = False
        self._pending: deque[RelationshipFact] = deque()

    def __contains__(self, key: object) -> bool:
        return key in self.entity_ids

    @property
    def pending(self) -> int:
        return len(self._pending)

    def bind(self, fact: EntityFact, entity_id: str) -> None:
        if fact.id:
            self.entity_ids[fact.id] = entity_id
        self.entity_ids[name_key(fact.name)] = entity_id

    def defer(self, fact: RelationshipFact) -> RelationshipFact | None:
        """Buffer ``fact``; return the evicted fact if the buffer overflowed."""

        if self.pending_limit == 0:
            return fact
        self._pending.append(fact)
        if len(self._pending) > self.pending_limit:
            return self._pending.popleft()
        return None

    def take_pending(self) -> list[RelationshipFact]:
        waiting = list(self._pending)
        self._pending.clear()
        return waiting

    def discard(self) -> int:
        """Drop the entity map and any pending facts; return how many were pending."""

        leftover = len(self._pending)
        if leftover:
            log.debug("Session %s discarding %d pending relationship(s)", self.session_id, leftover)
        self._pending.clear()
        self.entity_ids.clear()
        return leftover
