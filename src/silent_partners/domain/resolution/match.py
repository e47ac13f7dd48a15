"""Entity matching strategies.

Responsibilities of this stage:
- decide whether an incoming entity describes an entity already in a pool
- stay read-only: merging is the merger's job

The default strategy is a deliberately conservative set of explainable name
heuristics. A missed match only costs a duplicate node the investigator can
merge later; a wrong match fuses two real-world identities.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from .contracts import MatchKind
from .normalize import normalize_name

if TYPE_CHECKING:
    from collections.abc import Iterable

    from silent_partners.domain.model import Entity

log = logging.getLogger(__name__)

_MIN_ABBREVIATION_LENGTH = 3


class EntityMatcher(Protocol):
    """Find the pool entity that represents the same thing as ``candidate``."""

    def find_match(self, candidate: Entity, pool: Iterable[Entity]) -> Entity | None: ...


def types_compatible(left: Entity, right: Entity) -> bool:
    """Two set types that differ veto any name-based match."""

    if left.type.is_set and right.type.is_set:
        return left.type is right.type
    return True


def initials(normalized: str) -> str:
    return "".join(word[0] for word in normalized.split())


def match_kind(left: str, right: str) -> MatchKind | None:
    """Return the first heuristic under which two *normalized* names match."""

    if not left or not right:
        return None
    if left == right:
        return MatchKind.EXACT
    if left in right or right in left:
        return MatchKind.CONTAINMENT
    if _is_abbreviation(left, right) or _is_abbreviation(right, left):
        return MatchKind.ABBREVIATION
    return None


def _is_abbreviation(long_form: str, short_form: str) -> bool:
    letters = initials(long_form)
    return len(letters) >= _MIN_ABBREVIATION_LENGTH and letters == short_form


@dataclass(slots=True, frozen=True)
class HeuristicNameMatcher:
    """Exact, containment and abbreviation matching on normalized names."""

    def find_match(self, candidate: Entity, pool: Iterable[Entity]) -> Entity | None:
        candidate_name = normalize_name(candidate.name)
        for entity in pool:
            if not types_compatible(candidate, entity):
                continue
            kind = match_kind(candidate_name, normalize_name(entity.name))
            if kind is not None:
                log.debug(
                    "Matched %r to %r (%s, id=%s)", candidate.name, entity.name, kind, entity.id
                )
                return entity
        return None


@dataclass(slots=True, frozen=True)
class ExactNameMatcher:
    """Stricter strategy: only identical normalized names match."""

    def find_match(self, candidate: Entity, pool: Iterable[Entity]) -> Entity | None:
        candidate_name = normalize_name(candidate.name)
        for entity in pool:
            if not types_compatible(candidate, entity):
                continue
            if normalize_name(entity.name) == candidate_name:
                return entity
        return None


_MATCHERS: dict[str, type[HeuristicNameMatcher] | type[ExactNameMatcher]] = {
    "heuristic": HeuristicNameMatcher,
    "exact": ExactNameMatcher,
}


def build_matcher(name: str = "heuristic") -> EntityMatcher:
    """Return the matcher registered under ``name``."""

    try:
        return _MATCHERS[name.strip().lower()]()
    except KeyError as exc:
        known = ", ".join(sorted(_MATCHERS))
        raise ValueError(f"Unknown matcher {name!r} (known: {known})") from exc
