"""Field-level merge rules for two records of the same entity."""

from __future__ import annotations

from silent_partners.domain.model import Entity, clamp_importance


def merge_entities(existing: Entity, incoming: Entity) -> Entity:
    """Combine ``incoming`` into ``existing`` without dropping data.

    - ``id`` of ``existing`` survives
    - the longer name wins, ties keep ``existing``
    - a non-empty incoming description replaces the existing one
    - a set incoming type replaces the existing one
    - importance is the maximum of both
    - aliases collect both alias sets plus both names; sources are unioned

    The result is idempotent: merging the same ``incoming`` twice changes nothing.
    """

    name = incoming.name if len(incoming.name) > len(existing.name) else existing.name
    return Entity(
        id=existing.id,
        name=name,
        type=incoming.type if incoming.type.is_set else existing.type,
        description=incoming.description or existing.description,
        importance=clamp_importance(max(existing.importance, incoming.importance)),
        aliases=existing.aliases | incoming.aliases | {existing.name, incoming.name},
        sources=existing.sources | incoming.sources,
    )
