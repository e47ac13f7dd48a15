"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    PERSON = "person"
    CORPORATION = "corporation"
    ORGANIZATION = "organization"
    FINANCIAL = "financial"
    GOVERNMENT = "government"
    EVENT = "event"
    LOCATION = "location"
    ASSET = "asset"
    UNKNOWN = "unknown"

    @property
    def is_set(self) -> bool:
        """``unknown`` is how producers say "no type"."""
        return self is not EntityType.UNKNOWN

    @classmethod
    def coerce(cls, value: object) -> EntityType:
        """Map loosely typed producer values onto the closed set."""

        if isinstance(value, EntityType):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().casefold())
            except ValueError:
                return cls.UNKNOWN
        return cls.UNKNOWN


class RelationshipStatus(StrEnum):
    CONFIRMED = "confirmed"
    SUSPECTED = "suspected"
    FORMER = "former"

    @classmethod
    def coerce(cls, value: object) -> RelationshipStatus:
        if isinstance(value, RelationshipStatus):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().casefold())
            except ValueError:
                return cls.CONFIRMED
        return cls.CONFIRMED
