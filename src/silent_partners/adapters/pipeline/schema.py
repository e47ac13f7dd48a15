"""Pydantic models describing the extraction pipeline's server-sent events."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class PipelineBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PipelineEntity(PipelineBaseModel):
    name: str
    id: str | None = None
    type: str | None = None
    description: str | None = None
    importance: float | None = None
    aliases: list[str] = Field(default_factory=list[str])
    sources: list[str] = Field(default_factory=list[str])

    _normalize_optional = field_validator("id", "type", "description", mode="before")(
        _blank_to_none
    )


class PipelineRelationship(PipelineBaseModel):
    source: str
    target: str
    id: str | None = None
    type: str | None = None
    label: str | None = None
    status: str | None = None
    confidence: float | None = None

    _normalize_optional = field_validator("type", "label", "status", mode="before")(
        _blank_to_none
    )


class PipelineEventData(PipelineBaseModel):
    message: str | None = None
    phase: str | None = None
    progress: float | None = None

    entity: PipelineEntity | None = None
    # validated one by one in the translator
    entities: list[object] | None = None
    is_new: bool = True
    merged_with: str | None = None

    relationship: PipelineRelationship | None = None
    new_entity: str | None = None
    existing_entity: str | None = None

    error_type: str | None = None
    recoverable: bool = False
    suggestion: str | None = None


class PipelineEvent(PipelineBaseModel):
    """One ``data:`` payload of the event stream: ``{"type": ..., "data": {...}}``."""

    type: str
    data: PipelineEventData = Field(default_factory=PipelineEventData)

    @field_validator("data", mode="before")
    @classmethod
    def _null_data(cls, value: object) -> object:
        return {} if value is None else value
