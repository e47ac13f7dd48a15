"""Pydantic models for the shareable JSON graph document."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class DocumentBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class DocumentEntity(DocumentBaseModel):
    id: str
    name: str
    type: str | None = None
    description: str | None = None
    importance: float | None = None
    aliases: list[str] = Field(default_factory=list[str])
    sources: list[str] = Field(default_factory=list[str])

    @field_validator("id", "name")
    @classmethod
    def _require_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped

    _normalize_optional = field_validator("type", "description", mode="before")(_blank_to_none)


class DocumentRelationship(DocumentBaseModel):
    source: str
    target: str
    id: str | None = None
    type: str | None = None
    label: str | None = None
    status: str | None = None
    confidence: float | None = Field(
        default=None,
        validation_alias=AliasChoices("confidence", "strength"),
    )

    _normalize_optional = field_validator("id", "type", "label", "status", mode="before")(
        _blank_to_none
    )


class DocumentInvestigationContext(DocumentBaseModel):
    topic: str = ""
    domain: str = ""
    focus: str = ""
    key_questions: list[str] = Field(default_factory=list[str], alias="keyQuestions")


class GraphDocument(DocumentBaseModel):
    """Top-level document: ``{"title", "description", "entities", "relationships"}``."""

    title: str | None = None
    description: str | None = None
    entities: list[DocumentEntity]
    relationships: list[DocumentRelationship]
    investigation_context: DocumentInvestigationContext | None = Field(
        default=None,
        alias="investigationContext",
    )
