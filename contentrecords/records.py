"""Typed representation of parsed content records."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class RecordKind(str, Enum):
    """Category of a record, derived from its metadata keys."""

    PUBLICATION = "publication"
    ARTICLE = "article"
    GENERIC = "generic"


def freeze(value: Any) -> Any:
    """Return a read-only copy of a metadata value."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of `freeze`: plain dicts and lists for serializers."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [thaw(item) for item in value]
    return value


class ContentRecord(BaseModel):
    """Front-matter metadata plus the unparsed body of one content file."""

    model_config = ConfigDict(frozen=True)

    metadata: Mapping[str, Any] = Field(
        default_factory=dict, description="Metadata keys in source order."
    )
    body: str = Field(default="", description="Text following the metadata block.")
    source: Optional[str] = Field(
        default=None,
        description="Path of the file the record was read from.",
        exclude=True,
    )

    @field_validator("metadata")
    def _freeze_metadata(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return freeze(value)

    @field_serializer("metadata")
    def _serialize_metadata(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return thaw(value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContentRecord):
            return NotImplemented
        return self.metadata == other.metadata and self.body == other.body

    def __hash__(self) -> int:
        return hash((self.body, tuple(self.metadata)))

    @property
    def has_metadata(self) -> bool:
        return bool(self.metadata)

    @property
    def title(self) -> Optional[str]:
        value = self.metadata.get("title")
        return None if value is None else str(value)

    @property
    def kind(self) -> RecordKind:
        if "layout" in self.metadata:
            return RecordKind.ARTICLE
        if "type" in self.metadata:
            return RecordKind.PUBLICATION
        return RecordKind.GENERIC
