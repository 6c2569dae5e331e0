"""Post, document and metadata records held in the store and persisted in the snapshot"""

from datetime import date as calendar_date
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    field_validator,
    model_serializer,
)


# Zero timestamp found in legacy snapshots
_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


def _is_empty(value: Any) -> bool:
    return value is None or value is False or (isinstance(value, (str, list, dict)) and not value)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes; map the zero time to None."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return None if value == _ZERO_TIME else value


class Record(BaseModel):
    """Base model whose serialized form omits empty fields, except those in keep_fields."""
    model_config = ConfigDict(populate_by_name=True)

    keep_fields: ClassVar[frozenset[str]] = frozenset()

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        return {k: v for k, v in data.items() if k in self.keep_fields or not _is_empty(v)}


class DocumentType(str, Enum):
    """Source format of a document"""
    unknown = "unknown"
    markdown = "markdown"
    html = "html"


class Metadata(Record):
    """Authorial facts embedded in a document's front matter."""
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    keep_fields: ClassVar[frozenset[str]] = frozenset({"id"})

    id: str = ""
    title: str = ""
    author: str = ""
    description: str = ""
    date: Optional[datetime] = None
    path: str = ""
    package_ref: str = Field(default="", validation_alias=AliasChoices("package_ref", "go_package"))
    canonical: str = ""
    hidden: bool = False

    @classmethod
    def field_keys(cls) -> set[str]:
        """All front matter keys this model reads, aliases included."""
        return set(cls.model_fields) | {"go_package"}

    @field_validator("id", "title", "author", "description", "path", "package_ref", "canonical", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("hidden", mode="before")
    @classmethod
    def _none_to_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("date", mode="before")
    @classmethod
    def _date_to_datetime(cls, value: Any) -> Any:
        if value in (None, ""):
            return None
        if isinstance(value, calendar_date) and not isinstance(value, datetime):
            return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
        return value

    @field_validator("date")
    @classmethod
    def _date_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)


class Document(Record):
    """One language-specific rendering of a post."""
    keep_fields: ClassVar[frozenset[str]] = frozenset({"type", "metadata"})

    type: DocumentType = DocumentType.unknown
    raw_source: str = Field(default="", validation_alias=AliasChoices("raw_source", "markdown"))
    rendered_html: str = Field(default="", validation_alias=AliasChoices("rendered_html", "html"))
    metadata: Metadata = Field(default_factory=Metadata)

    @field_validator("type", mode="before")
    @classmethod
    def _type_from_index(cls, value: Any) -> Any:
        # Legacy snapshots store the type as its enum ordinal
        if isinstance(value, int) and not isinstance(value, bool):
            members = list(DocumentType)
            return members[value] if 0 <= value < len(members) else DocumentType.unknown
        return value


class Post(Record):
    """Durable content identity keyed by Metadata.id."""
    keep_fields: ClassVar[frozenset[str]] = frozenset({"id", "file_path", "url_path", "content_hash"})

    id: str
    file_path: str = ""
    url_path: str = Field(default="", validation_alias=AliasChoices("url_path", "path"))
    content_hash: str = Field(default="", validation_alias=AliasChoices("content_hash", "hash"))
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    main: Optional[Document] = None
    translated: dict[str, Document] = Field(default_factory=dict)

    @field_validator("translated", mode="before")
    @classmethod
    def _null_translations(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("created_at", "updated_at")
    @classmethod
    def _timestamps_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)


class Snapshot(BaseModel):
    """Decoded payload of the persisted snapshot file."""
    posts: dict[str, Post] = Field(default_factory=dict)

    @field_validator("posts", mode="before")
    @classmethod
    def _null_posts(cls, value: Any) -> Any:
        return {} if value is None else value
