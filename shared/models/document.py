"""Pydantic models for document data.

Hierarchy:
  Document: a user's document with its AI-extracted metadata, as pushed by the feed.
  DocumentProjection: the reduced view of a Document sent to the extraction oracle.
  FilterCategory: the document fields that act as categorical filter dimensions.
"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FilterCategory(str, Enum):
    """Document fields the user can filter on. Values match the Document attribute names."""

    OWNER = "owner"
    TYPE = "type"
    COMPANY = "company"
    COUNTRY = "country"


class Document(BaseModel):
    """A single document of the collection, consumed read-only.

    Field aliases follow the camelCase names used by the document feed;
    snake_case names are accepted as well.

    Filter dimensions (owner, type, company, country) are either a non-empty
    string or None: blank values are dropped on validation so they never end
    up in a filter vocabulary.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    owner: str | None = None
    company: str | None = None
    country: str | None = None
    type: str | None = None
    keywords: list[str] = []
    summary: str | None = None
    text_content: str | None = Field(default=None, alias="textContent")
    expiry: date | None = None
    uploaded_at: datetime | None = Field(default=None, alias="uploadedAt")
    is_processing: bool = Field(default=False, alias="isProcessing")

    @field_validator("owner", "company", "country", "type", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("keywords", mode="before")
    @classmethod
    def _clean_keywords(cls, value):
        if value is None:
            return []
        return [kw.strip() for kw in value if isinstance(kw, str) and kw.strip()]

    def get_filter_value(self, category: FilterCategory) -> str | None:
        """Return the raw value of a filter dimension, or None if absent."""
        return getattr(self, category.value)

    def to_projection(self) -> "DocumentProjection":
        """Reduce the document to the fields the extraction oracle needs."""
        return DocumentProjection(
            id=self.id,
            owner=self.owner or "",
            type=self.type or "",
            company=self.company,
            country=self.country,
            summary=self.summary,
            keywords=list(self.keywords),
        )


class DocumentProjection(BaseModel):
    """Compact document view sent to the extraction oracle."""

    id: str
    owner: str
    type: str
    company: str | None = None
    country: str | None = None
    summary: str | None = None
    keywords: list[str] = []
