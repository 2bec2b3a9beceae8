"""Pydantic models shared by the discovery components."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.models.document import Document, FilterCategory


class MatchResult(BaseModel):
    """A single fuzzy match.

    Attributes:
        item (Any): The matched candidate, returned as passed in (string or record).
        score (float): Dissimilarity in [0, 1], lower is better.
        index (int): Position of the candidate in the searched sequence.
    """

    item: Any
    score: float
    index: int


class DisplayMode(str, Enum):
    """Where the displayed document list comes from. Exactly one is active."""

    UNFILTERED = "unfiltered"
    MANUAL_SEARCH = "manual_search"
    AI_SEARCH = "ai_search"


class SearchCriteria(BaseModel):
    """Structured criteria extracted from a natural-language query."""

    owner: str | None = None
    document_type: str | None = Field(default=None, alias="documentType")
    country: str | None = None
    keywords: list[str] = []

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("owner", "document_type", "country", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("keywords", mode="before")
    @classmethod
    def _null_keywords(cls, value):
        return [] if value is None else value

    def is_empty(self) -> bool:
        return not (self.owner or self.document_type or self.country or self.keywords)


class DisplayState(BaseModel):
    """Resolved view of a discovery session.

    An empty ``documents`` list with ``is_searching`` set means an AI search
    is still in flight, without it the result is a genuine "no match".
    """

    mode: DisplayMode
    documents: list[Document]
    is_searching: bool = False
    notice: str | None = None
    manual_query: str = ""
    ai_query: str | None = None
    active_filters: dict[FilterCategory, list[str]] = {}
