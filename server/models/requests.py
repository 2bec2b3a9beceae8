from pydantic import BaseModel, field_validator

from shared.models.document import Document, FilterCategory


def _require_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class DocumentFeedRequest(BaseModel):
    owner_id: int
    documents: list[Document]


class CreateSessionRequest(BaseModel):
    owner_id: int


class FilterToggleRequest(BaseModel):
    category: FilterCategory
    value: str

    @field_validator("value")
    @classmethod
    def _value_not_blank(cls, value: str) -> str:
        return _require_text(value)


class SearchRequest(BaseModel):
    query: str = ""


class AiSearchRequest(BaseModel):
    query: str

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        return _require_text(value)
