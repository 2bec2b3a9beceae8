from pydantic import BaseModel

from services.discovery.models import DisplayMode, DisplayState
from shared.models.document import Document, FilterCategory


class FeedResponse(BaseModel):
    status: str
    owner_id: int
    documents: int
    sessions_refreshed: int


class SessionResponse(BaseModel):
    session_id: str
    owner_id: int
    documents: int


class DisplayResponse(BaseModel):
    mode: DisplayMode
    documents: list[Document]
    total: int
    is_searching: bool
    notice: str | None
    manual_query: str
    ai_query: str | None
    active_filters: dict[FilterCategory, list[str]]

    @classmethod
    def from_state(cls, state: DisplayState) -> "DisplayResponse":
        return cls(
            mode=state.mode,
            documents=state.documents,
            total=len(state.documents),
            is_searching=state.is_searching,
            notice=state.notice,
            manual_query=state.manual_query,
            ai_query=state.ai_query,
            active_filters=state.active_filters,
        )


class FilterOptionsResponse(BaseModel):
    options: dict[FilterCategory, list[str]]
    active: dict[FilterCategory, list[str]]


class CategoryOptionsResponse(BaseModel):
    category: FilterCategory
    search: str | None
    options: list[str]
