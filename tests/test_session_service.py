"""
Tests for the document store and the per-session discovery service.
"""

import asyncio
from datetime import date, datetime, timedelta

import pytest
from conftest import FakeStrategy

from server.core.DocumentStore import DocumentStore
from server.core.SessionService import SessionNotFoundError, SessionService
from services.discovery.models import DisplayMode
from shared.models.config import SearchThresholds
from shared.models.document import Document, FilterCategory


@pytest.fixture
def store(helper_config) -> DocumentStore:
    return DocumentStore(helper_config=helper_config)


@pytest.fixture
def service(helper_config, matcher, store) -> SessionService:
    return SessionService(
        helper_config=helper_config,
        document_store=store,
        matcher=matcher,
        thresholds=SearchThresholds(),
        strategy=FakeStrategy(helper_config, result=["b"]),
    )


class TestDocumentStore:
    def test_most_recent_first_and_undated_last(self, store):
        documents = [
            Document(id="a", uploaded_at=datetime(2024, 1, 1)),
            Document(id="undated"),
            Document(id="b", uploaded_at=datetime(2024, 6, 1)),
        ]
        assert [doc.id for doc in store.replace(1, documents)] == ["b", "a", "undated"]

    def test_duplicate_ids_keep_last(self, store):
        snapshot = store.replace(1, [Document(id="a", owner="old"), Document(id="a", owner="new")])
        assert [(doc.id, doc.owner) for doc in snapshot] == [("a", "new")]

    def test_owners_are_separate(self, store):
        store.replace(1, [Document(id="a")])
        assert store.get_documents(2) == []
        assert [doc.id for doc in store.get_documents(1)] == ["a"]


class TestSessionService:
    def test_sessions_do_not_share_state(self, service):
        service.do_update_documents(1, [Document(id="a", type="Passport"), Document(id="b", type="Invoice")])
        first = service.create_session(1)
        second = service.create_session(1)
        service.toggle_filter(first, FilterCategory.TYPE, "Invoice")
        assert [doc.id for doc in service.get_display_state(first).documents] == ["b"]
        assert [doc.id for doc in service.get_display_state(second).documents] == ["a", "b"]

    def test_update_only_touches_owner_sessions(self, service):
        mine = service.create_session(1)
        theirs = service.create_session(2)
        assert service.do_update_documents(1, [Document(id="a")]) == 1
        assert len(service.get_engine(mine).get_documents()) == 1
        assert service.get_engine(theirs).get_documents() == []

    def test_unknown_session(self, service):
        with pytest.raises(SessionNotFoundError):
            service.get_engine("nope")
        with pytest.raises(SessionNotFoundError):
            service.delete_session("nope")

    def test_ai_search_through_configured_strategy(self, service):
        service.do_update_documents(1, [Document(id="a"), Document(id="b")])
        session_id = service.create_session(1)
        state = asyncio.run(service.do_ai_search(session_id, "the second one"))
        assert state.mode == DisplayMode.AI_SEARCH
        assert [doc.id for doc in state.documents] == ["b"]

    def test_insights_use_canonical_types(self, service):
        today = date.today()
        service.do_update_documents(
            1,
            [
                Document(id="a", type="Passport", expiry=today + timedelta(days=400)),
                Document(id="b", type="PASSPORT"),
                Document(id="c", type="Visa"),
            ],
        )
        insights = service.get_insights(service.create_session(1))
        assert [(c.name, c.total) for c in insights.type_counts] == [("Passport", 2), ("Visa", 1)]
        assert insights.expiring_soon == []
