"""Session service: owns one FilterEngine per discovery session.

Sessions are bound to an owner. A feed update for that owner refreshes the
collection of every one of its sessions; filters, queries and AI results of
a session are never shared with another.
"""

import uuid

from server.core.DocumentStore import DocumentStore
from services.discovery.FilterEngine import FilterEngine
from services.discovery.insights import CollectionInsights, build_insights, get_today
from services.discovery.intelligent.IntelligentSearchStrategy import IntelligentSearchStrategy
from services.discovery.matcher.MatcherInterface import MatcherInterface
from services.discovery.models import DisplayState
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import SearchThresholds
from shared.models.document import Document, FilterCategory


class SessionNotFoundError(LookupError):
    """Raised for an unknown or already deleted session id."""


class DiscoverySession:
    def __init__(self, session_id: str, owner_id: int, engine: FilterEngine) -> None:
        self.session_id = session_id
        self.owner_id = owner_id
        self.engine = engine


class SessionService:
    """Creates, looks up and refreshes discovery sessions."""

    def __init__(
        self,
        helper_config: HelperConfig,
        document_store: DocumentStore,
        matcher: MatcherInterface,
        thresholds: SearchThresholds,
        strategy: IntelligentSearchStrategy,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self._document_store = document_store
        self._matcher = matcher
        self._thresholds = thresholds
        self._strategy = strategy
        self._sessions: dict[str, DiscoverySession] = {}

        self._timezone = helper_config.get_string_val("TIMEZONE", default="Europe/Berlin")
        self._expiry_window_days = int(helper_config.get_number_val("INSIGHTS_EXPIRY_WINDOW_DAYS", default=90))

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    def create_session(self, owner_id: int) -> str:
        """Open a session on the owner's current snapshot and return its id."""
        session_id = uuid.uuid4().hex
        engine = FilterEngine(
            helper_config=self._helper_config,
            matcher=self._matcher,
            thresholds=self._thresholds,
            documents=self._document_store.get_documents(owner_id),
        )
        self._sessions[session_id] = DiscoverySession(session_id=session_id, owner_id=owner_id, engine=engine)
        self.logging.info("Session created — session_id=%s owner_id=%d", session_id, owner_id)
        return session_id

    def delete_session(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(session_id)
        self.logging.info("Session deleted — session_id=%s", session_id)

    def get_session(self, session_id: str) -> DiscoverySession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def get_engine(self, session_id: str) -> FilterEngine:
        return self.get_session(session_id).engine

    ##########################################
    ################ FEED ####################
    ##########################################

    def do_update_documents(self, owner_id: int, documents: list[Document]) -> int:
        """Apply a feed push: store the snapshot and refresh the owner's sessions.

        Returns:
            int: Number of sessions refreshed.
        """
        snapshot = self._document_store.replace(owner_id, documents)
        refreshed = 0
        for session in self._sessions.values():
            if session.owner_id == owner_id:
                session.engine.set_documents(snapshot)
                refreshed += 1
        self.logging.debug("Feed update for owner_id=%d refreshed %d session(s).", owner_id, refreshed)
        return refreshed

    ##########################################
    ############### DISCOVERY ################
    ##########################################

    def get_display_state(self, session_id: str) -> DisplayState:
        return self.get_engine(session_id).get_display_state()

    def toggle_filter(self, session_id: str, category: FilterCategory, value: str) -> DisplayState:
        engine = self.get_engine(session_id)
        engine.toggle_filter(category, value)
        return engine.get_display_state()

    def clear_filters(self, session_id: str) -> DisplayState:
        engine = self.get_engine(session_id)
        engine.clear_filters()
        return engine.get_display_state()

    def submit_search(self, session_id: str, query: str) -> DisplayState:
        engine = self.get_engine(session_id)
        engine.submit_search(query)
        return engine.get_display_state()

    async def do_ai_search(self, session_id: str, query: str) -> DisplayState:
        """Run the configured intelligent search strategy for a session.

        Oracle failures end as an empty ai_search with a notice, never as an error.
        """
        engine = self.get_engine(session_id)
        self.logging.info(
            "AI search — session_id=%s strategy=%s query=%r",
            session_id,
            self._strategy.get_strategy_name(),
            query[:80],
        )
        state = await engine.do_ai_search(query, self._strategy)
        self.logging.info(
            "AI search complete — session_id=%s results=%d failed=%s",
            session_id,
            len(state.documents),
            state.notice is not None,
        )
        return state

    def dismiss_notice(self, session_id: str) -> DisplayState:
        engine = self.get_engine(session_id)
        engine.dismiss_notice()
        return engine.get_display_state()

    def get_insights(self, session_id: str) -> CollectionInsights:
        """Type breakdown and expiring documents over the session's full collection."""
        engine = self.get_engine(session_id)
        return build_insights(
            engine.get_documents(),
            today=get_today(self._timezone),
            window_days=self._expiry_window_days,
            type_registry=engine.get_registry(FilterCategory.TYPE),
        )
