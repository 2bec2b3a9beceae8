"""Filter engine: composes categorical filters, manual search and AI search results.

One instance holds the complete discovery state of a single session:

  unfiltered: the collection under the active categorical filters.
  manual_search: the same, narrowed and ranked by a fuzzy document search.
  ai_search: the ids returned by an intelligent search strategy, verbatim.

Exactly one mode is active. Toggling a filter or submitting a manual search
leaves ai_search; starting an AI search clears filters and the manual query.
Every transition away from an in-flight AI search bumps the request
generation, so a late oracle answer can no longer overwrite newer state.
"""

from collections.abc import Iterable

from services.discovery.Canonicalizer import CanonicalRegistry, Canonicalizer, build_registries
from services.discovery.intelligent.IntelligentSearchStrategy import IntelligentSearchError, IntelligentSearchStrategy
from services.discovery.matcher.MatcherInterface import MatcherInterface
from services.discovery.models import DisplayMode, DisplayState
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import SearchThresholds
from shared.models.document import Document, FilterCategory

DOCUMENT_SEARCH_KEYS = ["owner", "company", "type", "keywords", "summary", "text_content", "country"]
AI_SEARCH_FAILED_NOTICE = "AI search failed: could not perform the intelligent search. Please try a different query."


class FilterEngine:
    """Discovery state of one session and the resolution of its displayed document list."""

    def __init__(
        self,
        helper_config: HelperConfig,
        matcher: MatcherInterface,
        thresholds: SearchThresholds | None = None,
        documents: Iterable[Document] | None = None,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._matcher = matcher
        self._thresholds = thresholds or SearchThresholds()
        self._canonicalizer = Canonicalizer(matcher=matcher, threshold=self._thresholds.canonical)

        self._documents: list[Document] = []
        self._registries: dict[FilterCategory, CanonicalRegistry] = build_registries([], self._canonicalizer)

        self._active_filters: dict[FilterCategory, set[str]] = {category: set() for category in FilterCategory}
        self._mode = DisplayMode.UNFILTERED
        self._manual_query = ""
        self._ai_query: str | None = None
        self._ai_result_ids: list[str] = []
        self._is_searching = False
        self._notice: str | None = None
        self._generation = 0

        if documents is not None:
            self.set_documents(documents)

    ##########################################
    ############# DOCUMENT FEED ##############
    ##########################################

    def set_documents(self, documents: Iterable[Document]) -> None:
        """Replace the collection and rebuild the canonical registries.

        Args:
            documents (Iterable[Document]): The full current collection in display order.
        """
        self._documents = list(documents)
        self._registries = build_registries(self._documents, self._canonicalizer)
        self.logging.debug(
            "Filter engine refreshed: %d document(s), %s",
            len(self._documents),
            ", ".join("%s=%d" % (category.value, len(registry)) for category, registry in self._registries.items()),
        )

    def get_documents(self) -> list[Document]:
        return list(self._documents)

    ##########################################
    ################ GETTER ##################
    ##########################################

    def get_mode(self) -> DisplayMode:
        return self._mode

    def get_manual_query(self) -> str:
        return self._manual_query

    def get_active_filters(self) -> dict[FilterCategory, list[str]]:
        """Selected values per category, sorted. An empty list means no constraint."""
        return {category: sorted(values) for category, values in self._active_filters.items()}

    def has_active_filters(self) -> bool:
        return any(self._active_filters.values())

    def is_searching(self) -> bool:
        return self._is_searching

    def get_notice(self) -> str | None:
        return self._notice

    def get_registry(self, category: FilterCategory) -> CanonicalRegistry:
        return self._registries[category]

    def get_filter_options(self) -> dict[FilterCategory, list[str]]:
        """Sorted canonical options for every category."""
        return {category: registry.get_options() for category, registry in self._registries.items()}

    def get_category_options(self, category: FilterCategory | str, search: str | None = None) -> list[str]:
        """Options of one category, optionally narrowed by a fuzzy sub-search.

        Args:
            category (FilterCategory | str): The filter category.
            search (str | None): Text typed into the category's search box.

        Returns:
            list[str]: Sorted options, or the matching options best match first when searching.

        Raises:
            ValueError: If the category is unknown.
        """
        options = self._registries[FilterCategory(category)].get_options()
        if not search or not search.strip():
            return options
        return [match.item for match in self._matcher.search(search, options, threshold=self._thresholds.options)]

    ##########################################
    ############## TRANSITIONS ###############
    ##########################################

    def toggle_filter(self, category: FilterCategory | str, value: str) -> None:
        """Select or deselect a canonical value of a category.

        Leaves ai_search mode; a manual query already in effect is kept.

        Raises:
            ValueError: If the category is unknown or the value is blank.
        """
        category = FilterCategory(category)
        value = value.strip() if isinstance(value, str) else ""
        if not value:
            raise ValueError("Filter value must be a non-empty string.")

        selected = self._active_filters[category]
        if value in selected:
            selected.remove(value)
        else:
            selected.add(value)

        self._leave_ai_search()
        self._mode = DisplayMode.MANUAL_SEARCH if self._manual_query else DisplayMode.UNFILTERED
        self.logging.debug("Filter toggled: %s=%r (now %d selected)", category.value, value, len(selected))

    def submit_search(self, query: str) -> None:
        """Run a manual fuzzy search. A blank query falls back to unfiltered."""
        self._leave_ai_search()
        self._manual_query = (query or "").strip()
        self._mode = DisplayMode.MANUAL_SEARCH if self._manual_query else DisplayMode.UNFILTERED
        self.logging.debug("Manual search submitted: %r", self._manual_query)

    def clear_filters(self) -> None:
        """Reset categorical filters, manual query and AI results."""
        for values in self._active_filters.values():
            values.clear()
        self._manual_query = ""
        self._leave_ai_search()
        self._notice = None
        self._mode = DisplayMode.UNFILTERED

    def dismiss_notice(self) -> None:
        self._notice = None

    ##########################################
    ############### AI SEARCH ################
    ##########################################

    def begin_ai_search(self, query: str) -> int:
        """Enter ai_search with empty results and return the request generation token.

        Clears all categorical filters and the manual query.

        Raises:
            ValueError: If the query is blank.
        """
        if not query or not query.strip():
            raise ValueError("AI search query must not be blank.")
        for values in self._active_filters.values():
            values.clear()
        self._manual_query = ""
        self._generation += 1
        self._mode = DisplayMode.AI_SEARCH
        self._ai_query = query.strip()
        self._ai_result_ids = []
        self._is_searching = False
        self._notice = None
        return self._generation

    def apply_ai_results(self, token: int, document_ids: list[str]) -> bool:
        """Store the strategy's ranked ids if the request is still current.

        Returns:
            bool: False if the response was stale and got discarded.
        """
        if token != self._generation or self._mode != DisplayMode.AI_SEARCH:
            self.logging.debug("Discarding stale AI search response (token %d, current %d).", token, self._generation)
            return False
        self._ai_result_ids = list(document_ids)
        self._is_searching = False
        return True

    def fail_ai_search(self, token: int, error: Exception) -> bool:
        """Record a transient oracle failure: empty AI results plus a dismissable notice.

        Returns:
            bool: False if the request was stale and the failure got ignored.
        """
        if token != self._generation or self._mode != DisplayMode.AI_SEARCH:
            self.logging.debug("Ignoring failure of stale AI search (token %d): %s", token, error)
            return False
        self._ai_result_ids = []
        self._is_searching = False
        self._notice = AI_SEARCH_FAILED_NOTICE
        return True

    async def do_ai_search(self, query: str, strategy: IntelligentSearchStrategy) -> DisplayState:
        """Run an intelligent search and apply its result.

        With nothing to search the result is an empty ai_search right away,
        without a pending state and without contacting the strategy. Any
        strategy failure ends as an empty ai_search with a notice, and the
        pending flag never outlives the call.

        Args:
            query (str): The natural-language query.
            strategy (IntelligentSearchStrategy): The configured strategy.

        Returns:
            DisplayState: The state after the search completed (or was superseded).
        """
        token = self.begin_ai_search(query)
        projections = [doc.to_projection() for doc in self._documents if not doc.is_processing]
        if not projections:
            self.apply_ai_results(token, [])
            return self.get_display_state()

        self._is_searching = True
        try:
            document_ids = await strategy.do_search(self._ai_query, projections)
        except IntelligentSearchError as e:
            self.logging.warning("AI search for %r failed: %s", self._ai_query, e)
            self.fail_ai_search(token, e)
        except Exception as e:
            self.logging.exception("AI search for %r failed unexpectedly: %s", self._ai_query, e)
            self.fail_ai_search(token, e)
        else:
            self.apply_ai_results(token, document_ids)
        return self.get_display_state()

    def _leave_ai_search(self) -> None:
        if self._mode == DisplayMode.AI_SEARCH or self._is_searching:
            self._generation += 1
        self._ai_query = None
        self._ai_result_ids = []
        self._is_searching = False

    ##########################################
    ############### RESOLUTION ###############
    ##########################################

    def get_displayed_documents(self) -> list[Document]:
        """Resolve the document list for the current mode."""
        if self._mode == DisplayMode.AI_SEARCH:
            by_id = {doc.id: doc for doc in self._documents}
            return [by_id[document_id] for document_id in self._ai_result_ids if document_id in by_id]

        filtered = self._documents
        if self.has_active_filters():
            filtered = [doc for doc in filtered if self._passes_filters(doc)]

        if self._mode == DisplayMode.MANUAL_SEARCH and self._manual_query:
            searchable = [doc for doc in filtered if not doc.is_processing]
            matches = self._matcher.search(
                self._manual_query,
                searchable,
                keys=DOCUMENT_SEARCH_KEYS,
                threshold=self._thresholds.documents,
            )
            filtered = [match.item for match in matches]

        return list(filtered)

    def get_display_state(self) -> DisplayState:
        return DisplayState(
            mode=self._mode,
            documents=self.get_displayed_documents(),
            is_searching=self._is_searching,
            notice=self._notice,
            manual_query=self._manual_query,
            ai_query=self._ai_query,
            active_filters=self.get_active_filters(),
        )

    def _passes_filters(self, document: Document) -> bool:
        """AND across categories with a selection, OR within a category's selected values."""
        if document.is_processing:
            return False
        for category, selected in self._active_filters.items():
            if not selected:
                continue
            value = document.get_filter_value(category)
            if not value:
                return False
            if not self._matcher.search(value, sorted(selected), threshold=self._thresholds.canonical):
                return False
        return True
