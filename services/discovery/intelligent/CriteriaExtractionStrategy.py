from services.discovery.intelligent.IntelligentSearchStrategy import IntelligentSearchStrategy
from services.discovery.intelligent.prompts import CRITERIA_EXTRACTION_SYSTEM_PROMPT, CRITERIA_EXTRACTION_USER_PROMPT
from services.discovery.matcher.MatcherInterface import MatcherInterface
from services.discovery.models import SearchCriteria
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import SearchThresholds
from shared.models.document import DocumentProjection

RESIDUAL_KEYWORD_KEYS = ["owner", "company", "type", "keywords", "summary", "country"]


class CriteriaExtractionStrategy(IntelligentSearchStrategy):
    """Extracts structured criteria from the query alone and applies them locally.

    Only the query travels to the oracle. The extracted owner, document type
    and country act like categorical filter selections; residual keywords
    then rank the survivors like a manual search.
    """

    def __init__(
        self,
        helper_config: HelperConfig,
        llm_client: LLMClientInterface,
        matcher: MatcherInterface,
        thresholds: SearchThresholds,
    ) -> None:
        super().__init__(helper_config=helper_config, llm_client=llm_client)
        self._matcher = matcher
        self._thresholds = thresholds

    def _get_strategy_name(self) -> str:
        return "CriteriaExtraction"

    ##########################################
    ################ SEARCH ##################
    ##########################################

    async def do_extract_criteria(self, query: str) -> SearchCriteria:
        """Ask the oracle for owner, document type, country and keywords in a query.

        Raises:
            IntelligentSearchError: If the oracle fails or answers malformed JSON.
        """
        messages = [
            {"role": "system", "content": CRITERIA_EXTRACTION_SYSTEM_PROMPT},
            {"role": "user", "content": CRITERIA_EXTRACTION_USER_PROMPT.format(query=query)},
        ]
        criteria = await self._do_oracle_call(messages, SearchCriteria)
        self.logging.info(
            "CriteriaExtraction: owner=%r type=%r country=%r keywords=%r",
            criteria.owner,
            criteria.document_type,
            criteria.country,
            criteria.keywords,
        )
        return criteria

    async def do_search(self, query: str, documents: list[DocumentProjection]) -> list[str]:
        if not documents:
            self.logging.debug("CriteriaExtraction: empty collection, skipping oracle call.")
            return []
        criteria = await self.do_extract_criteria(query)
        return self.apply_criteria(criteria, documents)

    def apply_criteria(self, criteria: SearchCriteria, documents: list[DocumentProjection]) -> list[str]:
        """Adapt extracted criteria into a ranked id list.

        Args:
            criteria (SearchCriteria): The extracted criteria.
            documents (list[DocumentProjection]): The collection in default order.

        Returns:
            list[str]: Matching ids; keyword matches are ordered by score, otherwise the input order is kept.
        """
        if criteria.is_empty():
            return []

        entities = {
            "owner": criteria.owner,
            "type": criteria.document_type,
            "country": criteria.country,
        }
        candidates = [
            doc for doc in documents
            if all(self._matches_entity(getattr(doc, field), value) for field, value in entities.items() if value)
        ]

        keywords = [kw for kw in criteria.keywords if kw and kw.strip()]
        if not keywords:
            return [doc.id for doc in candidates]

        # a document qualifies through its best-matching keyword
        best_scores: dict[int, float] = {}
        for keyword in keywords:
            for match in self._matcher.search(keyword, candidates, keys=RESIDUAL_KEYWORD_KEYS, threshold=self._thresholds.documents):
                if match.index not in best_scores or match.score < best_scores[match.index]:
                    best_scores[match.index] = match.score

        ranked = sorted(best_scores.items(), key=lambda item: (item[1], item[0]))
        return [candidates[index].id for index, _ in ranked]

    def _matches_entity(self, document_value: str | None, entity: str) -> bool:
        if not document_value:
            return False
        return bool(self._matcher.search(document_value, [entity], threshold=self._thresholds.canonical))
