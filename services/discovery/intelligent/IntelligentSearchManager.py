from services.discovery.intelligent.CriteriaExtractionStrategy import CriteriaExtractionStrategy
from services.discovery.intelligent.DirectMatchStrategy import DirectMatchStrategy
from services.discovery.intelligent.IntelligentSearchStrategy import IntelligentSearchStrategy
from services.discovery.matcher.MatcherInterface import MatcherInterface
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import SearchThresholds


class IntelligentSearchManager:
    """Manager class to instantiate the configured intelligent search strategy."""

    def __init__(
        self,
        helper_config: HelperConfig,
        llm_client: LLMClientInterface,
        matcher: MatcherInterface,
        thresholds: SearchThresholds,
    ):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self._llm_client = llm_client
        self._matcher = matcher
        self._thresholds = thresholds
        self.strategy = self._initialize_strategy()

    def _get_strategy_from_env(self) -> str:
        """Read INTELLIGENT_SEARCH_STRATEGY, defaulting to "directmatch"."""
        strategy = self.helper_config.get_string_val("INTELLIGENT_SEARCH_STRATEGY", default="directmatch")
        return strategy.strip().lower().replace("_", "").replace("-", "")

    def _initialize_strategy(self) -> IntelligentSearchStrategy:
        """Instantiate the configured strategy.

        Raises:
            ValueError: If the strategy name is unknown.
        """
        name = self._get_strategy_from_env()
        if name == "directmatch":
            strategy = DirectMatchStrategy(helper_config=self.helper_config, llm_client=self._llm_client)
        elif name == "criteriaextraction":
            strategy = CriteriaExtractionStrategy(
                helper_config=self.helper_config,
                llm_client=self._llm_client,
                matcher=self._matcher,
                thresholds=self._thresholds,
            )
        else:
            raise ValueError("Unsupported intelligent search strategy '%s'. Use 'directmatch' or 'criteriaextraction'." % name)
        self.logging.debug("Instantiated intelligent search strategy: %s", strategy.get_strategy_name())
        return strategy

    def get_strategy(self) -> IntelligentSearchStrategy:
        """Return the instantiated strategy."""
        return self.strategy
