"""
Unit tests for the intelligent search strategies and their manager.
"""

import asyncio
import json

import httpx
import pytest
from conftest import FakeLLMClient

from services.discovery.intelligent.CriteriaExtractionStrategy import CriteriaExtractionStrategy
from services.discovery.intelligent.DirectMatchStrategy import DirectMatchStrategy
from services.discovery.intelligent.IntelligentSearchManager import IntelligentSearchManager
from services.discovery.intelligent.IntelligentSearchStrategy import IntelligentSearchError
from services.discovery.models import SearchCriteria
from shared.clients.ClientInterface import ClientRequestError
from shared.models.config import SearchThresholds
from shared.models.document import DocumentProjection


@pytest.fixture
def projections(documents) -> list[DocumentProjection]:
    return [doc.to_projection() for doc in documents if not doc.is_processing]


def _criteria_strategy(helper_config, matcher, llm_client=None) -> CriteriaExtractionStrategy:
    return CriteriaExtractionStrategy(
        helper_config=helper_config,
        llm_client=llm_client or FakeLLMClient(),
        matcher=matcher,
        thresholds=SearchThresholds(),
    )


class TestDirectMatch:
    def test_returns_ids_in_oracle_order(self, helper_config, projections):
        client = FakeLLMClient(reply='{"documentIds": ["3", "1"]}')
        strategy = DirectMatchStrategy(helper_config=helper_config, llm_client=client)
        assert asyncio.run(strategy.do_search("passports", projections)) == ["3", "1"]

    def test_prompt_carries_query_and_projections(self, helper_config, projections):
        client = FakeLLMClient(reply='{"documentIds": []}')
        strategy = DirectMatchStrategy(helper_config=helper_config, llm_client=client)
        asyncio.run(strategy.do_search("John's passport", projections))

        messages = client.calls[0]
        assert messages[0]["role"] == "system"
        user_prompt = messages[1]["content"]
        assert "John's passport" in user_prompt
        assert '"id": "4"' in user_prompt
        assert "Stadtwerke" in user_prompt

    def test_empty_collection_skips_oracle(self, helper_config):
        client = FakeLLMClient(reply='{"documentIds": ["1"]}')
        strategy = DirectMatchStrategy(helper_config=helper_config, llm_client=client)
        assert asyncio.run(strategy.do_search("anything", [])) == []
        assert client.calls == []

    def test_unknown_and_repeated_ids_dropped(self, helper_config, projections):
        client = FakeLLMClient(reply='{"documentIds": ["2", "99", "2", "1"]}')
        strategy = DirectMatchStrategy(helper_config=helper_config, llm_client=client)
        assert asyncio.run(strategy.do_search("x", projections)) == ["2", "1"]

    def test_numeric_ids_accepted(self, helper_config, projections):
        client = FakeLLMClient(reply='{"documentIds": [4, 1]}')
        strategy = DirectMatchStrategy(helper_config=helper_config, llm_client=client)
        assert asyncio.run(strategy.do_search("x", projections)) == ["4", "1"]

    def test_code_fence_stripped(self, helper_config, projections):
        client = FakeLLMClient(reply='```json\n{"documentIds": ["1"]}\n```')
        strategy = DirectMatchStrategy(helper_config=helper_config, llm_client=client)
        assert asyncio.run(strategy.do_search("x", projections)) == ["1"]

    @pytest.mark.parametrize(
        "reply", ["not json", '{"ids": ["1"]}', '{"documentIds": "1"}', {"documentIds": ["1"]}, None]
    )
    def test_malformed_reply_raises(self, helper_config, projections, reply):
        strategy = DirectMatchStrategy(helper_config=helper_config, llm_client=FakeLLMClient(reply=reply))
        with pytest.raises(IntelligentSearchError):
            asyncio.run(strategy.do_search("x", projections))

    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("connection refused"),
            httpx.ReadTimeout("timed out"),
            ClientRequestError(url="http://ollama.test/api/chat", status_code=500, body="boom"),
        ],
    )
    def test_transport_failures_raise(self, helper_config, projections, error):
        strategy = DirectMatchStrategy(helper_config=helper_config, llm_client=FakeLLMClient(error=error))
        with pytest.raises(IntelligentSearchError):
            asyncio.run(strategy.do_search("x", projections))


class TestCriteriaExtraction:
    def test_entities_narrow_by_canonical_match(self, helper_config, matcher, projections):
        strategy = _criteria_strategy(helper_config, matcher)
        criteria = SearchCriteria(owner="Jon Doe", document_type="passport")
        assert strategy.apply_criteria(criteria, projections) == ["1"]

    def test_keywords_rank_candidates(self, helper_config, matcher, projections):
        strategy = _criteria_strategy(helper_config, matcher)
        criteria = SearchCriteria(keywords=["electricity"])
        assert strategy.apply_criteria(criteria, projections) == ["2"]

    def test_entity_without_keywords_keeps_input_order(self, helper_config, matcher, projections):
        strategy = _criteria_strategy(helper_config, matcher)
        criteria = SearchCriteria(country="Germany")
        assert strategy.apply_criteria(criteria, projections) == ["1", "2", "4"]

    def test_empty_criteria_match_nothing(self, helper_config, matcher, projections):
        strategy = _criteria_strategy(helper_config, matcher)
        assert strategy.apply_criteria(SearchCriteria(), projections) == []

    def test_do_search_sends_only_the_query(self, helper_config, matcher, projections):
        client = FakeLLMClient(reply='{"owner": null, "documentType": "Invoice", "country": null, "keywords": null}')
        strategy = _criteria_strategy(helper_config, matcher, llm_client=client)
        assert asyncio.run(strategy.do_search("my invoices", projections)) == ["2"]
        user_prompt = client.calls[0][1]["content"]
        assert "my invoices" in user_prompt
        assert "Stadtwerke" not in user_prompt

    def test_blank_values_from_oracle_ignored(self, helper_config, matcher):
        client = FakeLLMClient(reply=json.dumps({"owner": " ", "documentType": "", "country": None, "keywords": []}))
        strategy = _criteria_strategy(helper_config, matcher, llm_client=client)
        criteria = asyncio.run(strategy.do_extract_criteria("hello"))
        assert criteria.is_empty()

    def test_empty_collection_skips_oracle(self, helper_config, matcher):
        client = FakeLLMClient()
        strategy = _criteria_strategy(helper_config, matcher, llm_client=client)
        assert asyncio.run(strategy.do_search("x", [])) == []
        assert client.calls == []

    def test_malformed_reply_raises(self, helper_config, matcher, projections):
        strategy = _criteria_strategy(helper_config, matcher, llm_client=FakeLLMClient(reply="[1, 2]"))
        with pytest.raises(IntelligentSearchError):
            asyncio.run(strategy.do_search("x", projections))


class TestIntelligentSearchManager:
    def test_default_is_direct_match(self, helper_config, matcher, monkeypatch):
        monkeypatch.delenv("INTELLIGENT_SEARCH_STRATEGY", raising=False)
        manager = IntelligentSearchManager(helper_config, FakeLLMClient(), matcher, SearchThresholds())
        assert isinstance(manager.get_strategy(), DirectMatchStrategy)
        assert manager.get_strategy().get_strategy_name() == "directmatch"

    @pytest.mark.parametrize("name", ["criteriaextraction", "criteria_extraction", "Criteria-Extraction"])
    def test_criteria_extraction_selectable(self, helper_config, matcher, monkeypatch, name):
        monkeypatch.setenv("INTELLIGENT_SEARCH_STRATEGY", name)
        manager = IntelligentSearchManager(helper_config, FakeLLMClient(), matcher, SearchThresholds())
        assert isinstance(manager.get_strategy(), CriteriaExtractionStrategy)

    def test_unknown_strategy_rejected(self, helper_config, matcher, monkeypatch):
        monkeypatch.setenv("INTELLIGENT_SEARCH_STRATEGY", "vectors")
        with pytest.raises(ValueError):
            IntelligentSearchManager(helper_config, FakeLLMClient(), matcher, SearchThresholds())
