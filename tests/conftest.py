import logging
import os

import pytest

os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("API_SERVER_API_KEY", "test-key")
os.environ.setdefault("LLM_ENGINE", "ollama")
os.environ.setdefault("LLM_CHAT_MODEL", "test-model")
os.environ.setdefault("LLM_OLLAMA_BASE_URL", "http://ollama.test")

from services.discovery.intelligent.IntelligentSearchStrategy import IntelligentSearchStrategy
from services.discovery.matcher.MatcherRapidfuzz import MatcherRapidfuzz
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import Document


class FakeLLMClient:
    """Stands in for an LLMClientInterface: returns canned replies and records the prompts."""

    def __init__(self, reply: str = '{"documentIds": []}', error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[list[dict]] = []

    async def do_chat(self, messages: list[dict], json_output: bool = False) -> str:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.reply


class FakeStrategy(IntelligentSearchStrategy):
    """Strategy returning fixed ids, or raising a fixed error."""

    def __init__(self, helper_config: HelperConfig, result: list[str] | None = None, error: Exception | None = None):
        super().__init__(helper_config=helper_config, llm_client=FakeLLMClient())
        self.result = result or []
        self.error = error
        self.calls: list[tuple[str, list]] = []

    def _get_strategy_name(self) -> str:
        return "Fake"

    async def do_search(self, query, documents):
        self.calls.append((query, documents))
        if self.error is not None:
            raise self.error
        return list(self.result)


@pytest.fixture
def helper_config() -> HelperConfig:
    return HelperConfig(logger=logging.getLogger("docfinder.tests"))


@pytest.fixture
def matcher() -> MatcherRapidfuzz:
    return MatcherRapidfuzz()


@pytest.fixture
def documents() -> list[Document]:
    """Small collection: two owners, near-duplicate spellings, one document still processing."""
    return [
        Document(id="1", owner="John Doe", type="Passport", country="Germany", keywords=["travel"], summary="Passport of John"),
        Document(id="2", owner="Jon Doe", type="Invoice", company="Stadtwerke", country="Germany", keywords=["electricity"]),
        Document(id="3", owner="Jane Smith", type="Passport", country="France", keywords=["travel"]),
        Document(id="4", owner="JOHN DOE", type="Contract", company="Vodafone", country="Germany", keywords=["mobile"]),
        Document(id="5", owner="Processing", type="Processing", is_processing=True),
    ]
