from abc import ABC, abstractmethod
import re
from typing import TypeVar

import httpx
from pydantic import BaseModel

from shared.clients.ClientInterface import ClientRequestError
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import DocumentProjection

T = TypeVar("T", bound=BaseModel)

_CODE_FENCE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL)


class IntelligentSearchError(Exception):
    """The extraction oracle could not answer: network error, timeout, bad status or malformed output."""


class IntelligentSearchStrategy(ABC):
    """Turns a natural-language query into a relevance-ranked list of document ids."""

    def __init__(self, helper_config: HelperConfig, llm_client: LLMClientInterface) -> None:
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self._llm_client = llm_client

    ##########################################
    ################ GETTER ##################
    ##########################################

    def get_strategy_name(self) -> str:
        """
        Returns the name of the strategy in lowercase. E.g. "directmatch"
        """
        return self._get_strategy_name().lower()

    @abstractmethod
    def _get_strategy_name(self) -> str:
        pass

    ##########################################
    ################ SEARCH ##################
    ##########################################

    @abstractmethod
    async def do_search(self, query: str, documents: list[DocumentProjection]) -> list[str]:
        """Find the documents relevant to a query.

        Args:
            query (str): The user's natural-language query.
            documents (list[DocumentProjection]): The searchable collection.

        Returns:
            list[str]: Ids of the relevant documents in relevance order. May be empty.

        Raises:
            IntelligentSearchError: If the extraction oracle fails.
        """
        pass

    ##########################################
    ############### HELPERS ##################
    ##########################################

    async def _do_oracle_call(self, messages: list[dict], output_model: type[T]) -> T:
        """Send a prompt to the extraction oracle and parse its JSON reply.

        Args:
            messages (list[dict]): OpenAI-format chat messages.
            output_model (type[T]): Pydantic model describing the expected reply.

        Returns:
            T: The validated reply.

        Raises:
            IntelligentSearchError: On transport errors, non-2xx statuses or a reply not matching output_model.
        """
        try:
            reply = await self._llm_client.do_chat(messages, json_output=True)
            if not isinstance(reply, str):
                raise ValueError("Oracle reply is not text but %s" % type(reply).__name__)
            return output_model.model_validate_json(self._strip_code_fence(reply))
        except (ClientRequestError, httpx.HTTPError, ValueError) as e:
            self.logging.warning(
                "Extraction oracle call failed for strategy '%s': %s: %s",
                self.get_strategy_name(),
                e.__class__.__name__,
                e,
            )
            raise IntelligentSearchError(str(e)) from e

    @staticmethod
    def _strip_code_fence(reply: str) -> str:
        """Remove a markdown code fence some models wrap around JSON."""
        match = _CODE_FENCE.match(reply)
        return match.group(1) if match else reply.strip()
