from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig


class LLMClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # chat / completion config
        self.chat_model = helper_config.get_string_val(f"{self.get_client_type().upper()}_CHAT_MODEL")
        self.temperature = helper_config.get_number_val(f"{self.get_client_type().upper()}_TEMPERATURE", default=0.0)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "llm"

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_chat(self) -> str:
        """Returns the endpoint path for chat/completion requests (e.g. "/api/chat")."""
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_chat_payload(self, messages: list[dict], json_output: bool = False) -> dict:
        """Build the backend-specific request body for a chat/completion request.

        Args:
            messages (list[dict]): OpenAI-format messages
                (e.g. [{"role": "user", "content": "..."}]).
            json_output (bool): Ask the backend to constrain the reply to a JSON object.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_chat_response(self, response_data: dict) -> str:
        """Extract the assistant reply text from a raw chat API response.

        Response format differs by backend:
        - Ollama /api/chat: {"message": {"content": "..."}}
        - OpenAI-compatible: {"choices": [{"message": {"content": "..."}}]}

        Args:
            response_data (dict): The parsed JSON response body.

        Returns:
            str: The assistant reply text.

        Raises:
            ValueError: If the response does not contain a reply.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_chat(self, messages: list[dict], json_output: bool = False) -> str:
        """Send a chat/completion request and return the assistant reply text.

        Args:
            messages (list[dict]): OpenAI-format messages.
            json_output (bool): Ask the backend for a JSON object reply.

        Returns:
            str: The assistant reply text.

        Raises:
            ClientRequestError: If the backend answers with a non-2xx status.
            httpx.HTTPError: On connection errors and timeouts.
            ValueError: If the response does not contain a valid reply.
        """
        body = self.get_chat_payload(messages, json_output=json_output)
        response = await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_chat(),
            json=body,
            raise_on_error=True,
        )
        try:
            response_data = response.json()
        except ValueError as e:
            raise ValueError("Chat response from %s is not valid JSON: %s" % (self.get_engine_name(), e))
        if not isinstance(response_data, dict):
            raise ValueError(
                "Chat response from %s is not a JSON object but %s" % (self.get_engine_name(), type(response_data).__name__)
            )
        return self.extract_chat_response(response_data)
