from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig

SUMMARY_PROMPT = (
    "Summarize the key points from this conversation between a Kozi administrator and the admin assistant. "
    "Focus on:\n"
    "- Reports that were requested (payroll, job seekers, profiles, emails, analytics)\n"
    "- Problems or overdue items that came up\n"
    "- Actions taken or still needed\n"
    "- Context that matters for the next conversation"
)


class LLMClientInterface(ClientInterface):
    """Chat completion backend. Messages use the OpenAI format: [{"role": ..., "content": ...}]."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        prefix = self.get_client_type().upper()
        self.chat_model = helper_config.get_string_val(f"{prefix}_CHAT_MODEL", default=self._get_default_chat_model())
        self.temperature = helper_config.get_number_val(f"{prefix}_TEMPERATURE", default=0.2)
        # 0 leaves the limit to the backend
        self.max_tokens = int(helper_config.get_number_val(f"{prefix}_MAX_TOKENS", default=0))

    def _get_client_type(self) -> str:
        return "llm"

    @abstractmethod
    def _get_default_chat_model(self) -> str:
        pass

    @abstractmethod
    def _get_endpoint_chat(self) -> str:
        pass

    @abstractmethod
    def get_chat_payload(self, messages: list[dict]) -> dict:
        """Request body for one completion of ``messages``."""
        pass

    @abstractmethod
    def extract_chat_response(self, response_data: dict) -> str:
        """
        Raises:
            ValueError: If the response carries no reply text.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_chat(self, messages: list[dict]) -> str:
        """Complete a conversation and return the stripped reply.

        Raises:
            TransientNetworkError: On timeouts and connection problems.
            APIStatusError: If the backend answers with a non-2xx status.
            ValueError: If the response does not contain a reply.
        """
        response = await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_chat(),
            json=self.get_chat_payload(messages),
            raise_on_error=True,
        )
        reply = self.extract_chat_response(response.json()).strip()
        self.logging.info("LLM reply from %s for %d messages (%d chars).", self.chat_model, len(messages), len(reply))
        return reply

    async def do_summarize_conversation(self, history: list[dict]) -> str:
        """Summarize stored chat turns ({"sender", "message"}) for the session context."""
        transcript = "\n".join(f"{item.get('sender', 'user')}: {item.get('message', '')}" for item in history)
        return await self.do_chat([
            {"role": "system", "content": SUMMARY_PROMPT},
            {"role": "user", "content": transcript},
        ])
