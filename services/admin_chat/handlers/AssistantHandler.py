from services.admin_chat.handlers.HandlerInterface import HandlerInterface
from services.knowledge.RetrievalService import RetrievalService
from services.knowledge.personas import ADMIN_GREETING
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import ChatResponse


class AssistantHandler(HandlerInterface):
    """Open questions: a grounded LLM answer with the admin persona, the greeting if the LLM is unavailable."""

    def __init__(self, helper_config: HelperConfig, retrieval: RetrievalService | None):
        super().__init__(helper_config=helper_config)
        self._retrieval = retrieval

    def get_intent(self) -> str:
        return "assistant"

    async def handle(self, message: str, history: list[dict] | None = None) -> ChatResponse:
        if self._retrieval is None:
            return ChatResponse(message=ADMIN_GREETING, type="text")
        try:
            reply = await self._retrieval.do_generate_contextual_response(message, history=history, persona="admin")
        except Exception as e:
            self.logging.error("LLM admin response failed: %s", e)
            return ChatResponse(message=ADMIN_GREETING, type="text")
        return ChatResponse(message=reply or ADMIN_GREETING, type="text")
