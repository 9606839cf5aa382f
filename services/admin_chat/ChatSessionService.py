from services.admin_chat.MessageRouter import AdminMessageRouter
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import ChatResponse
from shared.store.ChatSessionStore import ChatSessionStore

WELCOME_MESSAGE = (
    "Hello Admin 👋 I'm your Kozi Assistant. Would you like me to check salary reminders, "
    "query the database, or process emails today?"
)
HISTORY_WINDOW = 10


class SessionNotFoundError(LookupError):
    pass


class ChatSessionService:
    """Persists the conversation around the admin message router."""

    def __init__(
        self,
        helper_config: HelperConfig,
        store: ChatSessionStore,
        router: AdminMessageRouter,
        summarizer: LLMClientInterface | None = None,
    ):
        self.logging = helper_config.get_logger()
        self._store = store
        self._router = router
        self._summarizer = summarizer

    async def do_start(self, user_id: str, bot_type: str = "admin") -> dict:
        session_id = await self._store.do_create_session(user_id=user_id, bot_type=bot_type)
        await self._store.do_add_message(session_id, WELCOME_MESSAGE, sender="assistant", message_type="text")
        return {"session_id": session_id, "message": WELCOME_MESSAGE, "type": "text"}

    async def do_message(self, session_id: str, user_id: str, message: str) -> ChatResponse:
        """Store the admin message, route it, store the reply and remember the intent.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        if await self._store.do_get_session(session_id) is None:
            raise SessionNotFoundError(session_id)

        history = await self._store.do_get_messages(session_id, limit=HISTORY_WINDOW)
        await self._store.do_add_message(session_id, message, sender="user")

        intent = self._router.classify(message).get_intent()
        response = await self._router.process_admin_message(message, session_id=session_id, user_id=user_id, history=history)

        await self._store.do_add_message(session_id, response.message, sender="assistant", message_type=response.type)
        await self._store.do_merge_context(session_id, {"topics_discussed": [intent], "last_intent": intent})
        return response

    async def do_history(self, session_id: str) -> list[dict]:
        return await self._store.do_get_messages(session_id)

    async def do_end(self, session_id: str) -> bool:
        """End a session. With a summarizer, a summary of the conversation is kept in the session context.

        Returns:
            bool: False if the session does not exist.
        """
        if self._summarizer is not None:
            await self._summarize(session_id)
        return await self._store.do_end_session(session_id)

    async def _summarize(self, session_id: str) -> None:
        history = await self._store.do_get_messages(session_id)
        if not any(item["sender"] == "user" for item in history):
            return
        try:
            summary = await self._summarizer.do_summarize_conversation(history)
        except Exception as e:
            self.logging.warning("Could not summarize chat session %s: %s", session_id, e)
            return
        await self._store.do_merge_context(session_id, {"summary": summary})
