from services.admin_chat.formatters import format_email_menu
from services.admin_chat.handlers.HandlerInterface import HandlerInterface
from shared.models.chat import ChatResponse


class EmailHandler(HandlerInterface):
    """Describes the inbox features. Performs no I/O."""

    def get_intent(self) -> str:
        return "email"

    async def handle(self, message: str, history: list[dict] | None = None) -> ChatResponse:
        return ChatResponse(message=format_email_menu(), type="email_summary")
