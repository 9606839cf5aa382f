from services.admin_chat.formatters import format_analytics_menu
from services.admin_chat.handlers.HandlerInterface import HandlerInterface
from shared.models.chat import ChatResponse


class AnalyticsHandler(HandlerInterface):
    """Describes the reporting features. Performs no I/O."""

    def get_intent(self) -> str:
        return "analytics"

    async def handle(self, message: str, history: list[dict] | None = None) -> ChatResponse:
        return ChatResponse(message=format_analytics_menu(), type="analytics")
