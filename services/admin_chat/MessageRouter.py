"""Keyword intent routing for the admin chat.

Routes are checked in order and the first route with a keyword contained in
the lowercased message wins, so "payment profile" is a payroll question.
"""

from dataclasses import dataclass

from services.admin_chat.handlers.AnalyticsHandler import AnalyticsHandler
from services.admin_chat.handlers.AssistantHandler import AssistantHandler
from services.admin_chat.handlers.DatabaseQueryHandler import DatabaseQueryHandler
from services.admin_chat.handlers.EmailHandler import EmailHandler
from services.admin_chat.handlers.HandlerInterface import HandlerInterface
from services.admin_chat.handlers.PayrollHandler import PayrollHandler
from services.admin_chat.handlers.ProfileReminderHandler import ProfileReminderHandler
from services.knowledge.RetrievalService import RetrievalService
from shared.clients.hr.HRClientInterface import HRClientInterface
from shared.clients.mail.MailClientInterface import MailClientInterface
from shared.exceptions import HandlerError
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import ChatResponse
from shared.store.FallbackDataStore import FallbackDataStore

APOLOGY_MESSAGE = "Sorry, I encountered an error processing your request. Please try again."

PAYROLL_KEYWORDS = ("payment", "salary", "salaries", "payroll", "reminder", "due", "pay")
DATABASE_KEYWORDS = (
    "database", "query", "search", "filter",
    "worker", "workers", "employee", "employees",
    "job seeker", "job seekers", "employer", "employers",
    "find", "list", "show me", "how many", "profile",
)
PROFILE_KEYWORDS = (
    "incomplete", "profile completion", "completion",
    "send reminder", "email reminder", "remind",
    "profile", "complete", "finish",
)
EMAIL_KEYWORDS = ("email", "emails", "gmail", "inbox", "categorize", "category", "draft", "reply", "respond")
ANALYTICS_KEYWORDS = (
    "analytics", "report", "insight", "insights",
    "dashboard", "metric", "metrics", "statistics", "stats",
    "performance", "trends", "analysis",
)


@dataclass(frozen=True)
class Route:
    name: str
    keywords: tuple[str, ...]
    handler: HandlerInterface

    def matches(self, msg: str) -> bool:
        return any(keyword in msg for keyword in self.keywords)


class AdminMessageRouter:
    def __init__(self, helper_config: HelperConfig, routes: list[Route], default_handler: HandlerInterface):
        self.logging = helper_config.get_logger()
        self.routes = routes
        self.default_handler = default_handler

    def classify(self, message: str) -> HandlerInterface:
        msg = (message or "").lower()
        for route in self.routes:
            if route.matches(msg):
                return route.handler
        return self.default_handler

    async def process_admin_message(
        self, message: str, session_id: str | None = None, user_id: str | None = None, history: list[dict] | None = None
    ) -> ChatResponse:
        """Route a message to its handler and return the reply. Never raises.

        Args:
            message (str): The admin message.
            session_id (str | None): Chat session, for logging.
            user_id (str | None): Admin user, for logging.
            history (list[dict] | None): Earlier turns, handed to the LLM backed handler.

        Returns:
            ChatResponse: The handler reply, or an apology of type "text" if the handler failed.
        """
        handler = self.classify(message)
        self.logging.info("Session %s (user %s): routing message to '%s'.", session_id, user_id, handler.get_intent())
        try:
            return await handler.handle(message, history=history)
        except Exception as e:
            error = HandlerError(handler.get_intent(), e)
            self.logging.error("Error in admin message processing: %s", error)
            return ChatResponse(message=APOLOGY_MESSAGE, type="text")


def build_admin_router(
    helper_config: HelperConfig,
    hr_client: HRClientInterface,
    mail_client: MailClientInterface,
    retrieval: RetrievalService | None = None,
    fallback_store: FallbackDataStore | None = None,
) -> AdminMessageRouter:
    """Wire the standard admin routes: payroll, database, profile reminders, email, analytics, then the LLM."""
    routes = [
        Route("payroll", PAYROLL_KEYWORDS, PayrollHandler(helper_config, hr_client, fallback_store=fallback_store)),
        Route("database", DATABASE_KEYWORDS, DatabaseQueryHandler(helper_config, hr_client, fallback_store=fallback_store)),
        Route("profile_reminders", PROFILE_KEYWORDS, ProfileReminderHandler(helper_config, hr_client, mail_client)),
        Route("email", EMAIL_KEYWORDS, EmailHandler(helper_config)),
        Route("analytics", ANALYTICS_KEYWORDS, AnalyticsHandler(helper_config)),
    ]
    return AdminMessageRouter(helper_config, routes=routes, default_handler=AssistantHandler(helper_config, retrieval))
