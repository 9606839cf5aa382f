from abc import ABC, abstractmethod

from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import ChatResponse


class HandlerInterface(ABC):
    """One admin intent. The router picks the handler, the handler builds the reply."""

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config

    @abstractmethod
    def get_intent(self) -> str:
        """
        Returns the intent name used for logging and the session context. E.g. "payroll"
        """
        pass

    @abstractmethod
    async def handle(self, message: str, history: list[dict] | None = None) -> ChatResponse:
        """
        Build the reply for a message routed to this intent.

        Args:
            message (str): The raw admin message.
            history (list[dict] | None): Earlier turns of the session, oldest first.

        Returns:
            ChatResponse: The reply.

        Raises:
            Exception: Unexpected failures; the router converts them into an apology.
        """
        pass
