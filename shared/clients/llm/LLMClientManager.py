from shared.clients.ClientManager import ClientManager
from shared.clients.llm.LLMClientInterface import LLMClientInterface


class LLMClientManager(ClientManager):
    """Manager class to instantiate the configured chat LLM client (LLM_ENGINE)."""

    client_type = "llm"
    class_prefix = "LLMClient"
    default_engine = "Openai"

    def get_client(self) -> LLMClientInterface:
        return self.client
