from shared.clients.ClientManager import ClientManager
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface


class EmbedClientManager(ClientManager):
    """Manager class to instantiate the configured embedding client (EMBED_ENGINE)."""

    client_type = "embed"
    class_prefix = "EmbedClient"
    default_engine = "Openai"

    def get_client(self) -> EmbedClientInterface:
        return self.client
