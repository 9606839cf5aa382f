from shared.clients.ClientManager import ClientManager
from shared.clients.mail.MailClientInterface import MailClientInterface


class MailClientManager(ClientManager):
    """Manager class to instantiate the configured mail transport (MAIL_ENGINE)."""

    client_type = "mail"
    class_prefix = "MailClient"
    default_engine = "Console"

    def get_client(self) -> MailClientInterface:
        return self.client
