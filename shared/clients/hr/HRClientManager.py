from shared.clients.ClientManager import ClientManager
from shared.clients.hr.HRClientInterface import HRClientInterface


class HRClientManager(ClientManager):
    """
    Manager class to instantiate the configured HR platform client (HR_ENGINE).

    One client per process: the token and the cache live on the instance, so the
    same object must be shared by every caller.
    """

    client_type = "hr"
    class_prefix = "HRClient"
    default_engine = "Kozi"

    def get_client(self) -> HRClientInterface:
        return self.client
