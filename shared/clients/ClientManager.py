from typing import Any

from shared.helper.HelperConfig import HelperConfig


class ClientManager:
    """
    Instantiates the client engine configured in ``<TYPE>_ENGINE``.

    Engines live in ``shared.clients.<type>.<engine>.<Prefix><Engine>``, e.g.
    ``shared.clients.hr.kozi.HRClientKozi``. Subclasses set the type, the class
    name prefix and the default engine.
    """

    client_type: str = ""
    class_prefix: str = ""
    default_engine: str | None = None

    def __init__(self, helper_config: HelperConfig, **client_kwargs: Any):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self._client_kwargs = client_kwargs
        self.client = self._initialize_client()

    def _get_engine_from_env(self) -> str:
        """
        Reads the engine name from ENV configuration.

        Returns:
            str: Capitalised engine name (e.g. "Kozi").

        Raises:
            ValueError: If no engine is configured and there is no default.
        """
        engine = self.helper_config.get_string_val(f"{self.client_type.upper()}_ENGINE", default=self.default_engine)
        #lowercase all and uppercase first letter for module and class lookup
        return engine.strip().lower().capitalize()

    def _initialize_client(self) -> Any:
        """
        Instantiate the client for the configured engine.

        Raises:
            ValueError: If the engine is unsupported or cannot be imported.
        """
        engine = self._get_engine_from_env()
        class_name = f"{self.class_prefix}{engine}"
        try:
            module = __import__(
                f"shared.clients.{self.client_type}.{engine.lower()}.{class_name}",
                fromlist=[class_name],
            )
            client_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError("Unsupported %s engine '%s'. Error: %s" % (self.client_type.upper(), engine, e))
        client = client_class(helper_config=self.helper_config, **self._client_kwargs)
        self.logging.debug("Instantiated %s client for engine: %s", self.client_type.upper(), engine)
        return client

    def get_client(self) -> Any:
        """Return the instantiated client."""
        return self.client
