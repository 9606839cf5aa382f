from abc import ABC, abstractmethod
from typing import Any

import httpx

from shared.exceptions import APIStatusError, TransientNetworkError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class ClientInterface(ABC):
    """Base for every HTTP backed client (HR platform, LLM, embeddings).

    Configuration is read from ``<TYPE>_<ENGINE>_<KEY>`` variables and validated on
    construction; the httpx client only exists between ``boot()`` and ``close()``.
    """

    # seconds, used when <TYPE>_TIMEOUT is not set
    default_timeout: float = 30.0

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self.timeout = helper_config.get_number_val(f"{self.get_client_type().upper()}_TIMEOUT", default=self.default_timeout)

        self._client: httpx.AsyncClient | None = None
        self._transport: httpx.AsyncBaseTransport | None = None
        self.validate_full_configuration()

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def validate_full_configuration(self) -> None:
        """
        Raises:
            ValueError: If a required configuration value is missing or invalid.
        """
        for config in self._get_required_config():
            value = self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)
            self.logging.debug(
                "%s client '%s': %s=%s",
                self.get_client_type().upper(),
                self.get_engine_name(),
                self._get_config_key_name(config.env_key),
                "****" if config.secret else value,
            )

    ##########################################
    ################ GETTER ##################
    ##########################################

    def get_client_type(self) -> str:
        return self._get_client_type().lower()

    @abstractmethod
    def _get_client_type(self) -> str:
        """E.g. "hr", "llm", "embed"."""
        pass

    def get_engine_name(self) -> str:
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        """E.g. "Kozi", "Openai"."""
        pass

    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        pass

    def _get_config_key_name(self, raw_key: str) -> str:
        return f"{self.get_client_type().upper()}_{self.get_engine_name().upper()}_{raw_key.upper()}"

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """Read ``<TYPE>_<ENGINE>_<RAW_KEY>`` as "string", "number" or "bool".

        Raises:
            ValueError: If the key is required but missing, or the type is unsupported.
        """
        key = self._get_config_key_name(raw_key)
        readers = {
            "string": self._helper_config.get_string_val,
            "number": self._helper_config.get_number_val,
            "bool": self._helper_config.get_bool_val,
        }
        if val_type not in readers:
            raise ValueError(f"Unsupported config value type '{val_type}' for '{key}'.")
        return readers[val_type](key, default=default)

    @abstractmethod
    def _get_auth_header(self) -> dict:
        """Header attached to authenticated requests, {} if there are no credentials."""
        pass

    @abstractmethod
    def _get_base_url(self) -> str:
        pass

    ##########################################
    ############ CORE REQUESTS ###############
    ##########################################

    def set_transport(self, transport: httpx.AsyncBaseTransport | None) -> None:
        """Use a custom httpx transport (e.g. httpx.MockTransport) from the next boot() on."""
        self._transport = transport

    async def boot(self) -> None:
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def do_request(
        self,
        method: str = "GET",
        endpoint: str = "",
        json: dict | None = None,
        params: dict | None = None,
        with_auth: bool = True,
        raise_on_error: bool = False,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send one request to ``<base url><endpoint>``.

        Args:
            method (str): HTTP method.
            endpoint (str): Path below the base URL, leading slash optional.
            json (dict | None): JSON body.
            params (dict | None): Query parameters.
            with_auth (bool): Attach the header from _get_auth_header().
            raise_on_error (bool): Raise APIStatusError for a non-2xx status instead of returning it.
            timeout (float | None): Per request timeout, defaults to the client timeout.

        Returns:
            httpx.Response: The raw response.

        Raises:
            RuntimeError: If boot() has not been called.
            TransientNetworkError: On timeouts and connection problems.
            APIStatusError: On a non-2xx status when raise_on_error is set.
        """
        if self._client is None:
            raise RuntimeError("HTTP client not initialised. Call boot() before making requests.")

        path = endpoint.strip().lstrip("/")
        url = f"{self._get_base_url().rstrip('/')}/{path}" if path else self._get_base_url().rstrip("/")
        headers = {"Accept": "application/json", **(self._get_auth_header() if with_auth else {})}

        try:
            response = await self._client.request(
                method,
                url,
                headers=headers,
                json=json,
                params=params,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except httpx.TransportError as e:
            self.logging.warning("Request to %s failed: %s", url, e)
            raise TransientNetworkError(f"{method} {url} failed: {e}") from e

        if raise_on_error and not response.is_success:
            self.logging.error("Request to %s failed with status %d: %s", url, response.status_code, response.text[:200])
            raise APIStatusError(f"Request to {url} failed with status {response.status_code}", status_code=response.status_code, url=url)
        return response
