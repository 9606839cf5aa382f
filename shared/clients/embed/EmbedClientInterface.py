from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig


class EmbedClientInterface(ClientInterface):
    """Text embedding backend used by the knowledge vector store."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        prefix = self.get_client_type().upper()
        self.embed_model = helper_config.get_string_val(f"{prefix}_MODEL", default=self._get_default_model())
        # inputs are cut to this many characters, 0 disables the cut
        self.embed_model_max_chars = int(helper_config.get_number_val(f"{prefix}_MODEL_MAX_CHARS", default=8000))

    def _get_client_type(self) -> str:
        return "embed"

    @abstractmethod
    def _get_default_model(self) -> str:
        pass

    @abstractmethod
    def get_endpoint_embedding(self) -> str:
        pass

    @abstractmethod
    def get_embed_payload(self, texts: list[str]) -> dict:
        pass

    @abstractmethod
    def extract_embeddings_from_response(self, response_data: dict) -> list[list[float]]:
        """Vectors in input order.

        Raises:
            ValueError: If the response holds no usable vectors.
        """
        pass

    def prepare_inputs(self, texts: list[str] | str) -> list[str]:
        texts = [texts] if isinstance(texts, str) else list(texts)
        if self.embed_model_max_chars:
            texts = [text[: self.embed_model_max_chars] for text in texts]
        return texts

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_embed(self, texts: list[str] | str) -> list[list[float]]:
        """Embed one or more texts.

        Args:
            texts (list[str] | str): Texts to embed, cut to EMBED_MODEL_MAX_CHARS.

        Returns:
            list[list[float]]: One vector per input, same order.

        Raises:
            TransientNetworkError: On timeouts and connection problems.
            APIStatusError: If the backend answers with a non-2xx status.
            ValueError: If the number of vectors does not match the number of inputs.
        """
        inputs = self.prepare_inputs(texts)
        response = await self.do_request(
            method="POST",
            endpoint=self.get_endpoint_embedding(),
            json=self.get_embed_payload(inputs),
            raise_on_error=True,
        )
        vectors = self.extract_embeddings_from_response(response.json())
        if len(vectors) != len(inputs):
            raise ValueError(f"Embedding backend returned {len(vectors)} vectors for {len(inputs)} texts.")
        self.logging.debug("Embedded %d texts with %s.", len(inputs), self.embed_model)
        return vectors
