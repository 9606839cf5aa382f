"""Error taxonomy shared by clients, stores and the admin chat router.

Internal layers (API client, vector store, record store) raise these.
The admin message router is the boundary that catches everything and turns it
into a polite reply.
"""


class BridgeError(Exception):
    """Base class for all errors raised by the admin bridge."""


class AuthError(BridgeError):
    """Login failed, no token could be extracted, or a request was rejected with 401 twice."""


class TransientNetworkError(BridgeError):
    """Timeout or connection problem talking to a remote service. Callers may fall back to local data."""


class APIStatusError(BridgeError):
    """Remote service answered with a non-2xx status other than 401."""

    def __init__(self, message: str, status_code: int, url: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class DataShapeError(BridgeError):
    """Response envelope could not be unwrapped into a list of records."""


class HandlerError(BridgeError):
    """Uncaught failure inside a specialized admin chat handler."""

    def __init__(self, intent: str, cause: BaseException) -> None:
        super().__init__(f"Handler '{intent}' failed: {cause}")
        self.intent = intent
        self.cause = cause
