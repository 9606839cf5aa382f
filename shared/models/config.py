from pydantic import BaseModel


class EnvConfig(BaseModel):
    """
    Represents a single configuration parameter required by a client engine.

    Attributes:
        env_key (str): The raw key of the environment variable, without the "<TYPE>_<ENGINE>_" prefix.
        val_type (str): The expected type of the value. One of "string", "number" or "bool".
        default (str | int | float | bool | None): An optional default value if the environment variable is not set. If None, the variable is required and an error will be raised if it is not set.
        secret (bool): Whether the value must never be logged (passwords, API keys).
    """

    env_key: str
    val_type: str
    default: str | int | float | bool | None = None
    secret: bool = False
