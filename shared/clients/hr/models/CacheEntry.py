from typing import Any

from pydantic import BaseModel


class CacheEntry(BaseModel):
    """A cached, already normalized API result.

    Attributes:
        key (str): Endpoint plus canonical (sorted JSON) params.
        data (list[Any]): The normalized records.
        timestamp (float): Epoch seconds when the entry was stored.
    """

    key: str
    data: list[Any]
    timestamp: float

    def is_valid(self, now: float, ttl: float) -> bool:
        return now - self.timestamp < ttl
