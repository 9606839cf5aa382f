from typing import Any

from pydantic import BaseModel, Field


class KnowledgeChunk(BaseModel):
    """One embedded piece of knowledge, persisted as a single JSON file. Never modified after writing."""

    id: str
    text: str
    embedding: list[float]
    metadata: dict[str, Any] = Field(default_factory=dict)
    timestamp: str


class SearchHit(KnowledgeChunk):
    similarity: float
