from datetime import datetime

from pydantic import BaseModel


class StartSessionResponse(BaseModel):
    session_id: str
    message: str
    type: str


class HistoryItem(BaseModel):
    message: str
    sender: str
    type: str
    timestamp: datetime | None


class HistoryResponse(BaseModel):
    session_id: str
    messages: list[HistoryItem]


class EndSessionResponse(BaseModel):
    session_id: str
    status: str


class EndpointTiming(BaseModel):
    name: str
    endpoint: str
    ok: bool
    ms: int | None


class ApiStatusResponse(BaseModel):
    healthy: bool
    status: dict
    response_times: list[EndpointTiming]


class CacheClearResponse(BaseModel):
    cleared: int
    endpoint: str | None


class KnowledgeReloadResponse(BaseModel):
    seed: int
    documents: int
    chunks: int
    failed: list[str]
    total: int


class AssistantResponse(BaseModel):
    persona: str
    reply: str
