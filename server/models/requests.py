from pydantic import BaseModel, Field


class StartSessionRequest(BaseModel):
    user_id: str = Field(min_length=1)
    bot_type: str = "admin"


class ChatMessageRequest(BaseModel):
    session_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    message: str = Field(min_length=1)


class EndSessionRequest(BaseModel):
    session_id: str = Field(min_length=1)


class CacheClearRequest(BaseModel):
    endpoint: str | None = None


class KnowledgeReloadRequest(BaseModel):
    rebuild: bool = False


class AssistantRequest(BaseModel):
    message: str = Field(min_length=1)
    persona: str = "job_seeker"
    history: list[dict] = Field(default_factory=list)
    user_context: dict | None = None
