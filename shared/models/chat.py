"""Pydantic models for the admin chat replies."""

from typing import Literal

from pydantic import BaseModel

ResponseType = Literal["text", "payment_reminder", "database_query", "email_summary", "analytics"]


class ChatResponse(BaseModel):
    """A routed admin reply: the rendered message and the kind of report it carries."""

    message: str
    type: ResponseType = "text"
