from pydantic import BaseModel, Field


class MailAttachment(BaseModel):
    filename: str
    content: bytes
    mime_type: str = "application/octet-stream"


class MailMessage(BaseModel):
    to_email: str
    to_name: str = ""
    subject: str
    html_content: str
    text_content: str | None = None
    attachments: list[MailAttachment] = Field(default_factory=list)


class MailResult(BaseModel):
    """Outcome of a single send. Transports never raise, failures are reported here."""

    success: bool
    recipient: str
    message_id: str | None = None
    error: str | None = None
