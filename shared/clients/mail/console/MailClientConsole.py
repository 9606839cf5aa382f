import uuid

from shared.clients.mail.MailClientInterface import MailClientInterface
from shared.clients.mail.models.MailMessage import MailMessage
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class MailClientConsole(MailClientInterface):
    """Development transport: logs every message instead of delivering it and keeps them in ``outbox``."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self.outbox: list[MailMessage] = []

    def _get_engine_name(self) -> str:
        return "Console"

    def _get_required_config(self) -> list[EnvConfig]:
        return []

    async def _send(self, message: MailMessage) -> str | None:
        self.outbox.append(message)
        self.logging.info(
            "📧 [console mail] From: %s | To: %s <%s> | Subject: %s | Attachments: %d",
            self.get_sender(),
            message.to_name,
            message.to_email,
            message.subject,
            len(message.attachments),
            color="cyan",
        )
        self.logging.debug("%s", message.text_content or message.html_content)
        return f"console-{uuid.uuid4().hex[:12]}"
