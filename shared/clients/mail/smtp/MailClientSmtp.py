import asyncio
import smtplib
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid

from shared.clients.mail.MailClientInterface import MailClientInterface
from shared.clients.mail.models.MailMessage import MailMessage
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class MailClientSmtp(MailClientInterface):
    """SMTP transport. smtplib is blocking, so every session runs in a worker thread."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._host = self.get_config_val("HOST", default=None, val_type="string")
        self._port = int(self.get_config_val("PORT", default=587, val_type="number"))
        self._user = self.get_config_val("USER", default="", val_type="string")
        self._password = self.get_config_val("PASSWORD", default="", val_type="string")
        self._secure = self.get_config_val("SECURE", default=False, val_type="bool")
        self._timeout = float(self.get_config_val("TIMEOUT", default=30, val_type="number"))

    ##########################################
    ################ GETTER ##################
    ##########################################

    def _get_engine_name(self) -> str:
        return "Smtp"

    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="HOST", val_type="string", default=None),
            EnvConfig(env_key="PORT", val_type="number", default=587),
            EnvConfig(env_key="USER", val_type="string", default=""),
            EnvConfig(env_key="PASSWORD", val_type="string", default="", secret=True),
            EnvConfig(env_key="SECURE", val_type="bool", default=False),
        ]

    ##########################################
    ############### REQUESTS #################
    ##########################################

    def _connect(self) -> smtplib.SMTP:
        if self._secure:
            server = smtplib.SMTP_SSL(self._host, self._port, timeout=self._timeout)
        else:
            server = smtplib.SMTP(self._host, self._port, timeout=self._timeout)
        try:
            if not self._secure:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls()
                    server.ehlo()
            if self._user:
                server.login(self._user, self._password)
        except (smtplib.SMTPException, OSError):
            server.close()
            raise
        return server

    def _build_mime(self, message: MailMessage, message_id: str) -> MIMEMultipart:
        """multipart/alternative (text, html), wrapped in multipart/mixed when there are attachments."""
        body = MIMEMultipart("alternative")
        if message.text_content:
            body.attach(MIMEText(message.text_content, "plain", "utf-8"))
        body.attach(MIMEText(message.html_content, "html", "utf-8"))

        if message.attachments:
            msg = MIMEMultipart("mixed")
            msg.attach(body)
            for attachment in message.attachments:
                maintype, _, subtype = attachment.mime_type.partition("/")
                part = MIMEBase(maintype, subtype or "octet-stream")
                part.set_payload(attachment.content)
                encoders.encode_base64(part)
                part.add_header("Content-Disposition", "attachment", filename=attachment.filename)
                msg.attach(part)
        else:
            msg = body

        msg["Subject"] = message.subject
        msg["From"] = formataddr((self.from_name, self.from_email))
        msg["To"] = formataddr((message.to_name, message.to_email)) if message.to_name else message.to_email
        msg["Message-ID"] = message_id
        return msg

    def _send_blocking(self, message: MailMessage) -> str:
        message_id = make_msgid(domain=self.from_email.split("@")[-1])
        mime = self._build_mime(message, message_id)
        with self._connect() as server:
            server.sendmail(self.from_email, [message.to_email], mime.as_string())
        return message_id

    async def _send(self, message: MailMessage) -> str | None:
        return await asyncio.to_thread(self._send_blocking, message)

    def _verify_blocking(self) -> None:
        with self._connect() as server:
            server.noop()

    async def verify_connection(self) -> bool:
        try:
            await asyncio.to_thread(self._verify_blocking)
        except (smtplib.SMTPException, OSError) as e:
            self.logging.warning("SMTP connection check against %s:%d failed: %s", self._host, self._port, e)
            return False
        self.logging.info("SMTP connection to %s:%d verified.", self._host, self._port)
        return True
