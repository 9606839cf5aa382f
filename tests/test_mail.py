import asyncio
import logging
import smtplib

import pytest

from shared.clients.mail.MailClientManager import MailClientManager
from shared.clients.mail.console.MailClientConsole import MailClientConsole
from shared.clients.mail.models.MailMessage import MailAttachment, MailMessage
from shared.clients.mail.smtp.MailClientSmtp import MailClientSmtp
from shared.logging.logging_setup import SecretMaskFilter


def reminder(to_email: str = "worker@kozi.test") -> MailMessage:
    return MailMessage(to_email=to_email, to_name="Aline", subject="Complete your profile", html_content="<p>Hi</p>", text_content="Hi")


def test_manager_defaults_to_console(helper_config, monkeypatch):
    monkeypatch.delenv("MAIL_ENGINE")
    client = MailClientManager(helper_config).get_client()
    assert isinstance(client, MailClientConsole)
    assert client.get_engine_name() == "console"


def test_unknown_engine_is_rejected(helper_config, monkeypatch):
    monkeypatch.setenv("MAIL_ENGINE", "Pigeon")
    with pytest.raises(ValueError):
        MailClientManager(helper_config)


def test_console_keeps_sent_messages(helper_config):
    client = MailClientConsole(helper_config=helper_config)
    result = asyncio.run(client.do_send(reminder()))
    assert result.success
    assert result.recipient == "worker@kozi.test"
    assert result.message_id.startswith("console-")
    assert [m.subject for m in client.outbox] == ["Complete your profile"]


def test_send_failure_is_reported_not_raised(helper_config):
    class BrokenTransport(MailClientConsole):
        async def _send(self, message):
            raise ConnectionRefusedError("smtp down")

    result = asyncio.run(BrokenTransport(helper_config=helper_config).do_send(reminder()))
    assert not result.success
    assert result.error == "smtp down"


def test_smtp_requires_host(helper_config, monkeypatch):
    monkeypatch.setenv("MAIL_ENGINE", "Smtp")
    with pytest.raises(ValueError):
        MailClientManager(helper_config)


def test_smtp_builds_multipart_message(helper_config, monkeypatch):
    monkeypatch.setenv("MAIL_SMTP_HOST", "smtp.kozi.test")
    monkeypatch.setenv("MAIL_SMTP_PORT", "2525")
    monkeypatch.setenv("MAIL_FROM", "info@kozi.rw")
    client = MailClientSmtp(helper_config=helper_config)
    mime = client._build_mime(reminder(), "<id@kozi.rw>")
    assert client._port == 2525
    assert mime["To"] == "Aline <worker@kozi.test>"
    assert mime["From"] == "Kozi Platform <info@kozi.rw>"
    assert [part.get_content_type() for part in mime.get_payload()] == ["text/plain", "text/html"]


def test_smtp_wraps_attachments_in_mixed_message(helper_config, monkeypatch):
    monkeypatch.setenv("MAIL_SMTP_HOST", "smtp.kozi.test")
    client = MailClientSmtp(helper_config=helper_config)
    message = reminder()
    message.attachments = [MailAttachment(filename="payslip.pdf", content=b"%PDF-1.4", mime_type="application/pdf")]

    mime = client._build_mime(message, "<id@kozi.rw>")
    body, attachment = mime.get_payload()
    assert mime.get_content_type() == "multipart/mixed"
    assert mime["Subject"] == "Complete your profile"
    assert body.get_content_type() == "multipart/alternative"
    assert attachment.get_content_type() == "application/pdf"
    assert attachment.get_filename() == "payslip.pdf"
    assert attachment.get_payload(decode=True) == b"%PDF-1.4"


def test_smtp_closes_connection_when_handshake_fails(helper_config, monkeypatch):
    monkeypatch.setenv("MAIL_SMTP_HOST", "smtp.kozi.test")
    opened = []

    class RefusingTls:
        def __init__(self, host, port, timeout):
            self.closed = False
            opened.append(self)

        def ehlo(self):
            pass

        def has_extn(self, name):
            return True

        def starttls(self):
            raise smtplib.SMTPException("tls handshake failed")

        def close(self):
            self.closed = True

    monkeypatch.setattr(smtplib, "SMTP", RefusingTls)
    client = MailClientSmtp(helper_config=helper_config)
    with pytest.raises(smtplib.SMTPException):
        client._connect()
    assert [server.closed for server in opened] == [True]


def test_smtp_send_failure_is_reported(helper_config, monkeypatch):
    monkeypatch.setenv("MAIL_SMTP_HOST", "smtp.kozi.test")
    client = MailClientSmtp(helper_config=helper_config)

    def refuse(*args, **kwargs):
        raise smtplib.SMTPConnectError(421, "busy")

    monkeypatch.setattr(client, "_connect", refuse)
    result = asyncio.run(client.do_send(reminder()))
    assert not result.success
    assert asyncio.run(client.verify_connection()) is False


##########################################
################ LOGGING #################
##########################################


def test_secret_mask_filter_hides_configured_secrets():
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "login with %s failed", ("s3cret-pass",), None)
    assert SecretMaskFilter(["s3cret-pass"]).filter(record)
    assert record.getMessage() == "login with **** failed"


def test_secret_mask_filter_ignores_short_values():
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "code abc", (), None)
    SecretMaskFilter(["abc"]).filter(record)
    assert record.getMessage() == "code abc"


##########################################
################ CONFIG ##################
##########################################


def test_config_values(helper_config, monkeypatch):
    monkeypatch.setenv("SOME_FLAG", "Yes")
    monkeypatch.setenv("SOME_FLOAT", "2.5")
    assert helper_config.get_bool_val("SOME_FLAG") is True
    assert helper_config.get_number_val("SOME_FLOAT") == 2.5
    assert helper_config.get_number_val("HR_CACHE_TTL") == 300
    with pytest.raises(ValueError):
        helper_config.get_string_val("NOT_CONFIGURED_ANYWHERE")


def test_relative_paths_resolve_against_root_dir(helper_config, tmp_path, monkeypatch):
    monkeypatch.setenv("SOME_DIR", "data/knowledge")
    assert helper_config.get_path_val("SOME_DIR") == tmp_path / "data" / "knowledge"
