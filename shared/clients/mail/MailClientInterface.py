from abc import ABC, abstractmethod
from typing import Any

from shared.clients.mail.models.MailMessage import MailMessage, MailResult
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class MailClientInterface(ABC):
    """Outbound mail transport. Configured like the HTTP clients (MAIL_<ENGINE>_<KEY>) but not HTTP based."""

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self.from_email = helper_config.get_string_val("MAIL_FROM", default="no-reply@kozi.rw")
        self.from_name = helper_config.get_string_val("MAIL_FROM_NAME", default="Kozi Platform")
        self.validate_full_configuration()

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def validate_full_configuration(self) -> None:
        """
        Validates that all required configuration values for the transport are set.

        Raises:
            ValueError: If any required configuration value is missing or invalid.
        """
        for config in self._get_required_config():
            _ = self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def get_client_type(self) -> str:
        return "mail"

    def get_engine_name(self) -> str:
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        """
        Returns the name of the transport engine. E.g. "Smtp"
        """
        pass

    def get_sender(self) -> str:
        return f"{self.from_name} <{self.from_email}>"

    ################ CONFIG ##################
    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        pass

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """
        Retrieves MAIL_<ENGINE>_<RAW_KEY> with the given type ("string", "number", "bool").

        Raises:
            ValueError: If the key is required but missing, or the type is unsupported.
        """
        key = f"MAIL_{self.get_engine_name().upper()}_{raw_key.upper()}"
        if val_type == "string":
            return self._helper_config.get_string_val(key, default=default)
        elif val_type == "number":
            return self._helper_config.get_number_val(key, default=default)
        elif val_type == "bool":
            return self._helper_config.get_bool_val(key, default=default)
        raise ValueError(f"Unsupported config value type '{val_type}' for env key '{raw_key}' in MAIL client '{self.get_engine_name()}'.")

    ##########################################
    ############### REQUESTS #################
    ##########################################

    @abstractmethod
    async def _send(self, message: MailMessage) -> str | None:
        """
        Deliver one message.

        Returns:
            str | None: The transport message id, if any.

        Raises:
            Exception: Any transport failure; do_send() converts it into a failed MailResult.
        """
        pass

    async def verify_connection(self) -> bool:
        """Check that the transport is usable. Never raises."""
        return True

    async def do_send(self, message: MailMessage) -> MailResult:
        """Send a message and report the outcome. Never raises for transport failures.

        Args:
            message (MailMessage): The message to send.

        Returns:
            MailResult: success with message id, or failure with the error text.
        """
        try:
            message_id = await self._send(message)
        except Exception as e:
            self.logging.error("Sending mail to %s via %s failed: %s", message.to_email, self.get_engine_name(), e)
            return MailResult(success=False, recipient=message.to_email, error=str(e))
        self.logging.info("Mail sent to %s: %s", message.to_email, message.subject)
        return MailResult(success=True, recipient=message.to_email, message_id=message_id)
