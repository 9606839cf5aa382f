import asyncio
from typing import Awaitable, Callable

from services.admin_chat.analysis import analyze_profiles, completion_bands
from services.admin_chat.formatters import format_no_incomplete_profiles, format_profile_analysis, format_reminder_campaign
from services.admin_chat.handlers.HandlerInterface import HandlerInterface
from services.admin_chat.reminder_emails import build_reminder_message
from shared.clients.hr.HRClientInterface import HRClientInterface
from shared.clients.mail.MailClientInterface import MailClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import ChatResponse
from shared.models.records import ProfileRecord

BATCH_SIZE = 10
SEND_DELAY = 0.5
BATCH_DELAY = 2.0
SEND_TRIGGERS = ("send", "email")

FAILURE_MESSAGE = "Sorry, I encountered an error processing profile reminder request. Please try again."


class ProfileReminderHandler(HandlerInterface):
    """Incomplete profile statistics, or a reminder mail campaign when the admin explicitly asks to send."""

    def __init__(
        self,
        helper_config: HelperConfig,
        hr_client: HRClientInterface,
        mail_client: MailClientInterface,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        super().__init__(helper_config=helper_config)
        self._hr_client = hr_client
        self._mail_client = mail_client
        self._sleep = sleep

    def get_intent(self) -> str:
        return "profile_reminders"

    @staticmethod
    def wants_send(message: str) -> bool:
        msg = (message or "").lower()
        return any(trigger in msg for trigger in SEND_TRIGGERS)

    async def handle(self, message: str, history: list[dict] | None = None) -> ChatResponse:
        try:
            self.logging.info("Fetching incomplete profiles for reminder campaign...")
            profiles = await self._hr_client.do_fetch_incomplete_profiles(use_cache=False)
        except Exception as e:
            self.logging.error("Error fetching incomplete profiles: %s", e)
            return ChatResponse(message=FAILURE_MESSAGE, type="text")

        if not profiles:
            return ChatResponse(message=format_no_incomplete_profiles(), type="email_summary")
        if self.wants_send(message):
            return await self._send_reminders(profiles)
        return ChatResponse(message=format_profile_analysis(analyze_profiles(profiles)), type="email_summary")

    async def _send_reminders(self, profiles: list[ProfileRecord]) -> ChatResponse:
        """Mail every profile, BATCH_SIZE at a time with pauses in between.

        A started campaign runs to the end; it cannot be cancelled half way.
        """
        self.logging.info("Sending profile completion reminders to %d users...", len(profiles))
        sent, failed = 0, 0
        for start in range(0, len(profiles), BATCH_SIZE):
            for profile in profiles[start:start + BATCH_SIZE]:
                try:
                    result = await self._mail_client.do_send(build_reminder_message(profile))
                except ValueError as e:
                    self.logging.warning("Skipping reminder: %s", e)
                    failed += 1
                    continue
                if result.success:
                    sent += 1
                else:
                    failed += 1
                await self._sleep(SEND_DELAY)
            if start + BATCH_SIZE < len(profiles):
                await self._sleep(BATCH_DELAY)

        self.logging.info("Reminder campaign completed: %d sent, %d failed.", sent, failed, color="green")
        return ChatResponse(message=format_reminder_campaign(sent, failed, completion_bands(profiles)), type="email_summary")
