from datetime import date
from typing import Callable

from services.admin_chat.analysis import analyze_payroll
from services.admin_chat.formatters import format_local_payment_reminder, format_no_payroll_data, format_payroll_report
from services.admin_chat.handlers.HandlerInterface import HandlerInterface
from shared.clients.hr.HRClientInterface import HRClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import ChatResponse
from shared.store.FallbackDataStore import FallbackDataStore

LOCAL_FAILURE_MESSAGE = "Unable to retrieve payment information. Please check system status."


class PayrollHandler(HandlerInterface):
    """Salary schedule report from live payroll data, local payment schedules when the API is down."""

    def __init__(
        self,
        helper_config: HelperConfig,
        hr_client: HRClientInterface,
        fallback_store: FallbackDataStore | None = None,
        today: Callable[[], date] = date.today,
    ):
        super().__init__(helper_config=helper_config)
        self._hr_client = hr_client
        self._fallback_store = fallback_store
        self._today = today

    def get_intent(self) -> str:
        return "payroll"

    async def handle(self, message: str, history: list[dict] | None = None) -> ChatResponse:
        try:
            self.logging.info("Fetching real-time payroll data...")
            records = await self._hr_client.do_fetch_payroll(use_cache=False)
        except Exception as e:
            self.logging.error("Error fetching payroll from %s: %s", self._hr_client.get_engine_name(), e)
            return await self._handle_local()

        if not records:
            return ChatResponse(message=format_no_payroll_data(), type="payment_reminder")
        analysis = analyze_payroll(records, today=self._today())
        self.logging.debug(
            "Payroll analysis: %d total, %d upcoming, %d overdue, %d urgent",
            analysis.total, len(analysis.upcoming), len(analysis.overdue), analysis.urgent_count,
        )
        return ChatResponse(message=format_payroll_report(analysis), type="payment_reminder")

    async def _handle_local(self) -> ChatResponse:
        if self._fallback_store is None:
            return ChatResponse(message=LOCAL_FAILURE_MESSAGE, type="text")
        self.logging.warning("Using fallback payment data from the local database.")
        try:
            schedules = await self._fallback_store.do_fetch_pending_payments(limit=5)
        except Exception as e:
            self.logging.error("Fallback payment query also failed: %s", e)
            return ChatResponse(message=LOCAL_FAILURE_MESSAGE, type="text")
        return ChatResponse(message=format_local_payment_reminder(schedules, today=self._today()), type="payment_reminder")
