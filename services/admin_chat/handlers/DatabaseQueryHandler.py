from services.admin_chat.analysis import analyze_job_seekers
from services.admin_chat.formatters import format_database_report, format_local_database_summary, format_no_database_data
from services.admin_chat.handlers.HandlerInterface import HandlerInterface
from shared.clients.hr.HRClientInterface import HRClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import ChatResponse
from shared.store.FallbackDataStore import FallbackDataStore

LOCAL_FAILURE_MESSAGE = "Unable to retrieve database information. Please check system status."


class DatabaseQueryHandler(HandlerInterface):
    """Job seeker overview from live data, local employee counts when the API is down."""

    def __init__(self, helper_config: HelperConfig, hr_client: HRClientInterface, fallback_store: FallbackDataStore | None = None):
        super().__init__(helper_config=helper_config)
        self._hr_client = hr_client
        self._fallback_store = fallback_store

    def get_intent(self) -> str:
        return "database"

    async def handle(self, message: str, history: list[dict] | None = None) -> ChatResponse:
        try:
            self.logging.info("Fetching real-time job seeker data...")
            records = await self._hr_client.do_fetch_job_seekers(use_cache=False)
        except Exception as e:
            self.logging.error("Error fetching job seekers from %s: %s", self._hr_client.get_engine_name(), e)
            return await self._handle_local()

        if not records:
            return ChatResponse(message=format_no_database_data(), type="database_query")
        return ChatResponse(message=format_database_report(analyze_job_seekers(records)), type="database_query")

    async def _handle_local(self) -> ChatResponse:
        if self._fallback_store is None:
            return ChatResponse(message=LOCAL_FAILURE_MESSAGE, type="text")
        self.logging.warning("Using fallback employee data from the local database.")
        try:
            overview = await self._fallback_store.do_fetch_employee_overview()
        except Exception as e:
            self.logging.error("Fallback database query also failed: %s", e)
            return ChatResponse(message=LOCAL_FAILURE_MESSAGE, type="text")
        return ChatResponse(message=format_local_database_summary(overview), type="database_query")
