import asyncio
from datetime import datetime, timezone

from shared.clients.hr.HRClientInterface import HRClientInterface
from shared.helper.HelperConfig import HelperConfig


class DashboardService:
    """Collects the four HR platform resources concurrently for the admin dashboard."""

    def __init__(self, helper_config: HelperConfig, hr_client: HRClientInterface):
        self.logging = helper_config.get_logger()
        self._hr_client = hr_client

    async def do_collect(self, use_cache: bool = True) -> dict:
        """Fetch job seekers, jobs, incomplete profiles and payroll at the same time.

        A failing resource is logged and reported as an empty list, the others
        are still returned.

        Returns:
            dict: {"job_seekers": [...], "jobs": [...], "incomplete_profiles": [...], "payroll": [...],
                   "summary": {<resource>_count: int}, "errors": {<resource>: str}, "timestamp": str}
        """
        fetchers = {
            "job_seekers": self._hr_client.do_fetch_job_seekers,
            "jobs": self._hr_client.do_fetch_jobs,
            "incomplete_profiles": self._hr_client.do_fetch_incomplete_profiles,
            "payroll": self._hr_client.do_fetch_payroll,
        }
        results = await asyncio.gather(*(fetch(use_cache=use_cache) for fetch in fetchers.values()), return_exceptions=True)

        data: dict = {}
        errors: dict[str, str] = {}
        for name, result in zip(fetchers, results):
            if isinstance(result, Exception):
                self.logging.error("Dashboard fetch of %s failed: %s", name, result)
                errors[name] = str(result)
                data[name] = []
            else:
                data[name] = [record.model_dump(mode="json") for record in result]

        data["summary"] = {f"{name}_count": len(data[name]) for name in fetchers}
        data["errors"] = errors
        data["timestamp"] = datetime.now(timezone.utc).isoformat()
        self.logging.info("Dashboard collected (%d of %d resources failed).", len(errors), len(fetchers))
        return data
