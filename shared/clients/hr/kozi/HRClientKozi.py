import time
from typing import Any, Callable

from shared.clients.hr.HRClientInterface import HRClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class HRClientKozi(HRClientInterface):
    def __init__(self, helper_config: HelperConfig, clock: Callable[[], float] = time.time):
        super().__init__(helper_config=helper_config, clock=clock)
        self._base_url = self.get_config_val("BASE_URL", default="https://apis.kozi.rw", val_type="string")
        self._login_endpoint = self.get_config_val("LOGIN_ENDPOINT", default="/login", val_type="string")
        self._email = self.get_config_val("EMAIL", default=None, val_type="string")
        self._password = self.get_config_val("PASSWORD", default=None, val_type="string")
        self._role_id = self.get_config_val("ROLE_ID", default=1, val_type="number")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Kozi"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default="https://apis.kozi.rw"),
            EnvConfig(env_key="LOGIN_ENDPOINT", val_type="string", default="/login"),
            EnvConfig(env_key="EMAIL", val_type="string", default=None),
            EnvConfig(env_key="PASSWORD", val_type="string", default=None, secret=True),
            EnvConfig(env_key="ROLE_ID", val_type="number", default=1),
        ]

    ################ AUTH ##################
    def _get_account_email(self) -> str:
        return self._email

    def _get_role_id(self) -> int | str:
        return self._role_id

    def _get_login_payload(self) -> dict:
        return {"email": self._email, "password": self._password, "role_id": self._role_id}

    def _extract_token(self, response_data: Any) -> str | None:
        """Kozi has shipped several login response shapes; the first non-empty one wins.

        Order: token, access_token, accessToken, data.token, data.access_token
        """
        if not isinstance(response_data, dict):
            return None
        for key in ("token", "access_token", "accessToken"):
            if isinstance(response_data.get(key), str) and response_data[key]:
                return response_data[key]
        nested = response_data.get("data")
        if isinstance(nested, dict):
            for key in ("token", "access_token"):
                if isinstance(nested.get(key), str) and nested[key]:
                    return nested[key]
        return None

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/health"

    def _get_endpoint_login(self) -> str:
        return self._login_endpoint

    def _get_endpoints_job_seekers(self) -> list[str]:
        return ["/admin/select_jobseekers", "/admin/job_seekers"]

    def _get_endpoints_jobs(self) -> list[str]:
        # sic, the platform really names it "jobss"
        return ["/admin/select_jobss"]

    def _get_endpoints_incomplete_profiles(self) -> list[str]:
        return ["/admin/job_seekers/who_did_not_complete_profile", "/admin/incomplete-profiles"]

    def _get_endpoints_payroll(self) -> list[str]:
        return ["/admin/payroll"]
