"""Resilient client for the HR platform admin API.

Every request is authenticated with a bearer token that is (re)acquired
lazily, results are unwrapped and normalized into canonical records and kept
in a short-lived in-memory cache. Engines only supply endpoints and the shape
of the login exchange.
"""

import asyncio
import base64
import json
import time
from abc import abstractmethod
from typing import Any, Callable

from pydantic import ValidationError

from shared.clients.ClientInterface import ClientInterface
from shared.clients.hr.models.CacheEntry import CacheEntry
from shared.exceptions import APIStatusError, AuthError, DataShapeError, TransientNetworkError
from shared.helper.HelperConfig import HelperConfig
from shared.models.records import JobRecord, JobSeekerRecord, PayrollRecord, ProfileRecord

TOKEN_REFRESH_BUFFER = 60    # seconds before expiry a token counts as stale
HEALTHCHECK_TIMEOUT = 5.0    # seconds


class HRClientInterface(ClientInterface):
    default_timeout = 10.0

    def __init__(self, helper_config: HelperConfig, clock: Callable[[], float] = time.time):
        super().__init__(helper_config=helper_config)
        self.cache_ttl = helper_config.get_number_val("HR_CACHE_TTL", default=300)
        self._clock = clock

        # auth session
        self._token: str | None = None
        self._token_expiry: float | None = None
        self._auth_lock = asyncio.Lock()
        self.login_count = 0

        # response cache
        self._cache: dict[str, CacheEntry] = {}

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def is_token_fresh(self) -> bool:
        """
        A token is fresh if it exists and either carries no expiry (a 401 will tell)
        or expires more than TOKEN_REFRESH_BUFFER seconds from now.
        """
        if not self._token:
            return False
        if self._token_expiry is None:
            return True
        return self._token_expiry > self._clock() + TOKEN_REFRESH_BUFFER

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "hr"

    def get_token(self) -> str | None:
        return self._token

    def get_status(self) -> dict:
        """
        Returns a snapshot of the client state for the admin status endpoint. Never contains secrets.
        """
        return {
            "engine": self.get_engine_name(),
            "base_url": self._get_base_url(),
            "authenticated": bool(self._token),
            "token_fresh": self.is_token_fresh(),
            "cache_size": len(self._cache),
            "email": self._get_account_email(),
            "role_id": self._get_role_id(),
        }

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._token:
            return {"Authorization": f"Bearer {self._token}"}
        return {}

    @abstractmethod
    def _get_account_email(self) -> str:
        """Returns the admin account email used for login."""
        pass

    @abstractmethod
    def _get_role_id(self) -> int | str:
        """Returns the role id sent with the login request."""
        pass

    @abstractmethod
    def _get_login_payload(self) -> dict:
        """
        Returns the JSON body for the login request.

        Returns:
            dict: E.g. {"email": "...", "password": "...", "role_id": 1}
        """
        pass

    @abstractmethod
    def _extract_token(self, response_data: Any) -> str | None:
        """
        Extracts the access token from the login response body.

        Args:
            response_data (Any): The parsed JSON response body.

        Returns:
            str | None: The token, or None if the response carries none.
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_healthcheck(self) -> str:
        """Unauthenticated endpoint probed by do_health_check()."""
        pass

    @abstractmethod
    def _get_endpoint_login(self) -> str:
        pass

    @abstractmethod
    def _get_endpoints_job_seekers(self) -> list[str]:
        """Returns the endpoints for the job seeker list, primary first, then fallbacks."""
        pass

    @abstractmethod
    def _get_endpoints_jobs(self) -> list[str]:
        pass

    @abstractmethod
    def _get_endpoints_incomplete_profiles(self) -> list[str]:
        pass

    @abstractmethod
    def _get_endpoints_payroll(self) -> list[str]:
        pass

    def get_primary_endpoint(self, endpoint: str) -> str:
        """Map a fallback endpoint to the primary endpoint of its resource, others pass through."""
        path = "/" + endpoint.strip().lstrip("/")
        for endpoints in (
            self._get_endpoints_job_seekers(),
            self._get_endpoints_jobs(),
            self._get_endpoints_incomplete_profiles(),
            self._get_endpoints_payroll(),
        ):
            if path in ["/" + e.strip().lstrip("/") for e in endpoints]:
                return endpoints[0]
        return endpoint

    ##########################################
    ################# AUTH ###################
    ##########################################

    @staticmethod
    def decode_token_expiry(token: str) -> float | None:
        """Read the ``exp`` claim from a JWT without verifying it.

        Args:
            token (str): The raw token.

        Returns:
            float | None: Expiry in epoch seconds, or None for opaque tokens and tokens without exp.
        """
        parts = token.split(".")
        if len(parts) != 3:
            return None
        segment = parts[1] + "=" * (-len(parts[1]) % 4)
        try:
            claims = json.loads(base64.urlsafe_b64decode(segment.encode("ascii")))
        except ValueError:
            return None
        if not isinstance(claims, dict):
            return None
        exp = claims.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            return None
        return float(exp)

    async def do_login(self) -> str:
        """Log in with the configured admin account and store the token.

        Returns:
            str: The new token.

        Raises:
            AuthError: If the login call fails or the response carries no token.
        """
        self.logging.info("Logging in to %s as %s (role %s)...", self._get_base_url(), self._get_account_email(), self._get_role_id())
        try:
            response = await self.do_request(
                method="POST",
                endpoint=self._get_endpoint_login(),
                json=self._get_login_payload(),
                with_auth=False,
            )
        except TransientNetworkError as e:
            raise AuthError(f"Login request failed: {e}") from e

        if response.status_code >= 300:
            self.logging.error("Login failed with status %d", response.status_code)
            raise AuthError(f"Login failed with status {response.status_code}")
        try:
            response_data = response.json()
        except ValueError as e:
            raise AuthError("Login response is not valid JSON") from e

        token = self._extract_token(response_data)
        if not token:
            raise AuthError("Authentication succeeded but no token was returned by the API.")

        self._token = token
        self._token_expiry = self.decode_token_expiry(token)
        self.login_count += 1
        self.logging.info("Login successful (token expiry known: %s).", self._token_expiry is not None, color="green")
        return token

    async def ensure_auth(self) -> str:
        """Make sure a fresh token is available, logging in if needed.

        Concurrent callers share a single login: the freshness check is repeated
        inside the lock, so only the first waiter actually logs in.

        Returns:
            str: A fresh token.

        Raises:
            AuthError: If the login fails.
        """
        if self.is_token_fresh():
            return self._token
        async with self._auth_lock:
            if self.is_token_fresh():
                return self._token
            return await self.do_login()

    async def _refresh_token(self, rejected_token: str | None) -> None:
        """Drop a token the server rejected and log in again.

        If another coroutine already replaced the rejected token, its fresh token is reused.
        """
        async with self._auth_lock:
            if self._token and self._token != rejected_token and self.is_token_fresh():
                return
            self._token = None
            self._token_expiry = None
            await self.do_login()

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_authenticated_request(self, method: str, endpoint: str, params: dict | None = None, json: dict | None = None) -> Any:
        """Send an authenticated request and return the parsed JSON body.

        On a 401 the token is invalidated, a new one is acquired and the request is
        retried exactly once.

        Raises:
            AuthError: If authentication fails or the retry is rejected with 401 again.
            TransientNetworkError: On timeouts and connection problems.
            APIStatusError: On any other non-2xx status.
            DataShapeError: If the body is not valid JSON.
        """
        await self.ensure_auth()
        used_token = self._token
        response = await self.do_request(method=method, endpoint=endpoint, params=params, json=json)

        if response.status_code == 401:
            self.logging.info("Token rejected for %s, re-authenticating and retrying once...", endpoint)
            await self._refresh_token(used_token)
            response = await self.do_request(method=method, endpoint=endpoint, params=params, json=json)
            if response.status_code == 401:
                raise AuthError(f"Request to {endpoint} rejected with 401 after re-authentication")

        if response.status_code >= 300:
            self.logging.error("Request to %s failed with status %d", endpoint, response.status_code)
            raise APIStatusError(
                f"Request to {endpoint} failed with status {response.status_code}",
                status_code=response.status_code,
                url=endpoint,
            )
        try:
            return response.json()
        except ValueError as e:
            raise DataShapeError(f"Response from {endpoint} is not valid JSON") from e

    async def do_health_check(self) -> bool:
        """Unauthenticated reachability probe. Never raises.

        Returns:
            bool: True if the health endpoint answered 200.
        """
        try:
            response = await self.do_request(
                method="GET",
                endpoint=self._get_endpoint_healthcheck(),
                with_auth=False,
                timeout=HEALTHCHECK_TIMEOUT,
            )
        except Exception as e:
            self.logging.warning("HR API health check failed: %s", e)
            return False
        return response.status_code == 200

    async def do_measure_response_times(self) -> list[dict]:
        """Time one uncached call to the jobs and the job seeker endpoints.

        Returns:
            list[dict]: [{"name": ..., "endpoint": ..., "ok": bool, "ms": int | None}, ...]
        """
        tests = [
            ("Jobs API", self._get_endpoints_jobs()[0]),
            ("Job Seekers API", self._get_endpoints_job_seekers()[0]),
        ]
        results = []
        for name, endpoint in tests:
            start = time.perf_counter()
            try:
                await self.do_authenticated_request("GET", endpoint)
                results.append({"name": name, "endpoint": endpoint, "ok": True, "ms": int((time.perf_counter() - start) * 1000)})
            except Exception as e:
                self.logging.warning("Response time test for %s failed: %s", endpoint, e)
                results.append({"name": name, "endpoint": endpoint, "ok": False, "ms": None})
        return results

    ##########################################
    ################ FETCHERS ################
    ##########################################

    async def do_fetch_job_seekers(self, use_cache: bool = True, params: dict | None = None) -> list[JobSeekerRecord]:
        return await self._fetch_records("job seekers", self._get_endpoints_job_seekers(), JobSeekerRecord.from_raw, use_cache, params)

    async def do_fetch_jobs(self, use_cache: bool = True, params: dict | None = None) -> list[JobRecord]:
        return await self._fetch_records("jobs", self._get_endpoints_jobs(), JobRecord.from_raw, use_cache, params)

    async def do_fetch_incomplete_profiles(self, use_cache: bool = True, params: dict | None = None) -> list[ProfileRecord]:
        return await self._fetch_records("incomplete profiles", self._get_endpoints_incomplete_profiles(), ProfileRecord.from_raw, use_cache, params)

    async def do_fetch_payroll(self, use_cache: bool = True, params: dict | None = None) -> list[PayrollRecord]:
        return await self._fetch_records("payroll", self._get_endpoints_payroll(), PayrollRecord.from_raw, use_cache, params)

    async def _fetch_records(
        self,
        resource: str,
        endpoints: list[str],
        normalizer: Callable[[Any], Any],
        use_cache: bool,
        params: dict | None,
    ) -> list:
        """Fetch, unwrap and normalize a record list, trying fallback endpoints in order.

        Results are cached under the primary endpoint, whichever endpoint served them.

        Raises:
            AuthError: Authentication failed (fallbacks are not tried).
            TransientNetworkError | APIStatusError | DataShapeError: The last endpoint failed.
        """
        cache_key = self.make_cache_key(endpoints[0], params)
        if use_cache:
            cached = self.get_cached(cache_key)
            if cached is not None:
                self.logging.debug("Cache hit for %s (%d records)", cache_key, len(cached))
                return cached

        last_error: Exception | None = None
        for endpoint in endpoints:
            try:
                payload = await self.do_authenticated_request("GET", endpoint, params=params)
                records = self.normalize_records(resource, self.unwrap_data(payload), normalizer)
            except (TransientNetworkError, APIStatusError, DataShapeError) as e:
                self.logging.warning("Fetching %s from %s failed: %s", resource, endpoint, e)
                last_error = e
                continue
            self.set_cached(cache_key, records)
            self.logging.info("Fetched %d %s from %s", len(records), resource, endpoint)
            return records

        raise last_error

    ##########################################
    ############ RESPONSE PARSER #############
    ##########################################

    @staticmethod
    def unwrap_data(payload: Any) -> list:
        """Return the record list from a bare list or a ``{"data": [...]}`` envelope.

        An empty body, an empty object or a null ``data`` count as an empty list.

        Raises:
            DataShapeError: For any other shape.
        """
        if isinstance(payload, list):
            return payload
        if payload is None:
            return []
        if isinstance(payload, dict):
            if not payload:
                return []
            if "data" in payload:
                data = payload["data"]
                if data is None:
                    return []
                if isinstance(data, list):
                    return data
        raise DataShapeError(f"Cannot unwrap record list from {type(payload).__name__} payload")

    @staticmethod
    def normalize_records(resource: str, raw_records: list, normalizer: Callable[[Any], Any]) -> list:
        """
        Raises:
            DataShapeError: If a record cannot be normalized.
        """
        try:
            return [normalizer(raw) for raw in raw_records]
        except ValidationError as e:
            raise DataShapeError(f"Invalid {resource} record: {e.error_count()} validation error(s)") from e

    ##########################################
    ################# CACHE ##################
    ##########################################

    @staticmethod
    def make_cache_key(endpoint: str, params: dict | None = None) -> str:
        """Endpoint plus canonical params, so equal params in any order share one entry."""
        endpoint = "/" + endpoint.strip().lstrip("/")
        return f"{endpoint}_{json.dumps(params or {}, sort_keys=True, default=str)}"

    def get_cached(self, key: str) -> list | None:
        """Return the cached records, or None if absent or stale. Stale entries stay until overwritten or cleared."""
        entry = self._cache.get(key)
        if entry is None or not entry.is_valid(self._clock(), self.cache_ttl):
            return None
        return entry.data

    def set_cached(self, key: str, data: list) -> None:
        self._cache[key] = CacheEntry(key=key, data=data, timestamp=self._clock())

    def clear_cache(self, endpoint: str | None = None) -> int:
        """Remove one endpoint's entries (any params) or everything.

        Fallback endpoints clear their primary, which holds the data they served.

        Returns:
            int: Number of removed entries.
        """
        if endpoint is None:
            removed = len(self._cache)
            self._cache.clear()
            self.logging.info("HR API cache cleared (%d entries).", removed)
            return removed
        prefix = self.make_cache_key(self.get_primary_endpoint(endpoint)).removesuffix("{}")
        keys = [key for key in self._cache if key.startswith(prefix)]
        for key in keys:
            del self._cache[key]
        self.logging.info("HR API cache cleared for %s (%d entries).", endpoint, len(keys))
        return len(keys)
