"""
NS1 API Client - Authenticated access to NS1 monitoring jobs.

Every call issues exactly one HTTP request and either returns the decoded
job record or raises NS1Error. Retry and backoff are left to the caller.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import aiohttp

from config import DEFAULT_ENDPOINT, NS1Config
from models import MonitoringJob

logger = logging.getLogger(__name__)


class NS1Error(Exception):
    """
    Raised when an NS1 API call fails.

    The string form reads "METHOD url: status message" so callers can match
    on server messages such as "unknown monitoring job".
    """

    def __init__(
        self,
        method: str,
        url: str,
        status: Optional[int],
        message: str,
        body: str = "",
    ):
        self.method = method
        self.url = url
        self.status = status
        self.message = message
        self.body = body
        if status is None:
            text = f"{method} {url}: {message}"
        else:
            text = f"{method} {url}: {status} {message}"
        super().__init__(text)


def _error_message(text: str, reason: str) -> str:
    """Pull the message out of an NS1 error body, if it has one."""
    try:
        data = json.loads(text)
    except (ValueError, json.JSONDecodeError):
        return text.strip() or reason
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return text.strip() or reason


class JobsService:
    """Monitoring job endpoints."""

    def __init__(self, client: "NS1Client"):
        self._client = client

    async def create(self, job: MonitoringJob) -> MonitoringJob:
        """Create a job; the response carries the server-assigned id."""
        data = await self._client.request("PUT", "monitoring/jobs", job.to_api())
        return MonitoringJob.from_api(data)

    async def get(self, job_id: str) -> MonitoringJob:
        data = await self._client.request("GET", f"monitoring/jobs/{job_id}")
        return MonitoringJob.from_api(data)

    async def update(self, job: MonitoringJob) -> MonitoringJob:
        data = await self._client.request(
            "POST", f"monitoring/jobs/{job.id}", job.to_api()
        )
        return MonitoringJob.from_api(data)

    async def delete(self, job_id: str) -> None:
        await self._client.request("DELETE", f"monitoring/jobs/{job_id}")


class NS1Client:
    """
    Thin asynchronous client for the NS1 REST API.

    Use as an async context manager so the underlying session is closed:

        async with NS1Client(api_key) as client:
            job = await client.jobs.get(job_id)
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str = DEFAULT_ENDPOINT,
        ignore_ssl: bool = False,
        timeout: int = 30,
    ):
        self.api_key = api_key
        self.endpoint = endpoint if endpoint.endswith("/") else f"{endpoint}/"
        self.ignore_ssl = ignore_ssl
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None
        self.jobs = JobsService(self)

    @classmethod
    def from_config(cls, config: NS1Config) -> "NS1Client":
        return cls(
            api_key=config.api_key,
            endpoint=config.endpoint,
            ignore_ssl=config.ignore_ssl,
            timeout=config.timeout,
        )

    async def __aenter__(self) -> "NS1Client":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    def _get_headers(self) -> Dict[str, str]:
        """Get HTTP headers for NS1 API requests."""
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "X-NSONE-Key": self.api_key,
        }

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(ssl=False) if self.ignore_ssl else None
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def request(
        self, method: str, path: str, body: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Send one request and decode the JSON response.

        Raises:
            NS1Error: On any non-2xx status or transport failure.
        """
        url = f"{self.endpoint}{path}"
        session = self._get_session()
        logger.debug(f"NS1 request: {method} {url}")

        try:
            async with session.request(
                method, url, headers=self._get_headers(), json=body
            ) as response:
                text = await response.text()
                if response.status >= 300:
                    message = _error_message(text, response.reason or "")
                    raise NS1Error(method, url, response.status, message, text)
        except asyncio.TimeoutError:
            raise NS1Error(method, url, None, f"timed out after {self.timeout}s")
        except aiohttp.ClientError as e:
            raise NS1Error(method, url, None, str(e))

        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise NS1Error(
                method, url, response.status, f"invalid JSON response: {e}", text
            )
