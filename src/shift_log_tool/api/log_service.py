"""
Client for the remote log service.

The service is a single JSON endpoint: POST stores a closing log, GET returns
stored logs (optionally only the latest N). Every response carries an `ok`
flag and, on failure, an `error` message.
"""

import asyncio
import json
from typing import Any, Dict, List, Optional

import aiohttp
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from ..core.config import AppConfig, DEFAULT_TIMEOUT
from ..core.errors import ShiftLogError
from ..utils.log_utils import get_logger

logger = get_logger(__name__)


class LogServiceError(ShiftLogError):
    """The log service rejected a request or could not be reached."""


class LogServiceClient:
    """Async client for the log service endpoint."""

    def __init__(self, api_url: Optional[str], timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize the client.

        Args:
            api_url: Endpoint URL of the log service.
            timeout: Total request timeout in seconds.

        Raises:
            ValueError: If no URL is configured.
        """
        if not api_url:
            raise ValueError("Log service URL not set (use --api-url or SHIFT_LOG_API_URL)")
        self.api_url = api_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    @classmethod
    def from_config(cls, config: AppConfig) -> "LogServiceClient":
        return cls(config.api_url, timeout=config.timeout)

    @staticmethod
    async def _read_json(response: aiohttp.ClientResponse) -> Dict[str, Any]:
        # the service sometimes answers with an HTML error page
        try:
            data = json.loads(await response.text())
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.debug("Non-JSON response (HTTP %d)", response.status)
            return {}
        return data if isinstance(data, dict) else {}

    async def save_log(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Store one closing log.

        Not retried: a repeated POST could store the log twice.

        Raises:
            LogServiceError: If the request fails or the service reports an error.
        """
        body = json.dumps(payload, ensure_ascii=False)
        logger.info("Uploading log (%d KB)", len(body.encode("utf-8")) // 1024)
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(
                    self.api_url,
                    data=body.encode("utf-8"),
                    # plain text keeps the request "simple", so the service needs no CORS preflight
                    headers={"Content-Type": "text/plain;charset=utf-8"},
                ) as response:
                    data = await self._read_json(response)
                    if response.status >= 400 or not data.get("ok"):
                        raise LogServiceError(data.get("error") or response.reason or f"HTTP {response.status}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            raise LogServiceError(f"Could not reach log service: {err}") from err
        logger.info("Log saved")
        return data

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((aiohttp.ClientError, asyncio.TimeoutError)),
        reraise=True,
    )
    async def _get_logs(self, params: Dict[str, str]) -> Dict[str, Any]:
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.get(self.api_url, params=params) as response:
                data = await self._read_json(response)
                if response.status >= 400 or not data.get("ok"):
                    raise LogServiceError(data.get("error") or "Failed to load history.")
                return data

    async def fetch_history(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Return stored logs, newest first as the service orders them.

        Args:
            limit: Only the latest `limit` logs; None fetches all of them.

        Raises:
            LogServiceError: If the service is unreachable or reports an error.
        """
        params = {"limit": str(limit)} if limit is not None else {}
        try:
            data = await self._get_logs(params)
        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            raise LogServiceError(f"Could not reach log service: {err}") from err

        logs = data.get("logs")
        if not isinstance(logs, list):
            logs = []
        return logs[:limit] if limit is not None else logs
