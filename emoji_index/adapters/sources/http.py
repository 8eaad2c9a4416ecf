# emoji_index/adapters/sources/http.py
import asyncio
from typing import Any, Dict, Optional

import requests
import structlog
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from emoji_index.core.domain.exceptions import (
    DecodingFailedError,
    InvalidResponseError,
    InvalidURLError,
    NetworkUnavailableError,
)

logger = structlog.get_logger()

_TRANSIENT_ERRORS = (requests.ConnectionError, requests.Timeout)


class JsonHttpClient:
    """
    Small blocking JSON client shared by the HTTP data sources.
    Calls run in a worker thread so the event loop is never blocked.

    Connection errors and timeouts are retried (``attempts`` in total, backing
    off with ``wait``); HTTP error statuses are not.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        attempts: int = 3,
        wait=None,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout
        self._retrying = Retrying(
            stop=stop_after_attempt(max(1, attempts)),
            wait=wait if wait is not None else wait_exponential(multiplier=1, min=1, max=8),
            retry=retry_if_exception_type(_TRANSIENT_ERRORS),
            reraise=True,
        )

    async def get_json(self, url: Optional[str], headers: Optional[Dict[str, str]] = None) -> Any:
        return await asyncio.to_thread(self._get_json_sync, url, headers)

    def _get_json_sync(self, url: Optional[str], headers: Optional[Dict[str, str]]) -> Any:
        if not url or not url.startswith(("http://", "https://")):
            raise InvalidURLError(url)

        try:
            response = self._retrying(self.session.get, url, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("http_fetch_failed", url=url, error=str(e))
            raise NetworkUnavailableError(f"Network unavailable: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.warning("http_bad_status", url=url, status=response.status_code)
            raise InvalidResponseError(response.status_code, url)

        try:
            return response.json()
        except ValueError as e:
            raise DecodingFailedError(f"Failed to decode emoji data: {e}") from e


__all__ = ["JsonHttpClient"]
