"""
Resilient HTTP access to NCBI E-utilities.

NCBI throttles clients hard (3 req/s without an API key) and occasionally
answers with 5xx under load, so every request goes through a small retry
loop: rate-limit and server-class statuses, as well as network-level
failures, are retried after a fixed backoff until the budget is spent.

Uses httpx.AsyncClient for non-blocking HTTP requests.
"""
import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional
from xml.etree import ElementTree as ET

import httpx

from evidence_miner.core.config import settings
from evidence_miner.core.exceptions import ParseError, TransportError
from evidence_miner.core.logging import get_logger

logger = get_logger(__name__)

SOURCE_NAME = "NCBI E-utilities"

Sleeper = Callable[[float], Awaitable[Any]]


def _is_transient(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


class ResilientFetcher:
    """
    HTTP requests with bounded retry/backoff.

    ``max_retries`` counts retries after the first attempt, so the default
    of 3 allows up to four requests. The fetcher knows nothing about
    payload shape beyond decoding JSON or XML.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        max_retries: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        timeout: Optional[float] = None,
        default_params: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Sleeper = asyncio.sleep,
        source_name: str = SOURCE_NAME,
    ):
        self.base_url = (base_url or settings.EUTILS_BASE_URL).rstrip("/")
        self.max_retries = settings.fetch_max_retries if max_retries is None else max_retries
        self.backoff_seconds = (
            settings.fetch_backoff_seconds if backoff_seconds is None else backoff_seconds
        )
        self.timeout = timeout or settings.http_timeout_seconds
        self.default_params = dict(default_params or {})
        self.source_name = source_name
        self._transport = transport
        self._sleep = sleep
        self._headers = {
            "User-Agent": f"EvidenceMiner/1.0 (mailto:{settings.API_CONTACT_EMAIL})"
        }

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _merge_params(self, params):
        # Lists of tuples keep repeated keys (elink needs one id= per source)
        if params is None:
            return list(self.default_params.items())
        if isinstance(params, dict):
            params = list(params.items())
        return list(params) + list(self.default_params.items())

    async def request(
        self,
        endpoint: str,
        params=None,
        method: str = "GET",
        data: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """
        Perform one logical request, retrying transient failures.

        Raises:
            TransportError: non-retryable status, or retry budget exhausted
        """
        url = self.url_for(endpoint)
        query = self._merge_params(params)
        attempts = 0

        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers=self._headers,
            transport=self._transport,
        ) as client:
            while True:
                attempts += 1
                try:
                    response = await client.request(method, url, params=query, data=data)
                except httpx.TransportError as e:
                    if attempts <= self.max_retries:
                        logger.warning(
                            f"{self.source_name} network error on {endpoint} ({e!r}), "
                            f"retry {attempts}/{self.max_retries} in {self.backoff_seconds}s"
                        )
                        await self._sleep(self.backoff_seconds)
                        continue
                    raise TransportError(self.source_name, attempts=attempts, detail=str(e)) from e

                if response.is_success:
                    return response

                if _is_transient(response.status_code) and attempts <= self.max_retries:
                    logger.warning(
                        f"{self.source_name} HTTP {response.status_code} on {endpoint}, "
                        f"retry {attempts}/{self.max_retries} in {self.backoff_seconds}s"
                    )
                    await self._sleep(self.backoff_seconds)
                    continue

                raise TransportError(
                    self.source_name,
                    status_code=response.status_code,
                    attempts=attempts,
                )

    async def get_json(self, endpoint: str, params=None) -> Dict[str, Any]:
        response = await self.request(endpoint, params=params)
        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(self.source_name, f"invalid JSON from {endpoint}: {e}") from e
        if not isinstance(data, dict):
            raise ParseError(self.source_name, f"expected a JSON object from {endpoint}")
        return data

    async def get_xml(self, endpoint: str, params=None) -> ET.Element:
        response = await self.request(endpoint, params=params)
        try:
            return ET.fromstring(response.content)
        except ET.ParseError as e:
            raise ParseError(self.source_name, f"invalid XML from {endpoint}: {e}") from e


def build_eutils_fetcher(transport: Optional[httpx.AsyncBaseTransport] = None) -> ResilientFetcher:
    """Fetcher preconfigured with the identification NCBI asks every client to send."""
    params = {
        "tool": settings.ncbi_tool,
        "email": settings.API_CONTACT_EMAIL,
    }
    if settings.NCBI_API_KEY:
        params["api_key"] = settings.NCBI_API_KEY
    return ResilientFetcher(default_params=params, transport=transport)
