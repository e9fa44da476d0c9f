"""
Async HTTP fetch abstraction

Source adapters never touch the transport directly; they are handed a
``Fetcher`` whose only job is "GET this URL as JSON within this timeout".
The default implementation keeps one pooled ``httpx.AsyncClient`` and turns
transport problems into the pipeline's error taxonomy, keeping timeouts
distinct from other network failures.
"""

import json
from typing import Any, Dict, Optional, Protocol

import httpx

from goldcast.data.errors import MalformedPayloadError, NetworkFailureError, SourceTimeoutError
from goldcast.utils.logger import get_logger


class Fetcher(Protocol):
    """Anything that can GET a JSON document under a timeout."""

    async def get_json(
        self, url: str, params: Optional[Dict[str, Any]] = None, timeout: float = 10.0
    ) -> Any:
        ...


class HttpxFetcher:
    """
    ``Fetcher`` backed by a shared ``httpx.AsyncClient``.

    Attributes:
        source_name (str): Label used in raised errors and log lines.
        headers (Dict[str, str]): Default request headers.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        headers: Optional[Dict[str, str]] = None,
        source_name: str = "http",
    ):
        self.headers = headers or {"Accept": "application/json", "User-Agent": "goldcast/0.1"}
        self.source_name = source_name
        self._client = client
        self._owns_client = client is None
        self.logger = get_logger(self.__class__.__name__)

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(headers=self.headers)
        return self._client

    async def get_json(
        self, url: str, params: Optional[Dict[str, Any]] = None, timeout: float = 10.0
    ) -> Any:
        """
        Perform a single GET and decode the body as JSON.

        Raises:
            SourceTimeoutError: The request exceeded ``timeout`` seconds.
            NetworkFailureError: Transport error or non-2xx response.
            MalformedPayloadError: Body is not valid JSON.
        """
        self.logger.debug(f"GET {url} params={params} timeout={timeout}")
        try:
            response = await self.client.get(url, params=params, timeout=timeout)
            response.raise_for_status()  # Raise an error for HTTP 4xx/5xx responses
        except httpx.TimeoutException as exc:
            raise SourceTimeoutError(self.source_name, timeout) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise NetworkFailureError(
                self.source_name, f"HTTP {status} from {url}", status_code=status
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkFailureError(self.source_name, f"{type(exc).__name__}: {exc}") from exc

        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise MalformedPayloadError(self.source_name, f"Invalid JSON from {url}") from exc

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpxFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
