"""
HTTP client utilities for the Swift object store client
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import httpx

from .error import TransportException


logger = logging.getLogger(__name__)


@dataclass
class BatchRequest:
    """One request of a parallel batch, tagged with the key it answers for."""
    key: str
    method: str
    path: str
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class BatchResult:
    """Outcome of a batch, keyed by request key."""
    responses: Dict[str, httpx.Response] = field(default_factory=dict)
    failures: Dict[str, Exception] = field(default_factory=dict)


class HttpClient:
    """
    HTTP client wrapper with connection pooling and bounded parallel batches.

    Responses are returned for every status code; only failures where no
    response was received are raised, as TransportException.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: int = 30,
        max_concurrency: int = 25,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_concurrency = max_concurrency

        headers = {"X-Auth-Token": token} if token else None
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
            limits=httpx.Limits(max_connections=100, max_keepalive_connections=100),
        )

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        content: Optional[Any] = None,
    ) -> httpx.Response:
        """Send a request and return the response, whatever its status."""
        path = path.lstrip("/")
        logger.debug("%s %s params=%s", method, path, params)
        try:
            return await self._client.request(
                method,
                path,
                params=params or None,
                headers=headers,
                content=content,
            )
        except httpx.HTTPError as ex:
            logger.error("%s %s failed: %s", method, path, ex)
            raise TransportException(f"{method} {path} failed: {ex}") from ex

    async def batch(self, requests: List[BatchRequest]) -> BatchResult:
        """
        Run requests concurrently and collect their results by key.

        Completion order is not preserved; callers rebuild ordering from
        their own key sequence. Keys must be unique within a batch. Every
        request has finished by the time this returns, even when one of
        them raises something other than a TransportException.
        """
        keys = [item.key for item in requests]
        if len(set(keys)) != len(keys):
            raise ValueError("Batch request keys must be unique")

        result = BatchResult()
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def send(item: BatchRequest) -> None:
            async with semaphore:
                try:
                    response = await self.request(item.method, item.path, headers=item.headers)
                except TransportException as ex:
                    result.failures[item.key] = ex
                    return
            result.responses[item.key] = response

        async with asyncio.TaskGroup() as group:
            for item in requests:
                group.create_task(send(item))
        return result

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
