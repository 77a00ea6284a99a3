import asyncio
from collections import defaultdict, deque
from urllib.parse import unquote

import httpx
import pytest
import pytest_asyncio

from swiftstore.driver import SwiftDriver
from swiftstore.store import ObjectStore


BASE_URL = "http://swift.example.org/v1/AUTH_test"


class FakeSwift:
    """
    Canned-response backend for httpx.MockTransport.

    Responses are queued per (method, path) and served in order; every
    request is recorded so tests can assert on what went over the wire.
    """

    def __init__(self):
        self._responses = defaultdict(deque)
        self.requests = []

    def add(self, method, path, status, headers=None, content=b"", delay=0.0, error=None):
        self._responses[(method, path)].append((status, headers or {}, content, delay, error))

    def calls(self, method=None):
        return [
            (request.method, self.path_of(request))
            for request in self.requests
            if method is None or request.method == method
        ]

    def pending(self):
        return {key: len(queue) for key, queue in self._responses.items() if queue}

    @staticmethod
    def path_of(request):
        prefix = httpx.URL(BASE_URL).path
        return unquote(request.url.path)[len(prefix) + 1:]

    async def handle(self, request):
        self.requests.append(request)
        key = (request.method, self.path_of(request))
        queue = self._responses.get(key)
        if not queue:
            return httpx.Response(599, text=f"unexpected request {key}")

        status, headers, content, delay, error = queue.popleft()
        if delay:
            await asyncio.sleep(delay)
        if error is not None:
            raise error(f"{key} failed", request=request)
        return httpx.Response(status, headers=headers, content=content)


@pytest.fixture
def fake():
    return FakeSwift()


@pytest_asyncio.fixture
async def driver(fake):
    driver = SwiftDriver(endpoint=BASE_URL, token="AUTH_tk", transport=httpx.MockTransport(fake.handle))
    yield driver
    await driver.close()
    assert fake.pending() == {}, "not all responses were given"


@pytest_asyncio.fixture
async def store(driver):
    yield ObjectStore(driver)
