"""
SwiftDriver - HTTP driver for OpenStack Swift style object storage
"""

import json
import logging
from datetime import datetime, UTC
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
from urllib.parse import quote

import httpx

from ._http import BatchRequest, HttpClient
from .error import BatchException, SwiftException, UnexpectedStatusException
from .models import PUBLIC_READ_ACL, Container, SwiftObject


class Outcome(Enum):
    """What an accepted response status means for an operation."""
    OK = "ok"
    MISSING = "missing"


# Accepted statuses per operation. Any other status raises
# UnexpectedStatusException.
STATUS_TABLE: Dict[str, Dict[int, Outcome]] = {
    "container_exists": {204: Outcome.OK, 404: Outcome.MISSING},
    "create_container": {201: Outcome.OK, 202: Outcome.OK},
    "get_container": {204: Outcome.OK, 404: Outcome.MISSING},
    "update_container": {204: Outcome.OK},
    "delete_container": {204: Outcome.OK, 404: Outcome.OK},
    "list_objects": {200: Outcome.OK, 204: Outcome.OK, 404: Outcome.MISSING},
    "object_exists": {204: Outcome.OK, 404: Outcome.MISSING},
    "get_object": {204: Outcome.OK, 404: Outcome.MISSING},
    "head_object": {200: Outcome.OK, 204: Outcome.OK},
    "get_object_content": {200: Outcome.OK},
    "update_object": {201: Outcome.OK},
    "update_object_metadata": {202: Outcome.OK},
    "delete_object": {204: Outcome.OK, 404: Outcome.OK},
    "batch_delete_object": {204: Outcome.OK, 404: Outcome.MISSING},
    "copy_object": {201: Outcome.OK},
}

DIRECTORY_CONTENT_TYPE = "application/directory"


class SwiftDriver:
    """
    Translates container and object operations into Swift HTTP requests.

    Example:
        driver = SwiftDriver(
            endpoint="swift.example.org/v1/AUTH_account",
            token="AUTH_tk...",
            use_ssl=True,
        )

        container = await driver.get_container("photos")
        objects = await driver.get_objects(container, prefix="2024/", delimiter="/")
    """

    def __init__(
        self,
        endpoint: str = "localhost:8080",
        token: Optional[str] = None,
        use_ssl: bool = False,
        request_timeout: int = 30,
        max_concurrency: int = 25,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize SwiftDriver.

        Args:
            endpoint: Storage URL, either host[:port][/path] or a full URL
            token: Auth token sent as X-Auth-Token, issued by an external auth service
            use_ssl: Use HTTPS when the endpoint carries no scheme
            request_timeout: Request timeout in seconds
            max_concurrency: Maximum number of requests in flight during a batch
            transport: Optional httpx transport, mainly for tests
        """
        self.endpoint = endpoint
        self.use_ssl = use_ssl
        self.base_url = self._to_base_url(endpoint)

        self._http = HttpClient(
            self.base_url,
            token=token,
            timeout=request_timeout,
            max_concurrency=max_concurrency,
            transport=transport,
        )
        self._logger = logging.getLogger(__name__)

    def _to_base_url(self, endpoint: str) -> str:
        """Normalize endpoint value to base URL form."""
        if endpoint.startswith("http://") or endpoint.startswith("https://"):
            return endpoint.rstrip("/")
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{endpoint}".rstrip("/")

    @property
    def client(self) -> httpx.AsyncClient:
        return self._http.client

    # Raw requests

    async def head(
        self,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        return await self._request("HEAD", path, query, headers)

    async def get(
        self,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        return await self._request("GET", path, query, headers)

    async def put(
        self,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
    ) -> httpx.Response:
        return await self._request("PUT", path, query, headers, body)

    async def post(
        self,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
    ) -> httpx.Response:
        return await self._request("POST", path, query, headers, body)

    async def copy(
        self,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        return await self._request("COPY", path, query, headers)

    async def delete(
        self,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
    ) -> httpx.Response:
        return await self._request("DELETE", path, query, headers, body)

    async def _request(
        self,
        method: str,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
    ) -> httpx.Response:
        return await self._http.request(
            method,
            quote(path, safe="/~"),
            params=query,
            headers=headers,
            content=body,
        )

    def _assert_response(self, response: httpx.Response, operation: str) -> Outcome:
        """Map a response status to the operation's outcome, or raise."""
        statuses = STATUS_TABLE[operation]
        try:
            return statuses[response.status_code]
        except KeyError:
            raise UnexpectedStatusException(response.status_code, statuses) from None

    def get_object_url(self, obj: SwiftObject) -> str:
        return f"{self.base_url}/{quote(obj.path, safe='/~')}"

    # Container operations

    async def container_exists(self, container: Container) -> bool:
        response = await self.head(container.name)
        return self._assert_response(response, "container_exists") is Outcome.OK

    async def create_container(self, container: Container) -> bool:
        if container.is_public():
            container.metadata.set("Read", PUBLIC_READ_ACL)

        response = await self.put(container.name, headers=container.get_update_headers())
        return self._assert_response(response, "create_container") is Outcome.OK

    async def get_container(self, name: str) -> Optional[Container]:
        response = await self.head(name)
        if self._assert_response(response, "get_container") is Outcome.MISSING:
            return None
        return Container.create(name, response.headers)

    async def update_container(self, container: Container) -> bool:
        self._logger.info('Updating container "%s"', container.name)

        if container.is_public():
            container.metadata.set("Read", PUBLIC_READ_ACL)

        response = await self.post(container.name, headers=container.get_update_headers())
        return self._assert_response(response, "update_container") is Outcome.OK

    async def delete_container(self, container: Container) -> bool:
        """Delete a container after removing every object in it."""
        self._logger.info('Deleting container "%s"', container.name)

        for obj in await self.get_objects(container):
            await self.delete_object(obj)

        response = await self.delete(container.name)
        return self._assert_response(response, "delete_container") is Outcome.OK

    # Object operations

    async def object_exists(self, obj: SwiftObject) -> bool:
        response = await self.head(obj.path)
        return self._assert_response(response, "object_exists") is Outcome.OK

    def create_object(
        self,
        container: Container,
        name: str,
        response: Optional[httpx.Response] = None,
    ) -> SwiftObject:
        """Build an object locally, optionally from a HEAD/GET response."""
        headers = response.headers if response is not None else {}
        return SwiftObject.create(container, name, headers)

    async def get_object(self, container: Container, name: str) -> Optional[SwiftObject]:
        response = await self.head(f"{container.name}/{name}")
        if self._assert_response(response, "get_object") is Outcome.MISSING:
            return None
        return self.create_object(container, name, response)

    async def get_object_content(
        self,
        obj: SwiftObject,
        as_text: bool = False,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Union[bytes, str]:
        response = await self.get(obj.path, headers=headers)
        self._assert_response(response, "get_object_content")
        return response.text if as_text else response.content

    async def get_objects(
        self,
        container: Container,
        prefix: Optional[str] = None,
        delimiter: Optional[str] = None,
        limit: Optional[int] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[SwiftObject]:
        """
        List objects in a container, in the order the server lists them.

        Entries ending with the delimiter are pseudo-directories and are built
        locally. Every other entry is fetched with a HEAD request; those run
        concurrently and their results are put back in listing order.
        """
        query: Dict[str, Any] = {}
        if prefix is not None:
            query["prefix"] = prefix
        if delimiter is not None:
            query["delimiter"] = delimiter
        if limit is not None:
            query["limit"] = limit
        if start is not None:
            query["marker"] = start
        if end is not None:
            query["end_marker"] = end

        self._logger.info('Listing objects in container "%s" %s', container.name, query)

        response = await self.get(container.name, query)
        if self._assert_response(response, "list_objects") is Outcome.MISSING:
            return []

        content = response.text.strip()
        if not content:
            return []

        names = content.split("\n")
        result: Dict[str, Optional[SwiftObject]] = {}
        requests: List[BatchRequest] = []
        for name in names:
            if delimiter is not None and name.endswith(delimiter):
                obj = SwiftObject.create(container, name)
                obj.content_type = DIRECTORY_CONTENT_TYPE
                result[name] = obj
                self._logger.debug('=> "%s"', obj.path)
            elif name not in result:
                path = f"{container.name}/{name}"
                requests.append(BatchRequest(name, "HEAD", quote(path, safe="/~")))
                result[name] = None
                self._logger.debug('=> "%s"', path)

        if requests:
            self._logger.info("Getting objects metadata")
            batch = await self._http.batch(requests)

            failures: Dict[str, Exception] = dict(batch.failures)
            for name, head in batch.responses.items():
                try:
                    self._assert_response(head, "head_object")
                except UnexpectedStatusException as ex:
                    failures[name] = SwiftException(
                        f'HEAD "{container.name}/{name}" returned {ex.status_code}',
                        status_code=ex.status_code,
                    )
                    continue
                result[name] = self.create_object(container, name, head)

            if failures:
                raise BatchException(
                    'Could not get all objects for container "%s" with params %s. Failed requests:'
                    % (container.name, json.dumps(query)),
                    {name: failures[name] for name in names if name in failures},
                )

        return list(result.values())

    async def update_object(self, obj: SwiftObject) -> bool:
        """Persist the object's container, then its content or metadata."""
        await self.update_container(obj.container)

        if obj.local_file is None:
            return await self.update_object_metadata(obj)

        obj.last_modified = datetime.now(UTC)

        self._logger.info('Updating object "%s"', obj.path)

        headers = obj.get_update_headers()
        for name in ("Content-Type", "ETag"):
            value = obj.headers.get(name)
            if value is not None:
                headers[name] = value

        response = await self.put(obj.path, headers=headers, body=obj.body)
        return self._assert_response(response, "update_object") is Outcome.OK

    async def update_object_metadata(self, obj: SwiftObject) -> bool:
        self._logger.info('Updating metadata for "%s"', obj.path)

        response = await self.post(obj.path, headers=obj.get_update_headers())
        return self._assert_response(response, "update_object_metadata") is Outcome.OK

    async def delete_object(self, obj: SwiftObject) -> bool:
        self._logger.info('Deleting "%s"', obj.path)

        response = await self.delete(obj.path)
        return self._assert_response(response, "delete_object") is Outcome.OK

    async def delete_objects(self, objects: Iterable[SwiftObject]) -> int:
        """
        Delete objects concurrently and return how many were actually removed.

        Pseudo-directories are skipped and objects that are already gone
        (404) are not counted, but do not fail the batch.
        """
        requests = []
        paths: Dict[str, str] = {}
        for obj in objects:
            if obj.is_pseudo_dir():
                continue
            # Repeated objects are sent once per occurrence and keep their own result.
            key = obj.path
            occurrence = 1
            while key in paths:
                occurrence += 1
                key = f"{obj.path}#{occurrence}"
            paths[key] = obj.path
            requests.append(BatchRequest(key, "DELETE", quote(obj.path, safe="/~")))
            self._logger.debug('Deleting "%s"', obj.path)

        removed = 0
        if requests:
            batch = await self._http.batch(requests)

            failures: Dict[str, Exception] = dict(batch.failures)
            for key, response in batch.responses.items():
                try:
                    outcome = self._assert_response(response, "batch_delete_object")
                except UnexpectedStatusException as ex:
                    failures[key] = SwiftException(f'DELETE "{paths[key]}": {ex}', status_code=ex.status_code)
                    continue
                if outcome is Outcome.OK:
                    removed += 1

            if failures:
                failures = {key: failures[key] for key in paths if key in failures}
                for failure in failures.values():
                    self._logger.error("Error deleting: %s", failure)
                raise BatchException("Could not delete all objects.", failures)

        self._logger.info("Deleted %d objects", removed)
        return removed

    async def copy_object(self, obj: SwiftObject, to_container: Container, name: str) -> Optional[SwiftObject]:
        """Copy an object server-side and return the freshly fetched copy."""
        destination = quote(f"/{to_container.name}/{name}", safe="/~")

        self._logger.info('Copying "%s" => "%s"', obj.path, destination)

        response = await self.copy(obj.path, headers={"Destination": destination})
        self._assert_response(response, "copy_object")

        return await self.get_object(to_container, name)

    async def close(self) -> None:
        """Close the driver and cleanup resources."""
        await self._http.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
