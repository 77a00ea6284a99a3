"""
ObjectStore - caching façade over a SwiftDriver
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import httpx

from .driver import SwiftDriver
from .error import SwiftException
from .models import Container, SwiftObject


class ObjectStore:
    """
    High level access to containers and objects.

    Keeps an in-memory cache of fetched containers (one instance per name)
    and checks preconditions before handing requests to the driver. The
    cache is not safe for concurrent use by several tasks.

    Example:
        async with ObjectStore(SwiftDriver(endpoint, token=token)) as store:
            container = await store.create_container("photos", private=False)
            obj = await store.create_object(container, "2024/cat.jpg")
            obj.set_local_file("cat.jpg")
            await store.update_object(obj)
            url = store.get_object_url(obj)
    """

    def __init__(self, driver: SwiftDriver):
        self.driver = driver
        self._containers: Dict[str, Optional[Container]] = {}

    # Raw requests

    async def head(
        self,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        return await self.driver.head(path, query, headers)

    async def get(
        self,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        return await self.driver.get(path, query, headers)

    async def put(
        self,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
    ) -> httpx.Response:
        return await self.driver.put(path, query, headers, body)

    async def post(
        self,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
    ) -> httpx.Response:
        return await self.driver.post(path, query, headers, body)

    async def copy(
        self,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        return await self.driver.copy(path, query, headers)

    async def delete(
        self,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
    ) -> httpx.Response:
        return await self.driver.delete(path, query, headers, body)

    def get_object_url(self, obj: SwiftObject) -> str:
        """Return the public URL of an object; refused for private containers."""
        if obj.container.is_private():
            raise SwiftException("Object container is private")
        return self.driver.get_object_url(obj)

    # Containers

    async def create_container(self, name: str, private: bool = True) -> Container:
        if name not in self._containers or self._containers[name] is None:
            container = Container(name)
            if private:
                container.set_private()
            else:
                container.set_public()

            if not await self.driver.create_container(container):
                raise SwiftException(f"Could not create container {name}")

            self._containers[name] = container

        return self._containers[name]

    async def container_exists(self, container: Container) -> bool:
        return bool(await self.driver.container_exists(container))

    async def get_container(self, name: str) -> Optional[Container]:
        """Fetch a container, caching the result (a miss is cached as None)."""
        if name not in self._containers:
            self._containers[name] = await self.driver.get_container(name)
        return self._containers[name]

    async def update_container(self, container: Container) -> bool:
        return await self.driver.update_container(container)

    async def delete_container(self, container: Container) -> bool:
        if await self.driver.delete_container(container):
            self._containers.pop(container.name, None)
            return True
        return False

    # Objects

    async def object_exists(self, obj: SwiftObject) -> bool:
        return bool(await self.driver.object_exists(obj))

    async def create_object(self, container: Container, name: str) -> SwiftObject:
        # make sure the container exists before objects are put in it
        if not await self.container_exists(container):
            await self.driver.create_container(container)

        return self.driver.create_object(container, name)

    async def get_object(self, container: Container, name: str) -> Optional[SwiftObject]:
        return await self.driver.get_object(container, name)

    async def get_objects(
        self,
        container: Container,
        prefix: Optional[str] = None,
        delimiter: Optional[str] = None,
        limit: Optional[int] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[SwiftObject]:
        # with a delimiter, the prefix must end with it to list a pseudo-directory
        if prefix is not None and delimiter is not None:
            prefix = prefix.rstrip(delimiter) + delimiter

        return await self.driver.get_objects(container, prefix, delimiter, limit, start, end)

    async def get_object_content(
        self,
        obj: SwiftObject,
        as_text: bool = False,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Union[bytes, str]:
        return await self.driver.get_object_content(obj, as_text, headers)

    async def update_object(self, obj: SwiftObject) -> bool:
        if obj.local_file is None and not await self.object_exists(obj):
            raise SwiftException("Cannot update a new object without a body")

        return await self.driver.update_object(obj)

    async def update_object_metadata(self, obj: SwiftObject) -> bool:
        return await self.driver.update_object_metadata(obj)

    async def delete_object(self, obj: SwiftObject) -> bool:
        return await self.driver.delete_object(obj)

    async def delete_objects(self, objects: Iterable[SwiftObject]) -> int:
        return await self.driver.delete_objects(objects)

    async def copy_object(
        self,
        obj: SwiftObject,
        destination: Container,
        name: Optional[str] = None,
    ) -> Optional[SwiftObject]:
        if name is None:
            name = obj.name

        if obj.container.name == destination.name and obj.name == name:
            raise SwiftException("Destination is same as source")

        return await self.driver.copy_object(obj, destination, name)

    def clear(self) -> None:
        """Clear the container cache."""
        self._containers = {}

    async def close(self) -> None:
        await self.driver.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
