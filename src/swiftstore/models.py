"""
Data models for the Swift object store client
"""

import hashlib
import mimetypes
import posixpath
from dataclasses import dataclass, field
from datetime import datetime
from email.utils import format_datetime, parsedate_to_datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import httpx

from .metadata import ContainerMetadata, Metadata, ObjectMetadata


PUBLIC_READ_ACL = ".r:*"

# plain headers that cannot be changed by a metadata update
NON_UPDATABLE_HEADERS = ("etag", "content-length", "content-type")


def _route_headers(headers: Mapping[str, Any], bag: httpx.Headers, metadata: Metadata) -> None:
    for name, value in headers.items():
        if metadata.is_prefixed_key(name):
            metadata.set(name, value)
            continue
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(v) for v in value)
        bag[name] = str(value)


def _update_headers(bag: httpx.Headers, metadata: Metadata) -> Dict[str, str]:
    headers = {
        name: value
        for name, value in bag.items()
        if name.lower() not in NON_UPDATABLE_HEADERS
    }
    return {**metadata.get_headers(), **headers}


@dataclass(eq=False)
class Container:
    """Represents a container in the object store."""
    name: str
    private: bool = True
    object_count: Optional[int] = None
    bytes_used: Optional[int] = None
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    metadata: ContainerMetadata = field(default_factory=ContainerMetadata)

    @classmethod
    def create(cls, name: str, headers: Optional[Mapping[str, Any]] = None) -> "Container":
        """Build a container from response headers."""
        container = cls(name)
        container.set_headers(headers or {})

        if PUBLIC_READ_ACL in (container.metadata.get("Read") or ""):
            container.set_public()
        else:
            container.set_private()

        count = container.headers.get("X-Container-Object-Count")
        if count is not None:
            container.set_object_count(count)

        used = container.headers.get("X-Container-Bytes-Used")
        if used is not None:
            container.set_bytes_used(used)

        return container

    def set_private(self) -> None:
        self.private = True

    def set_public(self) -> None:
        self.private = False

    def is_private(self) -> bool:
        return self.private

    def is_public(self) -> bool:
        return not self.private

    def set_headers(self, headers: Mapping[str, Any]) -> None:
        _route_headers(headers, self.headers, self.metadata)

    def get_headers(self) -> Dict[str, str]:
        return {**dict(self.headers), **self.metadata.get_headers()}

    def get_update_headers(self) -> Dict[str, str]:
        return _update_headers(self.headers, self.metadata)

    def get_header(self, name: str) -> Optional[str]:
        return self.headers.get(name)

    def set_object_count(self, count: Union[int, str]) -> None:
        self.object_count = int(count)

    def set_bytes_used(self, used: Union[int, str]) -> None:
        self.bytes_used = int(used)

    def is_empty(self) -> bool:
        return self.object_count == 0


@dataclass(eq=False)
class SwiftObject:
    """
    Represents an object stored in a container.

    The container is referenced, not owned: several objects share the same
    Container instance. Two objects compare equal when their ETags match.
    """
    container: Container
    name: str
    body: Any = None
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    metadata: ObjectMetadata = field(default_factory=ObjectMetadata)
    local_file: Optional[Path] = None

    @classmethod
    def create(
        cls,
        container: Container,
        name: str,
        headers: Optional[Mapping[str, Any]] = None,
        body: Any = None,
    ) -> "SwiftObject":
        obj = cls(container, name)
        obj.set_headers(headers or {})
        obj.body = body
        return obj

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SwiftObject):
            return NotImplemented
        return self.etag == other.etag

    __hash__ = None

    @property
    def path(self) -> str:
        return f"{self.container.name}/{self.name}"

    @property
    def extension(self) -> str:
        return posixpath.splitext(self.name)[1].lstrip(".")

    def basename(self, suffix: Optional[str] = None) -> str:
        base = posixpath.basename(self.name.rstrip("/"))
        if suffix and base.endswith(suffix) and base != suffix:
            base = base[: -len(suffix)]
        return base

    def set_headers(self, headers: Mapping[str, Any]) -> None:
        _route_headers(headers, self.headers, self.metadata)

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("Content-Type")

    @content_type.setter
    def content_type(self, content_type: str) -> None:
        self.headers["Content-Type"] = content_type

    @property
    def content_length(self) -> Optional[Union[int, str]]:
        length = self.headers.get("Content-Length")
        if length is not None and length.isdigit():
            return int(length)
        return length

    @content_length.setter
    def content_length(self, length: Union[int, str]) -> None:
        if isinstance(length, bool) or not str(length).isdigit():
            raise ValueError("content_length expects an integer")
        self.headers["Content-Length"] = str(int(length))

    @property
    def etag(self) -> Optional[str]:
        return self.headers.get("ETag")

    @etag.setter
    def etag(self, etag: str) -> None:
        self.headers["ETag"] = etag

    @property
    def last_modified(self) -> Optional[datetime]:
        value = self.headers.get("Last-Modified")
        if value is None:
            return None
        return parsedate_to_datetime(value)

    @last_modified.setter
    def last_modified(self, value: datetime) -> None:
        self.headers["Last-Modified"] = format_datetime(value)

    def is_pseudo_dir(self) -> bool:
        return self.name.endswith("/")

    def set_local_file(self, path: Union[str, Path]) -> None:
        """Stage a local file as the body, deriving type, length and ETag from it."""
        path = Path(path)
        data = path.read_bytes()

        self.local_file = path
        self.body = data
        self.content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        self.content_length = len(data)
        self.etag = hashlib.md5(data).hexdigest()

    def get_headers(self) -> Dict[str, str]:
        return {**dict(self.headers), **self.metadata.get_headers()}

    def get_update_headers(self) -> Dict[str, str]:
        return _update_headers(self.headers, self.metadata)
