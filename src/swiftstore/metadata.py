"""
Prefixed metadata bags for containers and objects
"""

import re
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple


class Metadata:
    """
    Case-insensitive key/value store mapped to and from prefixed HTTP headers.

    Keys are stored without the prefix, lowercased, with underscores turned
    into dashes, so ``Foo_Bar``, ``foo-bar`` and ``X-Object-Meta-Foo-Bar``
    all address the same entry.
    """

    prefix: str = ""

    def __init__(self, metadata: Optional[Mapping[str, Any]] = None):
        self._metadata: Dict[str, Optional[str]] = {}
        self.replace(metadata or {})

    def __str__(self) -> str:
        if not self._metadata:
            return ""

        width = max(len(key) for key in self._metadata) + 1
        lines = []
        for key in sorted(self._metadata):
            name = "-".join(part[:1].upper() + part[1:] for part in key.split("-"))
            lines.append(f"{name + ':':<{width}} {self._metadata[key]}\r\n")
        return "".join(lines)

    def __iter__(self) -> Iterator[Tuple[str, Optional[str]]]:
        return iter(list(self._metadata.items()))

    def __len__(self) -> int:
        return len(self._metadata)

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def all(self) -> Dict[str, Optional[str]]:
        return dict(self._metadata)

    def keys(self) -> List[str]:
        return list(self._metadata)

    def replace(self, metadata: Mapping[str, Any]) -> None:
        self._metadata = {}
        self.add(metadata)

    def add(self, metadata: Mapping[str, Any]) -> None:
        for key, value in metadata.items():
            self.set(key, value)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._metadata.get(self._normalize_key(key), default)

    def set(self, key: str, value: Any) -> None:
        """Store a value as a string; for list values only the first element is kept."""
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        if value is not None:
            value = str(value)
        self._metadata[self._normalize_key(key)] = value

    def has(self, key: str) -> bool:
        return self._normalize_key(key) in self._metadata

    def remove(self, key: str) -> None:
        self._metadata.pop(self._normalize_key(key), None)

    def get_headers(self) -> Dict[str, Optional[str]]:
        """Return the metadata as fully-qualified request headers."""
        return {
            self._normalize_header(key): value
            for key, value in self._metadata.items()
            if value is not None
        }

    def is_prefixed_key(self, key: str) -> bool:
        return key.lower().startswith(self.prefix.lower())

    def _unprefixed_key(self, key: str) -> str:
        return re.sub("^" + re.escape(self.prefix), "", key, flags=re.IGNORECASE)

    def _normalize_key(self, key: str) -> str:
        return self._unprefixed_key(key).lower().replace("_", "-")

    def _normalize_header(self, key: str) -> str:
        header = (self.prefix + self._unprefixed_key(key)).lower()
        return "-".join(part.capitalize() for part in header.split("-"))


class ContainerMetadata(Metadata):
    prefix = "X-Container-Meta-"


class ObjectMetadata(Metadata):
    prefix = "X-Object-Meta-"
