"""
swift-store - async client for OpenStack Swift style object storage
"""

__version__ = "1.0.0"

from .driver import SwiftDriver, STATUS_TABLE, Outcome
from .store import ObjectStore
from .models import Container, SwiftObject
from .metadata import Metadata, ContainerMetadata, ObjectMetadata
from .error import (
    SwiftException,
    UnexpectedStatusException,
    TransportException,
    BatchException,
)

__all__ = [
    "SwiftDriver",
    "STATUS_TABLE",
    "Outcome",
    "ObjectStore",
    "Container",
    "SwiftObject",
    "Metadata",
    "ContainerMetadata",
    "ObjectMetadata",
    "SwiftException",
    "UnexpectedStatusException",
    "TransportException",
    "BatchException",
]
