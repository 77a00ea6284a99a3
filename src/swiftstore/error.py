"""
Exception classes for the Swift object store client
"""

import json
from typing import Dict, Iterable, Optional


class SwiftException(Exception):
    """
    Base exception for all object store errors.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UnexpectedStatusException(SwiftException):
    """Thrown when a response status is not one the operation accepts."""

    def __init__(self, status_code: int, expected: Iterable[int]):
        self.expected = list(expected)
        super().__init__(
            f"Expected status to be one of {json.dumps(self.expected)}, but got {status_code}",
            status_code=status_code,
        )


class TransportException(SwiftException):
    """Thrown when no response could be obtained from the server."""


class BatchException(SwiftException):
    """Thrown when one or more requests in a batch failed."""

    def __init__(self, message: str, failures: Dict[str, Exception]):
        self.failures = failures
        lines = "\n".join(str(failure) for failure in failures.values())
        super().__init__(f"{message}\n{lines}" if lines else message)
