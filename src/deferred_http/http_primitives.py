"""
HTTP primitives for deferred_http.

This module defines the status code constants, the header type aliases,
the HTTP date helper and the immutable Response value returned when an
emitted response is read back.
"""

from dataclasses import dataclass, field
from email.utils import formatdate
from enum import IntEnum
from typing import Dict, List, Optional, Tuple, Union


# Type aliases for better readability
HeaderMap = Dict[str, str]
RawHeaders = List[Tuple[bytes, bytes]]
StatusCode = int


class Status(IntEnum):
    """Status codes a response can be given by symbolic name."""
    OK = 200
    FOUND = 302
    NOT_MODIFIED = 304
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501


def format_http_date(time_millis: Optional[Union[int, float]] = None) -> str:
    """
    Format a millisecond timestamp as an HTTP date.

    The result always uses GMT and English day and month names, e.g.
    ``Thu, 16 Mar 2000 11:00:00 GMT``. The function keeps no state, so it
    is safe to call from any number of threads at once.

    Args:
        time_millis: Milliseconds since the epoch, or None for the current time

    Returns:
        The formatted date
    """
    timeval = None if time_millis is None else time_millis / 1000.0
    return formatdate(timeval, usegmt=True)


@dataclass(frozen=True)
class Response:
    """
    Immutable HTTP response as read back from the wire.

    Header names keep the casing they were sent with; lookups through
    get_header are case-insensitive.
    """

    status_code: StatusCode
    headers: RawHeaders = field(default_factory=list)
    body: bytes = b""

    def __post_init__(self) -> None:
        """Validate response data after initialization."""
        if not isinstance(self.status_code, int):
            raise ValueError("status_code must be int")

        if not isinstance(self.headers, list):
            raise ValueError("headers must be a list")

        for name, value in self.headers:
            if not isinstance(name, bytes) or not isinstance(value, bytes):
                raise ValueError("header names and values must be bytes")

        if not isinstance(self.body, bytes):
            raise ValueError("body must be bytes")

    def get_header(self, name: Union[str, bytes]) -> Optional[bytes]:
        """Get a header value by name (case-insensitive)."""
        if isinstance(name, str):
            name = name.encode()

        name_lower = name.lower()
        for header_name, header_value in self.headers:
            if header_name.lower() == name_lower:
                return header_value

        return None

    def has_header(self, name: Union[str, bytes]) -> bool:
        """Check if a header exists (case-insensitive)."""
        return self.get_header(name) is not None

    def get_headers(self, name: Union[str, bytes]) -> List[bytes]:
        """Get every value sent for a header name (case-insensitive)."""
        if isinstance(name, str):
            name = name.encode()

        name_lower = name.lower()
        return [value for header_name, value in self.headers if header_name.lower() == name_lower]

    @property
    def content_length(self) -> Optional[int]:
        """Get the declared Content-Length, if any."""
        value = self.get_header(b"content-length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None
