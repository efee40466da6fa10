"""
Content items for deferred_http.

A response body is assembled from an ordered list of content items.
Each item knows its byte length up front, so the response can announce
an exact Content-Length before any body byte is written, and knows how
to stream itself into an output channel.
"""

import http.client
import logging
import os
import stat
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

from .channel import WritableChannel
from .exceptions import ContentError

logger = logging.getLogger(__name__)

PathType = Union[str, "os.PathLike[str]"]
BytesLike = Union[bytes, bytearray, memoryview]


class ContentItem(ABC):
    """
    Base class for one ordered unit of response body content.
    """

    @property
    @abstractmethod
    def length(self) -> int:
        """Number of bytes write_to will emit."""
        pass

    @abstractmethod
    def write_to(self, channel: WritableChannel) -> int:
        """
        Stream every byte of the item into a channel.

        Args:
            channel: Destination channel

        Returns:
            Number of bytes written

        Raises:
            ContentError: If the item's own source fails
            OSError: If the channel fails
        """
        pass


class BytesItem(ContentItem):
    """
    Content held in memory as an immutable byte string.
    """

    def __init__(self, data: BytesLike) -> None:
        try:
            self._data = bytes(memoryview(data))
        except TypeError as e:
            raise ContentError(
                f"expected a bytes-like object, got {type(data).__name__}", e
            ) from e

    @classmethod
    def from_text(cls, text: str, encoding: str = "utf-8") -> "BytesItem":
        """
        Create an item from text.

        Args:
            text: The text to encode
            encoding: Codec used to encode the text

        Returns:
            New BytesItem holding the encoded text

        Raises:
            ContentError: If the text is not a str or cannot be encoded
        """
        if not isinstance(text, str):
            raise ContentError(f"expected str, got {type(text).__name__}")

        try:
            return cls(text.encode(encoding))
        except (UnicodeError, LookupError) as e:
            raise ContentError(f"cannot encode text as {encoding}: {e}", e) from e

    @classmethod
    def from_resource(cls, url: str, timeout: Optional[float] = None) -> "BytesItem":
        """
        Fetch a resource completely and hold its bytes.

        The fetch happens now, not when the response is sent, so the
        whole resource is kept in memory until then.

        Args:
            url: Any URL urllib can open (http, https, file, ...)
            timeout: Socket timeout for network fetches, in seconds

        Returns:
            New BytesItem holding the fetched bytes

        Raises:
            ContentError: If the resource cannot be opened or read
        """
        if not isinstance(url, (str, urllib.request.Request)):
            raise ContentError(f"expected a URL string, got {type(url).__name__}")

        try:
            with urllib.request.urlopen(url, timeout=timeout) as resource:
                data = resource.read()
        except (OSError, ValueError, http.client.HTTPException) as e:
            raise ContentError(f"cannot fetch resource {url}: {e}", e) from e

        logger.debug(f"Fetched {len(data)} bytes from {url}")
        return cls(data)

    @property
    def length(self) -> int:
        return len(self._data)

    @property
    def data(self) -> bytes:
        """Get the held bytes."""
        return self._data

    def write_to(self, channel: WritableChannel) -> int:
        if self._data:
            channel.write(self._data)
        return len(self._data)

    def __repr__(self) -> str:
        return f"BytesItem(length={self.length})"


class FileItem(ContentItem):
    """
    Content read from a file when the response is sent.

    Only the path and the size seen at construction are kept. The file
    is reopened by write_to and must still have that size; otherwise the
    item fails rather than contradicting the Content-Length already sent.
    """

    DEFAULT_CHUNK_SIZE = 2048

    def __init__(self, path: PathType, chunk_size: Optional[int] = None) -> None:
        try:
            self._path = os.fspath(path)
        except TypeError as e:
            raise ContentError(f"expected a path, got {type(path).__name__}", e) from e

        self._chunk_size = chunk_size or self.DEFAULT_CHUNK_SIZE

        if self._chunk_size <= 0:
            raise ValueError("chunk_size must be positive")

        try:
            info = os.stat(self._path)
        except (OSError, ValueError) as e:
            raise ContentError(f"cannot stat {self._path}: {e}", e) from e

        if not stat.S_ISREG(info.st_mode):
            raise ContentError(f"{self._path} is not a regular file")

        if not os.access(self._path, os.R_OK):
            raise ContentError(f"{self._path} is not readable")

        self._length = info.st_size

    @property
    def length(self) -> int:
        return self._length

    @property
    def path(self) -> str:
        """Get the path of the backing file."""
        return self._path

    @property
    def chunk_size(self) -> int:
        """Get the size of each read from the backing file."""
        return self._chunk_size

    def write_to(self, channel: WritableChannel) -> int:
        try:
            handle = open(self._path, "rb")
        except OSError as e:
            raise ContentError(f"cannot reopen {self._path}: {e}", e) from e

        with handle:
            size = os.fstat(handle.fileno()).st_size
            if size != self._length:
                raise ContentError(
                    f"{self._path} changed size from {self._length} to {size} bytes"
                )

            remaining = self._length
            while remaining > 0:
                chunk = handle.read(min(self._chunk_size, remaining))
                if not chunk:
                    raise ContentError(
                        f"{self._path} ended after {self._length - remaining} "
                        f"of {self._length} bytes"
                    )
                channel.write(chunk)
                remaining -= len(chunk)

        return self._length

    def __repr__(self) -> str:
        return f"FileItem(path={self._path!r}, length={self._length})"


@dataclass(frozen=True)
class WriteResult:
    """
    Outcome of adding one piece of content to a response.

    Truthy when the item was appended; otherwise error holds the reason
    it was dropped.
    """

    added: bool
    length: int = 0
    error: Optional[ContentError] = None

    @classmethod
    def appended(cls, item: ContentItem) -> "WriteResult":
        return cls(added=True, length=item.length)

    @classmethod
    def dropped(cls, error: ContentError) -> "WriteResult":
        return cls(added=False, error=error)

    def __bool__(self) -> bool:
        return self.added
