"""
Deferred HTTP/1.1 response assembly for deferred_http.

This module implements the ResponseBuilder class that accumulates a
status, headers and body content across any number of call sites and
then emits the whole response, preamble first, with an exact
Content-Length in a single pass.
"""

import logging
import os
import socket
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from .channel import WritableChannel, socket_channel
from .content import BytesItem, ContentItem, FileItem, PathType, WriteResult
from .content_types import extension_of, lookup_content_type
from .exceptions import ContentError, ResponseStateError, TransmissionError
from .http_primitives import HeaderMap, Status, StatusCode, format_http_date

logger = logging.getLogger(__name__)


class ResponseState(Enum):
    """States of a response builder."""
    NEW = "new"           # Being assembled, not yet sent
    SENT = "sent"         # send() has run, content is frozen
    CLOSED = "closed"     # Channel closed, nothing more can happen


class ResponseBuilder:
    """
    HTTP/1.1 response assembled in memory and sent in one pass.

    Headers map a case-sensitive name to a single value; setting a name
    again replaces its value. Body content is a list of content items
    whose lengths are summed as they are appended, so send() never has to
    rescan the body to compute Content-Length.

    A builder is driven by one flow of control: it is not safe to call
    its methods from several threads at once. Once sent it cannot be
    mutated or sent again.
    """

    # Default configuration
    DEFAULT_CHUNK_SIZE = 2048  # File reads while streaming
    DEFAULT_FETCH_TIMEOUT = 30.0  # Seconds, for write_resource
    DEFAULT_ENCODING = "utf-8"  # Text content items
    PREAMBLE_ENCODING = "utf-8"

    def __init__(
        self,
        channel: WritableChannel,
        chunk_size: Optional[int] = None,
        fetch_timeout: Optional[float] = None,
        encoding: Optional[str] = None,
    ):
        """
        Initialize the response.

        Args:
            channel: Byte sink the response is sent to; owned by this
                     response until close()
            chunk_size: Read size when streaming file content
            fetch_timeout: Timeout for write_resource fetches in seconds
            encoding: Codec for text content
        """
        if not isinstance(channel, WritableChannel):
            raise TypeError("channel must provide write, flush and close")

        self._channel = channel
        self._status: StatusCode = Status.OK
        self._headers: HeaderMap = {}
        self._items: List[ContentItem] = []
        self._content_length = 0
        self._state = ResponseState.NEW

        # Configuration
        self._chunk_size = chunk_size or self.DEFAULT_CHUNK_SIZE
        self._fetch_timeout = self.DEFAULT_FETCH_TIMEOUT if fetch_timeout is None else fetch_timeout
        self._encoding = encoding or self.DEFAULT_ENCODING

        if self._chunk_size <= 0:
            raise ValueError("chunk_size must be positive")

        if self._fetch_timeout <= 0:
            raise ValueError("fetch_timeout must be positive")

        # Metrics
        self._bytes_sent = 0
        self._dropped_count = 0

        self.set_header("Date", format_http_date())
        logger.debug("Response initialized")

    @classmethod
    def for_socket(cls, sock: socket.socket, **kwargs: Any) -> "ResponseBuilder":
        """
        Create a response writing to a connected socket.

        The socket stays owned by the caller; close() only closes the
        writer wrapped around it.
        """
        return cls(socket_channel(sock), **kwargs)

    # Status and headers

    def set_status(self, code: StatusCode) -> None:
        """
        Set the status code sent in the status line.

        The code is not range-checked.
        """
        self._check_mutable()
        self._status = code

    def set_header(self, name: str, value: str) -> None:
        """
        Insert or replace a header.

        A Content-Length header set here is ignored by send(), which
        always writes the computed length.
        """
        self._check_mutable()
        self._headers[name] = value

    def get_header(self, name: str) -> Optional[str]:
        """Get a header value by its exact name."""
        return self._headers.get(name)

    def disable_caching(self) -> None:
        """Set the headers that tell clients and proxies not to cache."""
        self.set_header("Expires", format_http_date())
        self.set_header("Pragma", "no-cache")
        self.set_header("Cache-Control", "no-cache")

    def set_content_type(self, source: Union[str, "os.PathLike[str]"]) -> Optional[str]:
        """
        Set Content-Type from an extension or a file's name.

        Args:
            source: An extension such as "html", or a path-like object
                    whose name ends in an extension

        Returns:
            The Content-Type that was set, or None if the extension is
            unknown, in which case the headers are left unchanged

        Raises:
            ExtensionError: If a path-like source has no extension
        """
        self._check_mutable()

        if isinstance(source, str):
            extension = source
        else:
            extension = extension_of(source)

        content_type = lookup_content_type(extension)
        if content_type is not None:
            self.set_header("Content-Type", content_type)
        return content_type

    def set_content_disposition(self, path: PathType) -> str:
        """
        Mark the response as a download of the given file.

        Quotes in the file name are not escaped.

        Returns:
            The Content-Disposition value that was set
        """
        disposition = f'attachment; filename="{os.path.basename(os.fspath(path))}"'
        self.set_header("Content-Disposition", disposition)
        return disposition

    def set_last_modified(self, time_millis: Union[int, float]) -> None:
        """Set Last-Modified from milliseconds since the epoch."""
        self.set_header("Last-Modified", format_http_date(time_millis))

    def set_etag(self, value: int) -> None:
        """Set a quoted ETag from an integer."""
        self.set_header("ETag", f'"{value}"')

    # Content

    def write(self, content: Union[str, bytes, bytearray, memoryview, "os.PathLike[str]"]) -> WriteResult:
        """
        Append content to the body.

        Strings are written as text, bytes-like objects as raw bytes and
        path-like objects as files. Use write_file for a path held in a
        plain string and write_resource for URLs.

        Returns:
            WriteResult telling whether the content was appended
        """
        if isinstance(content, str):
            return self.write_text(content)
        if isinstance(content, os.PathLike):
            return self.write_file(content)
        return self.write_bytes(content)

    def write_text(self, text: str) -> WriteResult:
        """Append text, encoded with the response's text encoding."""
        return self._append(lambda: BytesItem.from_text(text, self._encoding), "text")

    def write_bytes(self, data: Union[bytes, bytearray, memoryview]) -> WriteResult:
        """Append a copy of a byte buffer."""
        return self._append(lambda: BytesItem(data), "byte buffer")

    def write_file(self, path: PathType) -> WriteResult:
        """
        Append a file's content.

        The file's size is taken now; its bytes are read when the
        response is sent.
        """
        return self._append(
            lambda: FileItem(path, chunk_size=self._chunk_size),
            f"file {path}",
        )

    def write_resource(self, url: str) -> WriteResult:
        """
        Fetch a resource now and append its bytes.

        The resource is read completely into memory before this returns.
        """
        return self._append(
            lambda: BytesItem.from_resource(url, timeout=self._fetch_timeout),
            f"resource {url}",
        )

    def _append(self, build: Callable[[], ContentItem], description: str) -> WriteResult:
        """
        Build a content item and append it, dropping it on failure.

        Args:
            build: Callable returning the new ContentItem
            description: What is being added, for the log

        Returns:
            The outcome of the append
        """
        self._check_mutable()

        try:
            item = build()
        except ContentError as e:
            self._dropped_count += 1
            logger.warning(f"Unable to add {description} to the response: {e}")
            return WriteResult.dropped(e)

        self._items.append(item)
        self._content_length += item.length
        return WriteResult.appended(item)

    # Sending

    def redirect(self, location: str) -> bool:
        """
        Send a 302 redirect to the given location.

        Any content already written is sent as the body.

        Returns:
            The result of send()
        """
        self.set_status(Status.FOUND)
        self.set_header("Location", location)
        return self.send()

    def send(self) -> bool:
        """
        Send the status line, headers and body, then flush.

        Returns:
            True if everything was written, False if a fault aborted the
            send; the channel should then be closed by the caller

        Raises:
            ResponseStateError: If the response was already sent or closed
        """
        self._check_mutable()
        self._state = ResponseState.SENT

        try:
            self._transmit(self._channel)
        except TransmissionError as e:
            logger.error(f"Unable to send the response: {e}")
            return False

        logger.debug(
            f"Sent {int(self._status)} response: {len(self._items)} items, "
            f"{self._content_length} body bytes"
        )
        return True

    def save(self, path: PathType) -> bool:
        """
        Write the entire response, preamble included, to a file.

        This is a debugging aid: the response is not consumed and can
        still be sent afterwards.

        Returns:
            True if the file was written completely
        """
        if self._state == ResponseState.CLOSED:
            raise ResponseStateError("Response is closed")

        try:
            with open(path, "wb") as target:
                self._transmit(target)
        except (OSError, TransmissionError) as e:
            logger.warning(f"Unable to save the response to {os.fspath(path)}: {e}")
            return False

        return True

    def _transmit(self, channel: WritableChannel) -> None:
        """
        Write the preamble and every content item, then flush.

        Raises:
            TransmissionError: On the first fault; nothing after it is written
        """
        try:
            preamble = self.preamble()
            channel.write(preamble)
            sent = len(preamble)
            for item in self._items:
                try:
                    sent += item.write_to(channel)
                except ContentError:
                    logger.debug(f"Unable to write {item!r} to the output channel")
                    raise
            channel.flush()
        except (OSError, ValueError, ContentError) as e:
            raise TransmissionError(str(e), cause=e) from e

        if channel is self._channel:
            self._bytes_sent += sent

    def preamble(self) -> bytes:
        """
        Serialize the status line, headers and Content-Length.

        Returns:
            The preamble, UTF-8 encoded, ending with the blank line
        """
        lines = [f"HTTP/1.1 {int(self._status)}\r\n"]
        for name, value in self._headers.items():
            if name.lower() == "content-length":
                continue
            lines.append(f"{name}: {value}\r\n")
        lines.append(f"Content-Length: {self._content_length}\r\n\r\n")
        return "".join(lines).encode(self.PREAMBLE_ENCODING)

    def close(self) -> None:
        """
        Flush and close the output channel.

        Failures are logged, not raised; the channel is unusable
        afterwards either way.
        """
        if self._state == ResponseState.CLOSED:
            return

        self._state = ResponseState.CLOSED
        try:
            self._channel.flush()
        except (OSError, ValueError) as e:
            logger.warning(f"Unable to flush the output channel: {e}")

        try:
            self._channel.close()
        except (OSError, ValueError) as e:
            logger.warning(f"Unable to close the output channel: {e}")

        logger.debug("Response channel closed")

    def _check_mutable(self) -> None:
        if self._state == ResponseState.SENT:
            raise ResponseStateError("Response has already been sent")
        if self._state == ResponseState.CLOSED:
            raise ResponseStateError("Response is closed")

    # Introspection

    @property
    def channel(self) -> WritableChannel:
        """Get the output channel this response writes to."""
        return self._channel

    @property
    def status(self) -> StatusCode:
        """Get the status code."""
        return self._status

    @property
    def headers(self) -> HeaderMap:
        """Get a copy of the headers in the order they will be sent."""
        return dict(self._headers)

    @property
    def items(self) -> List[ContentItem]:
        """Get a copy of the content items in send order."""
        return list(self._items)

    @property
    def content_length(self) -> int:
        """Get the total byte length of all content items."""
        return self._content_length

    @property
    def state(self) -> ResponseState:
        """Get the lifecycle state."""
        return self._state

    @property
    def is_sent(self) -> bool:
        """Check if send() has run and the response is not yet closed."""
        return self._state is ResponseState.SENT

    @property
    def metrics(self) -> Dict[str, Any]:
        """
        Get response metrics.

        Returns:
            Dictionary with response metrics
        """
        return {
            "status": int(self._status),
            "header_count": len(self._headers),
            "item_count": len(self._items),
            "content_length": self._content_length,
            "bytes_sent": self._bytes_sent,
            "dropped_count": self._dropped_count,
            "state": self._state.value,
        }
