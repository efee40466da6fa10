"""
Output channels for deferred_http.

A response writes raw bytes into a channel it is handed at construction.
Any object with write, flush and close works (a binary file, a socket
file object); this module defines the interface, an in-memory channel
for testing and a helper that wraps a connected socket.
"""

import socket
from abc import ABC, abstractmethod
from typing import BinaryIO, List, Optional

from typing_extensions import Protocol, runtime_checkable


@runtime_checkable
class WritableChannel(Protocol):
    """Structural type accepted wherever a channel is expected."""

    def write(self, data: bytes) -> object: ...

    def flush(self) -> None: ...

    def close(self) -> None: ...


class OutputChannel(ABC):
    """
    Interface for byte sinks a response can be sent to.

    Implementations only move bytes; opening and accepting connections
    is the owner's business.
    """

    @abstractmethod
    def write(self, data: bytes) -> None:
        """
        Write data to the channel.

        Args:
            data: The data to write.

        Raises:
            OSError: If the underlying sink fails.
            ValueError: If the channel is closed.
        """
        pass

    @abstractmethod
    def flush(self) -> None:
        """Push any buffered data to the underlying sink."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the channel. Further writes must fail."""
        pass

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """
        Check if the channel is closed.

        Returns:
            True if the channel is closed, False otherwise.
        """
        pass


class MemoryChannel(OutputChannel):
    """
    In-memory channel for testing.

    Records every write so tests can inspect exactly what a response
    emitted. A failure can be scheduled after a number of writes to
    exercise transmission faults.
    """

    def __init__(self, fail_after: Optional[int] = None, fail_on_flush: bool = False):
        """
        Initialize the memory channel.

        Args:
            fail_after: Number of writes to accept before raising OSError.
            fail_on_flush: Whether flush should raise OSError.
        """
        self._writes: List[bytes] = []
        self._closed = False
        self._fail_after = fail_after
        self._fail_on_flush = fail_on_flush
        self.flush_count = 0

    def write(self, data: bytes) -> None:
        if self._closed:
            raise ValueError("write to closed channel")

        if self._fail_after is not None and len(self._writes) >= self._fail_after:
            raise OSError("Simulated write failure")

        self._writes.append(bytes(data))

    def flush(self) -> None:
        if self._closed:
            raise ValueError("flush of closed channel")

        if self._fail_on_flush:
            raise OSError("Simulated flush failure")

        self.flush_count += 1

    def close(self) -> None:
        self._closed = True

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def writes(self) -> List[bytes]:
        """Get each chunk in the order it was written."""
        return list(self._writes)

    @property
    def written_data(self) -> bytes:
        """Get all data that was written to the channel."""
        return b"".join(self._writes)

    def reset(self) -> None:
        """Forget recorded writes and reopen the channel."""
        self._writes.clear()
        self._closed = False
        self.flush_count = 0


def socket_channel(sock: socket.socket, buffering: int = -1) -> BinaryIO:
    """
    Wrap a connected socket in a buffered binary writer.

    Closing the returned writer does not close the socket itself; the
    caller keeps owning the connection.

    Args:
        sock: A connected stream socket.
        buffering: Buffer size passed to socket.makefile.

    Returns:
        A writable binary file object bound to the socket.
    """
    return sock.makefile("wb", buffering=buffering)
