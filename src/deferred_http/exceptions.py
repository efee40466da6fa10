"""
Custom exceptions for deferred_http.

This module defines the exception hierarchy used throughout
the library for error handling and debugging.
"""

from typing import Optional


class ResponseError(Exception):
    """Base exception for all deferred_http errors."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ContentError(ResponseError):
    """Raised when a content item cannot be built or streamed."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Content error: {message}", cause)


class TransmissionError(ResponseError):
    """Raised when writing to the output channel fails mid-send."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Transmission error: {message}", cause)


class ExtensionError(ResponseError):
    """Raised when a file name carries no extension to derive a type from."""
    
    def __init__(self, name: str) -> None:
        super().__init__(f"Extension error: no extension in file name {name!r}")
        self.name = name


class ProtocolError(ResponseError):
    """Raised when emitted bytes cannot be read back as an HTTP/1.1 response."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Protocol error: {message}", cause)


class ResponseStateError(ResponseError):
    """Raised when a response is used after it was sent or closed."""
    
    def __init__(self, message: str) -> None:
        super().__init__(f"State error: {message}")
