"""
deferred_http - Deferred-assembly HTTP/1.1 response writer

Build a response incrementally from text, byte buffers, files and
fetched resources, then send it with an exact Content-Length in a
single pass over an already open output channel.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

# Import main components for easy access
from .response import ResponseBuilder, ResponseState
from .content import BytesItem, ContentItem, FileItem, WriteResult
from .content_types import CONTENT_TYPES, extension_of, lookup_content_type
from .channel import MemoryChannel, OutputChannel, WritableChannel, socket_channel
from .http_primitives import Response, Status, format_http_date
from .http11 import read_response, read_saved_response
from .exceptions import (
    ContentError,
    ExtensionError,
    ProtocolError,
    ResponseError,
    ResponseStateError,
    TransmissionError,
)

__all__ = [
    "ResponseBuilder",
    "ResponseState",
    "BytesItem",
    "ContentItem",
    "FileItem",
    "WriteResult",
    "CONTENT_TYPES",
    "extension_of",
    "lookup_content_type",
    "MemoryChannel",
    "OutputChannel",
    "WritableChannel",
    "socket_channel",
    "Response",
    "Status",
    "format_http_date",
    "read_response",
    "read_saved_response",
    "ContentError",
    "ExtensionError",
    "ProtocolError",
    "ResponseError",
    "ResponseStateError",
    "TransmissionError",
]
