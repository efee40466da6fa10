"""
HTTP/1.1 response reader for deferred_http.

This module reads bytes produced by ResponseBuilder.send() or save()
back into a Response, using h11 as an independent HTTP/1.1 parser. It
is how tests and debugging sessions check that the framing a response
emitted is exactly what a client would accept.
"""

import logging
import os
from typing import List, Optional, Union

import h11

from .exceptions import ProtocolError
from .http_primitives import RawHeaders, Response

logger = logging.getLogger(__name__)


def read_response(
    data: bytes,
    request_method: str = "GET",
    allow_trailing_data: bool = False,
) -> Response:
    """
    Parse one complete HTTP/1.1 response.

    Args:
        data: Every byte the response emitted
        request_method: Method of the request being answered; h11 uses it
                        to decide whether a body is allowed (HEAD is not)
        allow_trailing_data: Whether bytes past the end of the message are
                             tolerated instead of treated as a framing error

    Returns:
        The parsed Response with its complete body

    Raises:
        ProtocolError: If the data is not a single well-framed response
    """
    connection = h11.Connection(h11.CLIENT)
    connection.send(h11.Request(
        method=request_method,
        target="/",
        headers=[("Host", "localhost")],
    ))
    connection.send(h11.EndOfMessage())

    connection.receive_data(data)
    connection.receive_data(b"")

    status_code: Optional[int] = None
    headers: RawHeaders = []
    chunks: List[bytes] = []

    try:
        while True:
            event = connection.next_event()

            if event is h11.NEED_DATA:
                raise ProtocolError("Response is truncated")

            if isinstance(event, h11.Response):
                status_code = event.status_code
                headers = list(event.headers.raw_items())
                continue

            if isinstance(event, h11.InformationalResponse):
                raise ProtocolError(
                    f"Unexpected informational response {event.status_code}"
                )

            if isinstance(event, h11.Data):
                chunks.append(bytes(event.data))
                continue

            if isinstance(event, h11.EndOfMessage):
                break

            if isinstance(event, h11.ConnectionClosed):
                raise ProtocolError("Connection closed before the response ended")

    except h11.RemoteProtocolError as e:
        raise ProtocolError(str(e), cause=e) from e

    trailing, _ = connection.trailing_data
    if trailing and not allow_trailing_data:
        raise ProtocolError(f"{len(trailing)} bytes past the end of the response")

    body = b"".join(chunks)
    logger.debug(f"Read {status_code} response with {len(body)} body bytes")

    return Response(status_code=status_code, headers=headers, body=body)


def read_saved_response(path: Union[str, "os.PathLike[str]"], **kwargs) -> Response:
    """
    Parse a response written to a file by ResponseBuilder.save().

    Args:
        path: The saved file
        **kwargs: Passed to read_response

    Returns:
        The parsed Response
    """
    with open(path, "rb") as f:
        return read_response(f.read(), **kwargs)
