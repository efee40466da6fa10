"""
Static file server example using deferred_http.

Serves files from a directory over plain HTTP/1.1. The accept loop and
request parsing come from the standard library's socketserver; each
answer is built and sent with a ResponseBuilder bound to the
connection's socket.

Usage:
    python file_server.py [directory] [port]
"""

import logging
import socketserver
import sys
from pathlib import Path

from deferred_http import ExtensionError, ResponseBuilder, Status

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ROOT = Path(sys.argv[1] if len(sys.argv) > 1 else ".").resolve()
PORT = int(sys.argv[2]) if len(sys.argv) > 2 else 8080


class FileHandler(socketserver.StreamRequestHandler):
    """Answer one GET request per connection."""

    def handle(self) -> None:
        request_line = self.rfile.readline(65537).decode("latin-1").strip()
        # Skip the request headers
        while self.rfile.readline(65537) not in (b"\r\n", b"\n", b""):
            pass

        response = ResponseBuilder.for_socket(self.connection)
        response.set_header("Connection", "close")
        try:
            self.answer(request_line, response)
        finally:
            response.close()

    def answer(self, request_line: str, response: ResponseBuilder) -> None:
        parts = request_line.split()
        if len(parts) != 3 or parts[0] != "GET":
            response.set_status(Status.NOT_IMPLEMENTED)
            response.send()
            return

        target = (ROOT / parts[1].lstrip("/")).resolve()
        if ROOT not in target.parents and target != ROOT:
            response.set_status(Status.FORBIDDEN)
            response.send()
            return

        if target.is_dir():
            target = target / "index.html"

        if not target.is_file():
            response.set_status(Status.NOT_FOUND)
            response.set_content_type("txt")
            response.write(f"{parts[1]} not found\n")
            response.send()
            return

        try:
            if response.set_content_type(target) is None:
                response.set_content_disposition(target)
        except ExtensionError:
            response.set_content_disposition(target)

        info = target.stat()
        response.set_last_modified(info.st_mtime * 1000)
        response.set_etag(info.st_mtime_ns)
        response.write(target)

        sent = response.send()
        logger.info(f"{parts[1]} -> {response.status} ({response.content_length} bytes, sent={sent})")


def main() -> None:
    logger.info(f"Serving {ROOT} on port {PORT}")
    with socketserver.ThreadingTCPServer(("", PORT), FileHandler) as server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down")


if __name__ == "__main__":
    main()
