"""
Basic response assembly example using deferred_http.

This example builds a response from several call sites, saves a copy
for inspection and reads it back to show the exact framing.
"""

import logging
import tempfile
from pathlib import Path

from deferred_http import MemoryChannel, ResponseBuilder, Status, read_response

# Configure logging
logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)


def render_header(response: ResponseBuilder) -> None:
    response.write("<html><head><title>Report</title></head><body>")


def render_body(response: ResponseBuilder, attachment: Path) -> None:
    response.write("<h1>Report</h1><pre>")
    response.write(attachment)
    response.write(b"</pre>")


def render_footer(response: ResponseBuilder) -> None:
    response.write("</body></html>")


def assemble_and_send() -> None:
    """Build a page across several functions, then send it once."""
    logger.info("Assembling response...")

    with tempfile.TemporaryDirectory() as workdir:
        attachment = Path(workdir) / "numbers.txt"
        attachment.write_text("\n".join(str(n) for n in range(10)))

        channel = MemoryChannel()
        response = ResponseBuilder(channel)
        response.set_content_type("html")
        response.disable_caching()

        render_header(response)
        render_body(response, attachment)
        render_footer(response)

        # A missing fragment is dropped, the rest is still sent
        result = response.write(Path(workdir) / "missing.txt")
        logger.info(f"Missing fragment added: {bool(result)} ({result.error})")

        saved = Path(workdir) / "response.http"
        logger.info(f"Saved copy: {response.save(saved)}")

        if not response.send():
            logger.error("Send failed")
            return
        response.close()

        parsed = read_response(channel.written_data)
        logger.info(f"Status: {parsed.status_code}")
        for name, value in parsed.headers:
            logger.info(f"  {name.decode()}: {value.decode()}")
        logger.info(f"Body: {len(parsed.body)} bytes, metrics: {response.metrics}")


def redirect_demo() -> None:
    """Send a redirect."""
    channel = MemoryChannel()
    response = ResponseBuilder(channel)
    sent = response.redirect("/login")
    logger.info(f"Redirect sent: {sent}, status {Status(response.status).name}")
    logger.info(channel.written_data.decode())


def main() -> None:
    """Run all examples."""
    logger.info("Starting response examples...")

    assemble_and_send()
    print()

    redirect_demo()

    logger.info("All examples completed successfully!")


if __name__ == "__main__":
    main()
