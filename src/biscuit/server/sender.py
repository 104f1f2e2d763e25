"""ASGI response sending — translates a biscuit Response to ASGI messages.

Every header line of the response becomes its own raw ASGI header pair,
so several ``Set-Cookie`` lines reach the client as separate headers.
"""

import logging

from biscuit._internal.asgi import Send
from biscuit.http.response import Response

logger = logging.getLogger("biscuit.server")


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(
    response: Response,
    send: Send,
    *,
    default_content_type: str = "text/plain; charset=utf-8",
) -> None:
    """Translate a biscuit Response into ASGI send() calls."""
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", (response.content_type or default_content_type).encode("latin-1")),
    ]
    for name, value in response.headers:
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

    body = response.body_bytes
    if body and not _body_allowed(response.status):
        logger.debug("Dropping body of %d response", response.status)
        body = b""

    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
