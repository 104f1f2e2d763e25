"""Tests for biscuit.server.sender response emission rules."""

import pytest

from biscuit.http.response import Response
from biscuit.server.sender import send_response


async def _send(response: Response) -> list[dict]:
    messages: list[dict] = []

    async def send(message: dict) -> None:
        messages.append(message)

    await send_response(response, send)
    return messages


class TestSendResponse:
    @pytest.mark.anyio
    async def test_repeated_headers_stay_separate(self) -> None:
        response = Response("ok")
        response.add_header("Set-Cookie", "a=1").add_header("Set-Cookie", "b=2; Path=/")
        messages = await _send(response)
        cookies = [v for n, v in messages[0]["headers"] if n == b"set-cookie"]
        assert cookies == [b"a=1", b"b=2; Path=/"]

    @pytest.mark.anyio
    async def test_200_preserves_body(self) -> None:
        messages = await _send(Response("ok"))
        headers = dict(messages[0]["headers"])
        assert messages[0]["status"] == 200
        assert headers[b"content-length"] == b"2"
        assert headers[b"content-type"] == b"text/plain; charset=utf-8"
        assert messages[1]["body"] == b"ok"

    @pytest.mark.anyio
    async def test_204_drops_body(self) -> None:
        messages = await _send(Response("unexpected-body", status=204))
        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"0"
        assert messages[1]["body"] == b""

    @pytest.mark.anyio
    async def test_explicit_content_type(self) -> None:
        messages = await _send(Response("{}", content_type="application/json"))
        assert dict(messages[0]["headers"])[b"content-type"] == b"application/json"
