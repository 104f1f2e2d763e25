"""Tests for biscuit.middleware.cookies — hooks called directly."""

import logging

import pytest

from biscuit.http.cookies import SameSite
from biscuit.http.headers import Headers
from biscuit.http.request import Request
from biscuit.http.response import Response
from biscuit.middleware.cookies import CookieContext, CookieParser, CookieParserConfig


def _request(*headers: tuple[str, str]) -> Request:
    return Request(method="GET", path="/", headers=Headers.from_pairs(headers))


class TestBeforeHandle:
    def test_no_cookie_header_leaves_jar_empty(self) -> None:
        ctx = CookieContext()
        response = Response()
        CookieParser().before_handle(_request(("Accept", "*/*")), response, ctx)
        assert ctx.jar == {}
        assert response.finished is False
        assert response.status == 200

    def test_single_header_parsed(self) -> None:
        ctx = CookieContext()
        CookieParser().before_handle(_request(("Cookie", "a=1; b=2")), Response(), ctx)
        assert ctx.jar == {"a": "1", "b": "2"}

    def test_header_name_case_insensitive(self) -> None:
        ctx = CookieContext()
        CookieParser().before_handle(_request(("cookie", "a=1")), Response(), ctx)
        assert ctx.jar == {"a": "1"}

    def test_duplicate_headers_end_response(self) -> None:
        ctx = CookieContext()
        response = Response()
        CookieParser().before_handle(
            _request(("Cookie", "a=1"), ("Cookie", "b=2")), response, ctx
        )
        assert response.status == 400
        assert response.finished is True
        assert ctx.jar == {}

    def test_duplicate_status_configurable(self) -> None:
        response = Response()
        parser = CookieParser(CookieParserConfig(duplicate_status=431, duplicate_detail="dup"))
        parser.before_handle(
            _request(("Cookie", "a=1"), ("Cookie", "b=2")), response, CookieContext()
        )
        assert response.status == 431
        assert response.text == "dup"

    def test_duplicate_logged_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="biscuit.cookies"):
            CookieParser().before_handle(
                _request(("Cookie", "a=1"), ("Cookie", "b=2")), Response(), CookieContext()
            )
        assert any("2 Cookie headers" in record.getMessage() for record in caplog.records)

    def test_duplicate_log_names_client(self, caplog: pytest.LogCaptureFixture) -> None:
        request = Request(
            method="GET",
            path="/",
            headers=Headers.from_pairs([("Cookie", "a=1"), ("Cookie", "b=2")]),
            client=("203.0.113.7", 51000),
        )
        with caplog.at_level(logging.DEBUG, logger="biscuit.cookies"):
            CookieParser().before_handle(request, Response(), CookieContext())
        assert "from 203.0.113.7:51000" in caplog.records[0].getMessage()

    def test_duplicate_log_without_client(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="biscuit.cookies"):
            CookieParser().before_handle(
                _request(("Cookie", "a=1"), ("Cookie", "b=2")), Response(), CookieContext()
            )
        assert "from unknown client" in caplog.records[0].getMessage()

    def test_malformed_header_not_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="biscuit.cookies"):
            ctx = CookieContext()
            CookieParser().before_handle(_request(("Cookie", "a=1; junk")), Response(), ctx)
        assert ctx.jar == {"a": "1"}
        assert caplog.records == []


class TestAfterHandle:
    def test_one_header_line_per_cookie_in_order(self) -> None:
        ctx = CookieContext()
        ctx.set_cookie("first", "1")
        ctx.set_cookie("second", "2").path("/")
        response = Response()
        CookieParser().after_handle(_request(), response, ctx)
        assert response.headers == [
            ("Set-Cookie", "first=1"),
            ("Set-Cookie", "second=2; Path=/"),
        ]

    def test_no_cookies_no_headers(self) -> None:
        response = Response()
        CookieParser().after_handle(_request(), response, CookieContext())
        assert response.headers == []

    def test_reflects_mutations_made_after_set_cookie(self) -> None:
        ctx = CookieContext()
        handle = ctx.set_cookie("session", "abc")
        handle.secure().httponly().same_site(SameSite.LAX)
        response = Response()
        CookieParser().after_handle(_request(), response, ctx)
        assert response.get_header_list("Set-Cookie") == [
            "session=abc; Secure; HttpOnly; SameSite=Lax"
        ]


class TestCookieContext:
    def test_get_cookie(self) -> None:
        ctx = CookieContext(jar={"a": "1", "empty": ""})
        assert ctx.get_cookie("a") == "1"

    def test_absent_and_empty_look_the_same(self) -> None:
        ctx = CookieContext(jar={"empty": ""})
        assert ctx.get_cookie("empty") == ctx.get_cookie("missing") == ""

    def test_set_cookie_returns_live_handle(self) -> None:
        ctx = CookieContext()
        handle = ctx.set_cookie("a", "1")
        handle.domain("example.com")
        assert ctx.outbound == (handle,)
        assert ctx.outbound[0].to_header_value() == "a=1; Domain=example.com"

    def test_delete_cookie(self) -> None:
        ctx = CookieContext()
        ctx.delete_cookie("session", path="/")
        assert ctx.outbound[0].to_header_value() == (
            'session=""; Expires=Thu, 01 Jan 1970 00:00:00 GMT; Max-Age=0; Path=/'
        )

    def test_new_context_per_call(self) -> None:
        parser = CookieParser()
        assert parser.new_context() is not parser.new_context()
