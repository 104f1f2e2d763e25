"""Biscuit — HTTP cookies for ASGI request pipelines.

Parses the ``Cookie`` request header into a per-request jar, builds
outbound cookies with a chainable record, and writes one ``Set-Cookie``
header per cookie.

Basic usage::

    from biscuit import App, CookieParser, SameSite

    def handler(request, response, contexts):
        cookies = contexts.get(CookieParser)
        if not cookies.get_cookie("session"):
            cookies.set_cookie("session", new_token()).secure().httponly().same_site(SameSite.LAX)
        return "ok"

    app = App(handler, middleware=[CookieParser()])
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "BadRequest",
    "BiscuitError",
    "ConfigurationError",
    "ContextRegistry",
    "Cookie",
    "CookieContext",
    "CookieParser",
    "CookieParserConfig",
    "DuplicateHeaderError",
    "HTTPError",
    "Headers",
    "Middleware",
    "Pipeline",
    "Request",
    "Response",
    "SameSite",
    "format_set_cookie",
    "get_context",
    "get_request",
    "http_date",
    "parse_cookie_header",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import biscuit`` fast while providing a clean top-level API.
    """
    if name == "App":
        from biscuit.app import App

        return App

    if name == "AppConfig":
        from biscuit.config import AppConfig

        return AppConfig

    if name == "Pipeline":
        from biscuit.pipeline import Pipeline

        return Pipeline

    if name == "Request":
        from biscuit.http.request import Request

        return Request

    if name == "Response":
        from biscuit.http.response import Response

        return Response

    if name == "Headers":
        from biscuit.http.headers import Headers

        return Headers

    if name in ("Cookie", "SameSite", "format_set_cookie", "parse_cookie_header"):
        from biscuit.http import cookies as _cookies

        return getattr(_cookies, name)

    if name == "http_date":
        from biscuit.http.dates import http_date

        return http_date

    if name in ("CookieContext", "CookieParser", "CookieParserConfig", "Middleware"):
        from biscuit import middleware as _mw

        return getattr(_mw, name)

    if name in ("ContextRegistry", "get_context", "get_request"):
        from biscuit import context as _ctx

        return getattr(_ctx, name)

    if name in (
        "BadRequest",
        "BiscuitError",
        "ConfigurationError",
        "DuplicateHeaderError",
        "HTTPError",
    ):
        from biscuit import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
