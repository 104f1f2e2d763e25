"""Cookie middleware — parses the request jar, emits Set-Cookie lines.

``before_handle`` tokenizes the single ``Cookie`` request header into
the request's ``CookieContext``. Handlers read cookies with
``get_cookie`` and queue outbound ones with ``set_cookie``.
``after_handle`` serializes the queue, one ``Set-Cookie`` header line
per cookie, in the order they were added.

A request carrying more than one ``Cookie`` header is rejected with a
4xx status before the handler runs.
"""

import logging
from dataclasses import dataclass, field

from biscuit.errors import ConfigurationError, DuplicateHeaderError
from biscuit.http.cookies import Cookie, parse_cookie_header
from biscuit.http.headers import Headers
from biscuit.http.request import Request
from biscuit.http.response import Response

logger = logging.getLogger("biscuit.cookies")

COOKIE_HEADER = "Cookie"
SET_COOKIE_HEADER = "Set-Cookie"


# -- Configuration --


@dataclass(frozen=True, slots=True)
class CookieParserConfig:
    """Cookie middleware configuration.

    ``duplicate_status`` is the status sent when a request carries
    several ``Cookie`` headers; it must be a 4xx code.
    """

    duplicate_status: int = 400
    duplicate_detail: str = "Multiple Cookie headers"

    def __post_init__(self) -> None:
        if not 400 <= self.duplicate_status <= 499:
            msg = (
                "CookieParserConfig.duplicate_status must be a 4xx status, "
                f"got {self.duplicate_status}."
            )
            raise ConfigurationError(msg)


# -- Per-request state --


@dataclass(slots=True)
class CookieContext:
    """The cookies of one request: the parsed jar and the outbound queue.

    Created by the pipeline for each request and dropped when the
    response is done. Never shared between requests.
    """

    jar: dict[str, str] = field(default_factory=dict)
    cookies_to_add: list[Cookie] = field(default_factory=list)

    def get_cookie(self, name: str) -> str:
        """Return the request cookie *name*, or ``""`` if it was not sent.

        A missing cookie and one sent with an empty value look the same.
        """
        return self.jar.get(name, "")

    def set_cookie(self, name: str, value: object = "") -> Cookie:
        """Queue a new outbound cookie and return it for chaining::

            ctx.set_cookie("theme", "dark").path("/").max_age(3600)
        """
        cookie = Cookie(name, value)
        self.cookies_to_add.append(cookie)
        return cookie

    def delete_cookie(self, name: str, *, path: str = "", domain: str = "") -> Cookie:
        """Queue a cookie that tells the client to drop *name*.

        *path* and *domain* must match the ones the cookie was set with.
        """
        return self.set_cookie(name).path(path).domain(domain).expire()

    @property
    def outbound(self) -> tuple[Cookie, ...]:
        """The queued cookies, in the order they were added."""
        return tuple(self.cookies_to_add)


# -- Middleware --


def _single_cookie_header(headers: Headers, *, status: int, detail: str) -> str | None:
    """Return the lone ``Cookie`` header value, or None when absent.

    Raises ``DuplicateHeaderError`` when the header appears more than once.
    """
    count = headers.count(COOKIE_HEADER)
    if count == 0:
        return None
    if count > 1:
        raise DuplicateHeaderError(header=COOKIE_HEADER, count=count, detail=detail, status=status)
    return headers[COOKIE_HEADER]


def _client_label(request: Request) -> str:
    if request.client is None:
        return "unknown client"
    host, port = request.client
    return f"{host}:{port}"


class CookieParser:
    """Cookie jar middleware.

    Usage::

        from biscuit import App
        from biscuit.middleware.cookies import CookieParser

        def index(request, response, contexts):
            cookies = contexts.get(CookieParser)
            raw = cookies.get_cookie("visits")
            visits = (int(raw) if raw.isdecimal() else 0) + 1
            cookies.set_cookie("visits", visits).path("/").httponly()
            return f"Visit #{visits}"

        app = App(index, middleware=[CookieParser()])
    """

    __slots__ = ("_config",)

    def __init__(self, config: CookieParserConfig | None = None) -> None:
        self._config = config or CookieParserConfig()

    @property
    def config(self) -> CookieParserConfig:
        return self._config

    def new_context(self) -> CookieContext:
        return CookieContext()

    def before_handle(self, request: Request, response: Response, ctx: CookieContext) -> None:
        """Parse the ``Cookie`` header into ``ctx.jar``.

        With several ``Cookie`` headers the jar stays empty, the response
        gets the configured 4xx status and is ended, so the handler is
        skipped. ``after_handle`` still runs.
        """
        try:
            header = _single_cookie_header(
                request.headers,
                status=self._config.duplicate_status,
                detail=self._config.duplicate_detail,
            )
        except DuplicateHeaderError as exc:
            logger.debug(
                "%d %s %s from %s — %d %s headers",
                exc.status,
                request.method,
                request.path,
                _client_label(request),
                exc.count,
                exc.header,
            )
            response.status = exc.status
            response.end(exc.detail)
            return

        if header is not None:
            ctx.jar.update(parse_cookie_header(header))

    def after_handle(self, request: Request, response: Response, ctx: CookieContext) -> None:  # noqa: ARG002
        """Add one ``Set-Cookie`` line per queued cookie, in order."""
        for cookie in ctx.cookies_to_add:
            response.add_header(SET_COOKIE_HEADER, cookie.to_header_value())
