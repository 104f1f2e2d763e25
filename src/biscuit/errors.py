"""Biscuit exception hierarchy.

Shared across the pipeline, the ASGI adapter, and middleware so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class BiscuitError(Exception):
    """Base for all biscuit-specific errors."""


class ConfigurationError(BiscuitError):
    """Raised when app or middleware configuration is invalid.

    Typically raised while building a config object or composing the
    pipeline, before any request is served.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(BiscuitError):
    """An error that maps directly to an HTTP status code.

    Raised by hooks or handlers. The pipeline catches these, copies the
    status and headers onto the response, and ends it.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class BadRequest(HTTPError):  # noqa: N818
    """400 — the request itself is malformed."""

    def __init__(self, detail: str = "Bad Request", status: int = 400) -> None:
        super().__init__(status=status, detail=detail)


@dataclass(frozen=True, slots=True, kw_only=True)
class DuplicateHeaderError(BadRequest):
    """A header that must appear at most once was sent several times.

    ``header`` and ``count`` are kept for logging. The status defaults
    to 400 and can be overridden by the raising middleware's config::

        raise DuplicateHeaderError(header="Cookie", count=2, status=431)
    """

    status: int = 400
    detail: str = ""
    header: str
    count: int

    def __post_init__(self) -> None:
        if not self.detail:
            detail = f"Expected at most one {self.header} header, got {self.count}"
            object.__setattr__(self, "detail", detail)
