"""Cookie parsing and Set-Cookie serialization.

Consolidates the read side (``parse_cookie_header``, used by the cookie
middleware to fill the per-request jar) and the write side (``Cookie``,
a chainable record rendered by ``to_header_value``) in one module.

Nothing here validates or escapes names, values, or attributes: bytes
go to the wire exactly as given.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import StrEnum

from biscuit.http.dates import http_date

_ONE_SECOND = timedelta(seconds=1)
_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def _skip_spaces(text: str, pos: int) -> int:
    # Only ' ' counts here; tabs are left for strip() on the token itself
    end = len(text)
    while pos < end and text[pos] == " ":
        pos += 1
    return pos


def parse_cookie_header(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header value into a name-value dict.

    Scans left to right for ``name=value`` pairs separated by ``;``.
    Names and values are whitespace-trimmed, and a value wrapped in one
    pair of double quotes loses exactly those two quotes (no unescaping).

    The first occurrence of a name wins. Scanning stops at the first
    point where no ``=`` remains, so trailing garbage is dropped while
    every pair parsed before it is kept. Never raises.
    """
    jar: dict[str, str] = {}
    end = len(header)
    pos = 0
    while pos < end:
        equals = header.find("=", pos)
        if equals == -1:
            break
        name = header[pos:equals].strip()
        pos = _skip_spaces(header, equals + 1)
        if pos == end:
            # "name=" closing the header: an empty value
            jar.setdefault(name, "")
            break

        semicolon = header.find(";", pos)
        stop = end if semicolon == -1 else semicolon
        value = header[pos:stop].strip()
        if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
            value = value[1:-1]
        jar.setdefault(name, value)

        if semicolon == -1:
            break
        pos = _skip_spaces(header, semicolon + 1)
    return jar


class SameSite(StrEnum):
    """Values of the ``SameSite`` attribute, spelled as sent on the wire."""

    STRICT = "Strict"
    LAX = "Lax"
    NONE = "None"


def _coerce_value(value: object) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("latin-1")
    return str(value)


def _whole_seconds(delta: timedelta) -> int:
    """Whole seconds in *delta*, truncating toward zero."""
    seconds = abs(delta) // _ONE_SECOND
    return -seconds if delta < timedelta(0) else seconds


class Cookie:
    """An outbound cookie, built in place before it is serialized.

    Every attribute method mutates this record and returns it, so calls
    chain in any order. Calling a method again replaces the earlier
    value::

        cookie = Cookie("session", token).path("/").secure().httponly()
        cookie.same_site(SameSite.LAX)
        cookie.to_header_value()
        # 'session=...; Path=/; Secure; HttpOnly; SameSite=Lax'

    ``name`` is fixed at construction. ``value`` accepts any string-like
    input and is stored as ``str``.
    """

    __slots__ = (
        "_domain",
        "_expires_at",
        "_httponly",
        "_max_age",
        "_name",
        "_path",
        "_same_site",
        "_secure",
        "_value",
    )

    def __init__(self, name: str, value: object = "") -> None:
        self._name = name
        self._value = _coerce_value(value)
        self._expires_at: datetime | None = None
        self._max_age: int | None = None
        self._domain = ""
        self._path = ""
        self._secure = False
        self._httponly = False
        self._same_site: SameSite | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def value(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"Cookie({self.to_header_value()!r})"

    # -- Attributes --

    def expires(self, when: datetime) -> Cookie:
        """Set ``Expires``. *when* must already be in UTC."""
        self._expires_at = when
        return self

    def max_age(self, age: int | timedelta) -> Cookie:
        """Set ``Max-Age`` in seconds; a timedelta drops its sub-second part."""
        self._max_age = _whole_seconds(age) if isinstance(age, timedelta) else int(age)
        return self

    def domain(self, domain: str) -> Cookie:
        """Set ``Domain``. An empty string unsets it."""
        self._domain = domain
        return self

    def path(self, path: str) -> Cookie:
        """Set ``Path``. An empty string unsets it."""
        self._path = path
        return self

    def secure(self, flag: bool = True) -> Cookie:
        self._secure = flag
        return self

    def httponly(self, flag: bool = True) -> Cookie:
        self._httponly = flag
        return self

    def same_site(self, policy: SameSite | str) -> Cookie:
        """Set ``SameSite`` to ``Strict``, ``Lax`` or ``None``.

        Raises ``ValueError`` for any other value.
        """
        self._same_site = SameSite(policy)
        return self

    def expire(self) -> Cookie:
        """Turn this cookie into a deletion: empty value, expired now."""
        self._value = ""
        self._max_age = 0
        self._expires_at = _EPOCH
        return self

    # -- Serialization --

    def to_header_value(self) -> str:
        """Serialize to a ``Set-Cookie`` header value string.

        Attributes appear only when set, always in the order
        Expires, Max-Age, Domain, Path, Secure, HttpOnly, SameSite.
        """
        value = self._value or '""'
        parts = [f"{self._name}={value}"]
        if self._expires_at is not None:
            parts.append(f"Expires={http_date(self._expires_at)}")
        if self._max_age is not None:
            parts.append(f"Max-Age={self._max_age}")
        if self._domain:
            parts.append(f"Domain={self._domain}")
        if self._path:
            parts.append(f"Path={self._path}")
        if self._secure:
            parts.append("Secure")
        if self._httponly:
            parts.append("HttpOnly")
        if self._same_site is not None:
            parts.append(f"SameSite={self._same_site.value}")
        return "; ".join(parts)


def format_set_cookie(cookie: Cookie) -> str:
    """Render *cookie* as a ``Set-Cookie`` header value."""
    return cookie.to_header_value()
