"""Middleware — Protocol-based, no inheritance required.

A middleware provides ``new_context()``, ``before_handle()`` and
``after_handle()``; see ``biscuit.middleware.protocol``.

Built-in middleware:
    CookieParser -- Request cookie jar and Set-Cookie emission
"""

from biscuit.middleware.cookies import CookieContext, CookieParser, CookieParserConfig
from biscuit.middleware.protocol import Middleware

__all__ = [
    "CookieContext",
    "CookieParser",
    "CookieParserConfig",
    "Middleware",
]
