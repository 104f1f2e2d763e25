"""Per-request middleware contexts and request-scoped ContextVars.

Provides:
- ``ContextRegistry``: one context object per middleware, looked up by
  the middleware's type. Built fresh by the pipeline for every request.
- ``request_var`` / ``contexts_var``: the current ``Request`` and
  registry for this task, for code that is not handed them directly.

Thread safety:
    A registry belongs to the single task serving its request, and
    ``ContextVar`` is task-local under asyncio. No locks needed.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextvars import ContextVar
from typing import Any

from biscuit.http.request import Request


class ContextRegistry:
    """Type-indexed map from middleware class to that middleware's context.

    Hooks that accept a fourth ``contexts`` argument receive the
    registry and can read a sibling's state::

        def before_handle(self, request, response, ctx, contexts):
            jar = contexts.get(CookieParser).jar
    """

    __slots__ = ("_contexts",)

    def __init__(self, contexts: Mapping[type, Any] | None = None) -> None:
        self._contexts: dict[type, Any] = dict(contexts or {})

    def get(self, middleware: type) -> Any:
        """Return the context of *middleware* for this request.

        A registered subclass of *middleware* also matches, so
        ``contexts.get(CookieParser)`` finds a customised parser.
        The exact type wins when both are registered.

        Raises ``LookupError`` if no such middleware is in the pipeline.
        """
        key = self._resolve(middleware)
        if key is None:
            msg = f"{middleware.__name__} is not part of this pipeline"
            raise LookupError(msg)
        return self._contexts[key]

    def _resolve(self, middleware: type) -> type | None:
        if middleware in self._contexts:
            return middleware
        for registered in self._contexts:
            if issubclass(registered, middleware):
                return registered
        return None

    def __contains__(self, middleware: object) -> bool:
        return isinstance(middleware, type) and self._resolve(middleware) is not None

    def __iter__(self) -> Iterator[type]:
        return iter(self._contexts)

    def __len__(self) -> int:
        return len(self._contexts)

    def __repr__(self) -> str:
        names = ", ".join(mw.__name__ for mw in self._contexts)
        return f"<ContextRegistry [{names}]>"


# -- Request context --

request_var: ContextVar[Request] = ContextVar("biscuit_request")
"""The current request. Set by the ASGI app before dispatch."""

contexts_var: ContextVar[ContextRegistry] = ContextVar("biscuit_contexts")
"""The middleware contexts of the current request. Set by the pipeline."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


def get_context(middleware: type) -> Any:
    """Return *middleware*'s context for the current request.

    Raises ``LookupError`` outside a request, or when *middleware*
    is not in the pipeline.
    """
    return contexts_var.get().get(middleware)
