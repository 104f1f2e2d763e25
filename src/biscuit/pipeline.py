"""Request pipeline — before hooks, handler, after hooks.

Composes a fixed tuple of middleware. For every request it builds a
fresh ``ContextRegistry``, runs ``before_handle`` in registration order,
calls the handler unless a hook ended the response, then runs
``after_handle`` in reverse order for every middleware that was entered.

After hooks run no matter how the request went: short-circuited by a
before hook, failed with an ``HTTPError``, or crashed in the handler.
"""

import inspect
import logging
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeAlias

import anyio.to_thread

from biscuit.config import AppConfig
from biscuit.context import ContextRegistry, contexts_var
from biscuit.errors import ConfigurationError, HTTPError
from biscuit.http.request import Request
from biscuit.http.response import Response
from biscuit.middleware.protocol import Middleware

logger = logging.getLogger("biscuit.server")

Handler: TypeAlias = Callable[..., Any]

_HOOKS = ("new_context", "before_handle", "after_handle")
_MAX_HANDLER_ARGS = 3  # request, response, contexts
_VARIADIC_ARITY = sys.maxsize


def _positional_arity(func: Callable[..., Any]) -> int:
    """Count positional parameters; ``*args`` gives ``_VARIADIC_ARITY``."""
    count = 0
    for param in inspect.signature(func).parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return _VARIADIC_ARITY
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1
    return count


@dataclass(frozen=True, slots=True)
class _Stage:
    """One middleware plus the hook forms resolved at composition time."""

    middleware: Middleware[Any]
    before_wants_contexts: bool
    after_wants_contexts: bool

    def before(self, request: Request, response: Response, contexts: ContextRegistry) -> None:
        ctx = contexts.get(type(self.middleware))
        if self.before_wants_contexts:
            self.middleware.before_handle(request, response, ctx, contexts)  # type: ignore[call-arg]
        else:
            self.middleware.before_handle(request, response, ctx)

    def after(self, request: Request, response: Response, contexts: ContextRegistry) -> None:
        ctx = contexts.get(type(self.middleware))
        if self.after_wants_contexts:
            self.middleware.after_handle(request, response, ctx, contexts)  # type: ignore[call-arg]
        else:
            self.middleware.after_handle(request, response, ctx)


def _compose(middleware: Sequence[Middleware[Any]]) -> tuple[_Stage, ...]:
    stages: list[_Stage] = []
    seen: set[type] = set()
    for mw in middleware:
        missing = [hook for hook in _HOOKS if not callable(getattr(mw, hook, None))]
        if missing:
            msg = f"{type(mw).__name__} is not a middleware: missing {', '.join(missing)}."
            raise ConfigurationError(msg)
        if type(mw) in seen:
            msg = (
                f"{type(mw).__name__} was added twice. Contexts are looked up "
                "by middleware type, so each type may appear once."
            )
            raise ConfigurationError(msg)
        seen.add(type(mw))
        stages.append(
            _Stage(
                middleware=mw,
                before_wants_contexts=_positional_arity(mw.before_handle) >= 4,
                after_wants_contexts=_positional_arity(mw.after_handle) >= 4,
            )
        )
    return tuple(stages)


class Pipeline:
    """A composed middleware chain.

    Usage::

        pipeline = Pipeline([CookieParser()])
        response = await pipeline.dispatch(request, handler)

    Handlers may accept ``(request)``, ``(request, response)`` or
    ``(request, response, contexts)``; they can be ``def`` (run in a
    worker thread) or ``async def``. A returned ``str`` or ``bytes``
    becomes the body.
    """

    __slots__ = ("_config", "_stages")

    def __init__(
        self,
        middleware: Sequence[Middleware[Any]] = (),
        config: AppConfig | None = None,
    ) -> None:
        self._config = config or AppConfig()
        self._stages = _compose(middleware)

    @property
    def middleware(self) -> tuple[Middleware[Any], ...]:
        return tuple(stage.middleware for stage in self._stages)

    def new_contexts(self) -> ContextRegistry:
        """Build the per-request registry: one fresh context per middleware."""
        return ContextRegistry(
            {type(stage.middleware): stage.middleware.new_context() for stage in self._stages}
        )

    async def dispatch(self, request: Request, handler: Handler) -> Response:
        """Run one request through the chain and return the response."""
        response = Response()
        contexts = self.new_contexts()
        token = contexts_var.set(contexts)
        try:
            entered = 0
            for stage in self._stages:
                entered += 1
                self._guard(stage.before, request, response, contexts)
                if response.finished:
                    break

            if not response.finished:
                try:
                    await self._call_handler(handler, request, response, contexts)
                except HTTPError as exc:
                    self._http_error(exc, request, response)
                except Exception as exc:
                    self._internal_error(exc, request, response)

            for stage in reversed(self._stages[:entered]):
                self._guard(stage.after, request, response, contexts)
        finally:
            contexts_var.reset(token)
        response.finished = True
        return response

    # -- Internal --

    def _guard(
        self,
        hook: Callable[[Request, Response, ContextRegistry], None],
        request: Request,
        response: Response,
        contexts: ContextRegistry,
    ) -> None:
        try:
            hook(request, response, contexts)
        except HTTPError as exc:
            self._http_error(exc, request, response)
        except Exception as exc:
            self._internal_error(exc, request, response)

    async def _call_handler(
        self,
        handler: Handler,
        request: Request,
        response: Response,
        contexts: ContextRegistry,
    ) -> None:
        args = (request, response, contexts)[: min(_positional_arity(handler), _MAX_HANDLER_ARGS)]
        if inspect.iscoroutinefunction(handler):
            result = await handler(*args)
        else:
            result = await anyio.to_thread.run_sync(handler, *args)
        if inspect.isawaitable(result):
            result = await result

        if result is None or result is response:
            return
        if isinstance(result, (str, bytes)):
            response.body = result
            return
        msg = f"Handler returned {type(result).__name__}; expected str, bytes or None."
        raise TypeError(msg)

    def _http_error(self, exc: HTTPError, request: Request, response: Response) -> None:
        """Copy an HTTPError onto the response and end it."""
        logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)
        response.status = exc.status
        for name, value in exc.headers:
            response.add_header(name, value)
        response.end(exc.detail or f"Error {exc.status}")

    def _internal_error(self, exc: Exception, request: Request, response: Response) -> None:
        """Turn an unexpected exception into a 500."""
        logger.exception("500 %s %s", request.method, request.path)
        body = self._config.internal_error_body
        if self._config.debug:
            body = f"{body}\n\n{type(exc).__name__}: {exc}"
        response.status = 500
        response.end(body)
