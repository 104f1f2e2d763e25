"""ASGI application: one handler behind a middleware pipeline.

Routing is not part of biscuit; the handler receives every request and
dispatches however it likes.
"""

import threading
from collections.abc import Sequence
from contextvars import Token
from typing import Any

from biscuit._internal.asgi import Receive, Scope, Send
from biscuit.config import AppConfig
from biscuit.context import request_var
from biscuit.http.request import Request
from biscuit.middleware.protocol import Middleware
from biscuit.pipeline import Handler, Pipeline
from biscuit.server.sender import send_response


class App:
    """The biscuit ASGI application.

    Usage::

        from biscuit import App
        from biscuit.middleware.cookies import CookieParser

        def handler(request, response, contexts):
            theme = contexts.get(CookieParser).get_cookie("theme") or "light"
            return f"Theme: {theme}"

        app = App(handler, middleware=[CookieParser()])

    Lifecycle:
        1. **Setup** — ``add_middleware()`` (before the first request).
        2. **Freeze** — the first ASGI call composes the ``Pipeline``.
        3. **Runtime** — every HTTP scope goes through ``Pipeline.dispatch``.

        The freeze uses a Lock + double-check so exactly one caller
        composes the pipeline even if the first requests race.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_handler",
        "_middleware_list",
        "_pipeline",
        "config",
    )

    def __init__(
        self,
        handler: Handler,
        config: AppConfig | None = None,
        *,
        middleware: Sequence[Middleware[Any]] = (),
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._handler = handler
        self._middleware_list: list[Middleware[Any]] = list(middleware)
        self._pipeline: Pipeline | None = None
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

    # -- Middleware --

    def add_middleware(self, middleware: Middleware[Any]) -> None:
        """Append a middleware to the pipeline."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    @property
    def pipeline(self) -> Pipeline:
        """The composed pipeline (freezes the app on first access)."""
        self._ensure_frozen()
        assert self._pipeline is not None
        return self._pipeline

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        if scope["type"] != "http":
            return

        pipeline = self.pipeline
        request = Request.from_asgi(dict(scope))
        token: Token[Request] = request_var.set(request)
        try:
            response = await pipeline.dispatch(request, self._handler)
        finally:
            request_var.reset(token)

        await send_response(
            response,
            send,
            default_content_type=self.config.default_content_type,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup so configuration errors surface
        before the first request.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._pipeline = Pipeline(self._middleware_list, self.config)
            self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Add middleware before the first request."
            )
            raise RuntimeError(msg)
