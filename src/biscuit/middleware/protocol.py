"""Middleware protocol: a context factory plus two hooks.

A middleware is any object with this shape::

    class Timer:
        def new_context(self) -> TimerContext: ...
        def before_handle(self, request, response, ctx) -> None: ...
        def after_handle(self, request, response, ctx) -> None: ...

No base class required. The pipeline checks the shape, not the lineage.

Either hook may take a fourth positional parameter; the pipeline then
passes the request's ``ContextRegistry`` so the hook can read sibling
middleware contexts. Which form a hook uses is resolved once, when the
pipeline is composed.
"""

from typing import Protocol, TypeVar

from biscuit.http.request import Request
from biscuit.http.response import Response


C = TypeVar("C")


class Middleware(Protocol[C]):
    """Protocol for biscuit middleware.

    ``new_context`` is called once per request. ``before_handle`` runs
    before the handler and may call ``response.end()`` to skip it;
    ``after_handle`` runs afterwards, and always runs for a middleware
    whose ``before_handle`` was called.
    """

    def new_context(self) -> C: ...

    def before_handle(self, request: Request, response: Response, ctx: C, /) -> None: ...

    def after_handle(self, request: Request, response: Response, ctx: C, /) -> None: ...
