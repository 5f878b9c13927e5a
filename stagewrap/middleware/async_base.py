"""
stagewrap — Async Middleware
==============================

What:  The same lifecycle contract as ``Middleware`` with coroutine hooks.
How:   Each phase is awaited before the next starts, so the ordering
       preinvoke → invoke → postinvoke holds even when hooks do async work.
       The default invoke awaits the application's result when it is
       awaitable, so both sync and async inner applications are supported.

Cancellation:
    Nothing in the pipeline catches exceptions; ``asyncio.CancelledError``
    raised by a hook or by the application reaches the caller unchanged.
"""

import inspect
import logging

from stagewrap.contracts import Application, Environ
from stagewrap.middleware.base import MiddlewareBase, _warn_if_discarding
from stagewrap.middleware.invocation import Invocation
from stagewrap.schemas.response import Response

logger = logging.getLogger(__name__)


class AsyncMiddleware(MiddlewareBase):
    """Asynchronous middleware. Shared state must use an ``asyncio.Lock``."""

    async def preinvoke(self, invocation: Invocation) -> None:
        return None

    async def invoke(self, invocation: Invocation) -> None:
        if invocation.short_circuited:
            logger.debug("%s: short-circuited, application skipped", type(self).__name__)
            return
        _warn_if_discarding(self, invocation)
        result = self.app(invocation.copy_environ())
        if inspect.isawaitable(result):
            result = await result
        invocation.set_response(result)

    async def postinvoke(self, invocation: Invocation) -> None:
        return None

    async def call(self, environ: Environ) -> Response:
        invocation = Invocation(environ)
        await self.preinvoke(invocation)
        await self.invoke(invocation)
        await self.postinvoke(invocation)
        return invocation.result()

    async def __call__(self, environ: Environ) -> Response:
        return await self.call(environ)

    def to_app(self) -> Application:
        """An ``async environ -> Response`` function closing over this instance."""
        middleware = self

        async def app(environ: Environ) -> Response:
            return await middleware.call(environ)

        app.__name__ = app.__qualname__ = f"{type(self).__name__}.app"
        app.middleware = middleware
        return app
