"""
stagewrap — Middleware Package
================================

What:  The lifecycle hook contract and its per-call state.

    Middleware        sync hooks, plain-function application
    AsyncMiddleware   coroutine hooks, async-function application
    Invocation        environment + response for one call

Nesting (wrap(Outer, wrap(Inner, app))):
    Outer.preinvoke → Inner.preinvoke → app → Inner.postinvoke → Outer.postinvoke
"""

from stagewrap.middleware.async_base import AsyncMiddleware
from stagewrap.middleware.base import Middleware, MiddlewareBase
from stagewrap.middleware.invocation import Invocation

__all__ = ["AsyncMiddleware", "Invocation", "Middleware", "MiddlewareBase"]
