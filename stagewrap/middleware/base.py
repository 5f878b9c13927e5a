"""
stagewrap — Middleware Base Classes
=====================================

What:  The lifecycle contract every middleware implements, and the pipeline
       that drives one request through it.
How:   A middleware is a frozen pydantic model holding the wrapped ``app``
       and any configuration fields a concrete kind declares. Concrete kinds
       override ``preinvoke`` / ``invoke`` / ``postinvoke``; everything else
       is fixed.

Pipeline (one call):
    ┌────────────────────────────────────────────────────────────────┐
    │  environ ─► Invocation(environ)      InvalidEnvironment        │
    │             preinvoke(invocation)    augment / short_circuit   │
    │             invoke(invocation)       app(environ) → response   │
    │             postinvoke(invocation)   filter / rewrite          │
    │  response ◄ invocation.result()      InvalidResponse           │
    └────────────────────────────────────────────────────────────────┘

Concurrency:
    The instance holds only immutable configuration and is shared by every
    request that reaches it. Per-request state lives on the Invocation, so
    overlapping calls never see each other's environment or response.
    A concrete middleware that keeps genuinely shared state (counters,
    caches) must guard it itself, e.g. with a ``PrivateAttr`` lock.

Example:
    class InjectLogger(Middleware):
        logger: logging.Logger

        def preinvoke(self, invocation):
            invocation.set_environ_value("myapp.logger", self.logger)

    app = InjectLogger.wrap(app, logger=logging.getLogger("myapp"))
"""

import logging
from abc import abstractmethod
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, ValidationError

from stagewrap.config import settings
from stagewrap.contracts import (
    Application,
    Environ,
    is_async_application,
    validate_application,
)
from stagewrap.exceptions import ConfigError, InvalidApplication
from stagewrap.middleware.invocation import Invocation
from stagewrap.schemas.response import Response

logger = logging.getLogger(__name__)


class MiddlewareBase(BaseModel):
    """
    Construction and wrapping shared by sync and async middleware.

    Subclasses declare configuration as pydantic fields. Unknown keys,
    missing required fields and wrongly typed values raise ConfigError.
    """

    app: Callable[..., Any]

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
        extra="forbid",
    )

    def __init__(self, app: Any = None, /, **config: Any):
        if app is None:
            app = config.pop("app", None)
        app = validate_application(app)
        type(self)._check_application(app)
        try:
            super().__init__(app=app, **config)
        except ValidationError as exc:
            raise ConfigError(
                f"Invalid configuration for {type(self).__name__}: "
                f"{exc.error_count()} error(s)",
                middleware=type(self).__name__,
                errors=exc.errors(include_url=False, include_context=False),
            ) from exc
        logger.debug("Constructed %s around %r", type(self).__name__, app)

    @classmethod
    def wrap(cls, app: Any, **config: Any) -> Application:
        """
        Build this middleware around ``app`` and return its application.

        Raises:
            InvalidApplication: ``app`` is not an environ → response callable.
            ConfigError:        ``config`` fails this kind's field checks.
        """
        return cls(app, **config).to_app()

    @classmethod
    def _check_application(cls, app: Application) -> None:
        """Kind-specific application check, run before any field validation."""
        return None

    @abstractmethod
    def to_app(self) -> Application:
        """The callable that runs this middleware's pipeline for one environ."""


class Middleware(MiddlewareBase):
    """Synchronous middleware: every hook runs to completion before the next."""

    @classmethod
    def _check_application(cls, app: Application) -> None:
        # A sync pipeline cannot await; the coroutine would reach result()
        if is_async_application(app):
            raise InvalidApplication(
                f"Application {getattr(app, '__qualname__', app)!r} is asynchronous; "
                f"wrap it with AsyncMiddleware instead of {cls.__name__}",
                context={"middleware": cls.__name__},
            )

    def preinvoke(self, invocation: Invocation) -> None:
        """
        Runs before the application. No response exists yet.

        Override to augment the environment, or call
        ``invocation.short_circuit(response)`` to skip the application.
        """
        return None

    def invoke(self, invocation: Invocation) -> None:
        """
        Calls ``app`` with the current environment and stores its response.

        Skipped when the invocation was short-circuited. A response set
        earlier without ``short_circuit`` is overwritten.
        """
        if invocation.short_circuited:
            logger.debug("%s: short-circuited, application skipped", type(self).__name__)
            return
        _warn_if_discarding(self, invocation)
        invocation.set_response(self.app(invocation.copy_environ()))

    def postinvoke(self, invocation: Invocation) -> None:
        """Runs after invoke; ``invocation.response`` is set. Override to filter."""
        return None

    def call(self, environ: Environ) -> Response:
        """Drive one request through preinvoke → invoke → postinvoke."""
        invocation = Invocation(environ)
        self.preinvoke(invocation)
        self.invoke(invocation)
        self.postinvoke(invocation)
        return invocation.result()

    def __call__(self, environ: Environ) -> Response:
        return self.call(environ)

    def to_app(self) -> Application:
        """A plain ``environ -> Response`` function closing over this instance."""
        middleware = self

        def app(environ: Environ) -> Response:
            return middleware.call(environ)

        app.__name__ = app.__qualname__ = f"{type(self).__name__}.app"
        app.middleware = middleware
        return app


def _warn_if_discarding(middleware: MiddlewareBase, invocation: Invocation) -> None:
    if invocation.has_response and settings.warn_on_discarded_response:
        logger.warning(
            "%s: response set before invoke without short_circuit() is being "
            "replaced by the application's response",
            type(middleware).__name__,
        )
