"""
stagewrap — Composition
=========================

What:  Attach middleware kinds around an application.
How:   ``wrap`` builds one layer. ``Stack`` records several layers and
       builds them so the first one added is the outermost.

    Stack().add(RateLimit, limit=10).add(RequestId).build(app)
        ≡ wrap(RateLimit, wrap(RequestId, app), limit=10)

    Request  ─► RateLimit ─► RequestId ─► app
    Response ◄─ RateLimit ◄─ RequestId ◄─┘
"""

import inspect
import logging
from typing import Any, Dict, List, Tuple, Type

from stagewrap.contracts import Application, validate_application
from stagewrap.exceptions import ConfigError
from stagewrap.middleware.base import MiddlewareBase

logger = logging.getLogger(__name__)


def _check_kind(kind: Any) -> Type[MiddlewareBase]:
    if not (isinstance(kind, type) and issubclass(kind, MiddlewareBase)):
        raise ConfigError(
            f"{kind!r} is not a middleware class",
            middleware=getattr(kind, "__name__", repr(kind)),
        )
    if inspect.isabstract(kind):
        raise ConfigError(
            f"{kind.__name__} is abstract; subclass Middleware or AsyncMiddleware",
            middleware=kind.__name__,
        )
    return kind


def wrap(kind: Type[MiddlewareBase], app: Any, **config: Any) -> Application:
    """
    Layer ``kind`` around ``app`` and return the new application.

    Raises:
        ConfigError:        ``kind`` is not a middleware class, or ``config``
                            fails its field checks.
        InvalidApplication: ``app`` is not an environ → response callable.
    """
    kind = _check_kind(kind)
    app = validate_application(app)
    wrapped = kind.wrap(app, **config)
    logger.debug("Wrapped %r with %s", app, kind.__name__)
    return wrapped


class Stack:
    """Ordered middleware layers; the first added is the outermost."""

    def __init__(self) -> None:
        self._layers: List[Tuple[Type[MiddlewareBase], Dict[str, Any]]] = []

    def __len__(self) -> int:
        return len(self._layers)

    def __repr__(self) -> str:
        names = " → ".join(kind.__name__ for kind, _ in self._layers) or "empty"
        return f"<Stack {names}>"

    def add(self, kind: Type[MiddlewareBase], **config: Any) -> "Stack":
        self._layers.append((_check_kind(kind), config))
        return self

    def build(self, app: Any) -> Application:
        """Wrap ``app`` innermost-first. Setup errors surface here."""
        app = validate_application(app)
        for kind, config in reversed(self._layers):
            app = wrap(kind, app, **config)
        logger.debug("Built %r", self)
        return app
