"""
stagewrap — Staged Middleware Lifecycle
=========================================

What:  Wrap any ``environ -> response`` callable with preinvoke / invoke /
       postinvoke hooks, and compose those wrappers into stacks.
Why:   Cross-cutting behaviour (logging, filtering, auth, response rewriting)
       can be layered around an application without subclassing it.
How:   Concrete middleware subclasses ``Middleware`` (or ``AsyncMiddleware``),
       declares its configuration as pydantic fields and overrides hooks.
       ``wrap`` returns a callable with the same shape as the wrapped one.

Quick start:
    from stagewrap import Middleware, Response, wrap

    def hello(environ):
        return Response(status=200, headers=[("Content-Type", "text/plain")], body=[b"hi"])

    class ServerHeader(Middleware):
        name: str = "stagewrap"

        def postinvoke(self, invocation):
            invocation.set_response(
                invocation.response.replace(
                    headers=invocation.response.headers + [("Server", self.name)]
                )
            )

    app = wrap(ServerHeader, hello, name="demo")
    app({"PATH_INFO": "/"}).get_header("Server")   # "demo"

Package layout:
    stagewrap/
    ├── config.py            # Settings (pydantic-settings), setup_logging
    ├── exceptions.py        # Error kinds
    ├── contracts.py         # validate_environment / _response / _application
    ├── builder.py           # wrap(), Stack
    ├── schemas/
    │   └── response.py      # Response model
    └── middleware/
        ├── invocation.py    # Per-call state
        ├── base.py          # Middleware (sync pipeline)
        └── async_base.py    # AsyncMiddleware
"""

import logging

from stagewrap.builder import Stack, wrap
from stagewrap.contracts import (
    Application,
    Environ,
    is_async_application,
    validate_application,
    validate_environment,
    validate_response,
)
from stagewrap.exceptions import (
    ConfigError,
    InvalidApplication,
    InvalidEnvironment,
    InvalidResponse,
    StagewrapError,
)
from stagewrap.middleware import AsyncMiddleware, Invocation, Middleware, MiddlewareBase
from stagewrap.schemas import Response

__version__ = "1.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Application",
    "AsyncMiddleware",
    "ConfigError",
    "Environ",
    "InvalidApplication",
    "InvalidEnvironment",
    "InvalidResponse",
    "Invocation",
    "Middleware",
    "MiddlewareBase",
    "Response",
    "Stack",
    "StagewrapError",
    "is_async_application",
    "validate_application",
    "validate_environment",
    "validate_response",
    "wrap",
    "__version__",
]
