"""
stagewrap — Exception Hierarchy
=================================

What:  The error kinds raised by the middleware lifecycle core.
How:   Each exception carries a human-readable message and an optional
       context dict. Pydantic validation failures are translated into the
       matching kind and chained as ``__cause__``.
When:  Raised synchronously at the point of violation. The core never
       retries or recovers; request-level failure handling belongs to the host.

Exception Hierarchy:
    StagewrapError (base)
    ├── InvalidApplication   → setup time: wrapped value is not an Environ → Response callable
    ├── InvalidEnvironment   → per request: a non-mapping reached the pipeline
    ├── InvalidResponse      → per request: a malformed response was produced
    └── ConfigError          → setup time: middleware configuration failed validation
"""

from typing import Any, Dict, List, Optional


class StagewrapError(Exception):
    """
    Base exception for all stagewrap errors.

    Attributes:
        message:  Description of what went wrong
        context:  Additional debug info (offending type, field names, ...)
    """

    def __init__(
        self,
        message: str = "Middleware pipeline error",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidApplication(StagewrapError):
    """
    Raised when a middleware is built around something that is not an application.

    When:    Construction or wrap received a non-callable, or a callable
             whose signature cannot accept a single environment argument.
    """

    def __init__(
        self,
        message: str = "Application must be a callable taking one environment argument",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidEnvironment(StagewrapError):
    """Raised when a non-mapping (or a mapping with non-str keys) reaches the pipeline."""

    def __init__(
        self,
        message: str = "Environment must be a mapping with string keys",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidResponse(StagewrapError):
    """
    Raised when a value that does not satisfy the response contract is stored
    or returned by the pipeline.

    Attributes:
        errors: Pydantic error list when the failure came from field validation
    """

    def __init__(
        self,
        message: str = "Response must provide a status, headers and a body",
        errors: Optional[List[Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if errors:
            ctx["errors"] = errors
        super().__init__(message=message, context=ctx)
        self.errors = errors or []


class ConfigError(StagewrapError):
    """
    Raised when a middleware's configuration fails its declared field checks.

    What:    Missing required fields, wrongly typed values, unknown keys, or a
             middleware kind that is not a middleware class at all.
    When:    At construct/wrap time, before any request is served.

    Attributes:
        middleware: Name of the middleware class being configured
        errors:     Pydantic error list describing each failing field
    """

    def __init__(
        self,
        message: str = "Middleware configuration is invalid",
        middleware: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if middleware:
            ctx["middleware"] = middleware
        if errors:
            ctx["errors"] = errors
        super().__init__(message=message, context=ctx)
        self.middleware = middleware
        self.errors = errors or []
