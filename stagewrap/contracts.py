"""
stagewrap — Boundary Contracts
================================

What:  Validation for the three values that cross pipeline boundaries.
How:   Each validator returns the (possibly normalized) value or raises the
       matching stagewrap error kind.
When:  Application at construction, environment at call entry and on every
       environment setter, response on every response setter and once more
       when the pipeline returns. Never continuously.
"""

import inspect
import logging
from collections.abc import Mapping
from typing import Any, Callable

from pydantic import ValidationError

from stagewrap.config import settings
from stagewrap.exceptions import InvalidApplication, InvalidEnvironment, InvalidResponse
from stagewrap.schemas.response import Response

logger = logging.getLogger(__name__)

Environ = Mapping[str, Any]
Application = Callable[[Environ], Any]

_RESPONSE_FIELDS = ("status", "headers", "body")


def validate_environment(value: Any) -> Environ:
    """
    Accept only mappings (with str keys when ``settings.strict_environ_keys``).

    Raises:
        InvalidEnvironment: for None, non-mappings, or non-str keys.
    """
    if not isinstance(value, Mapping):
        raise InvalidEnvironment(
            f"Environment must be a mapping, got {type(value).__name__}",
            context={"type": type(value).__name__},
        )
    if settings.strict_environ_keys:
        bad_keys = [key for key in value if not isinstance(key, str)]
        if bad_keys:
            raise InvalidEnvironment(
                "Environment keys must be strings",
                context={"keys": [repr(key) for key in bad_keys[:5]]},
            )
    return value


def validate_response(value: Any) -> Response:
    """
    Accept a Response, a (status, headers, body) triple or a mapping with
    those keys; return a Response.

    A Response instance is rechecked field by field (it may have been mutated
    since it was built) and returned unchanged, so identity is preserved.

    Raises:
        InvalidResponse: when the value does not satisfy the response shape.
    """
    if isinstance(value, Response):
        _check({"status": value.status, "headers": value.headers, "body": value.body})
        return value

    if isinstance(value, Mapping):
        data = dict(value)
    elif isinstance(value, (list, tuple)) and len(value) == len(_RESPONSE_FIELDS):
        data = dict(zip(_RESPONSE_FIELDS, value))
    else:
        raise InvalidResponse(
            f"Response must be a Response, a (status, headers, body) triple "
            f"or a mapping, got {type(value).__name__}",
            context={"type": type(value).__name__},
        )
    return _check(data)


def _check(data: dict) -> Response:
    # Always the base schema: subclasses may declare fields the triple lacks
    try:
        return Response.model_validate(data)
    except ValidationError as exc:
        raise InvalidResponse(
            f"Malformed response: {exc.error_count()} validation error(s)",
            errors=exc.errors(include_url=False, include_context=False),
        ) from exc


def validate_application(value: Any) -> Application:
    """
    Accept only callables that can be invoked with one positional argument.

    Callables whose signature cannot be introspected (some builtins and C
    extensions) are accepted on callability alone.

    Raises:
        InvalidApplication: for non-callables or incompatible signatures.
    """
    if not callable(value):
        raise InvalidApplication(
            f"Application must be callable, got {type(value).__name__}",
            context={"type": type(value).__name__},
        )
    try:
        signature = inspect.signature(value)
    except (TypeError, ValueError):
        logger.debug("No signature for %r; accepting on callability", value)
        return value
    try:
        signature.bind(None)
    except TypeError as exc:
        raise InvalidApplication(
            f"Application {getattr(value, '__qualname__', value)!r} cannot be "
            f"called with a single environment argument: {exc}",
            context={"signature": str(signature)},
        ) from exc
    return value


def is_async_application(value: Any) -> bool:
    """True for coroutine functions and objects whose ``__call__`` is one."""
    if inspect.iscoroutinefunction(value):
        return True
    return inspect.iscoroutinefunction(getattr(value, "__call__", None))
