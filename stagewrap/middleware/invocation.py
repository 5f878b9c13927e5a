"""
stagewrap — Per-Call Pipeline State
=====================================

What:  The environment and response for exactly one trip through a pipeline.
Why:   Middleware instances are long-lived and shared by every concurrent
       request; per-request values must never live on them. One Invocation
       is created per call and handed to each hook in turn.
How:   Values are only replaced through the setters, which apply the
       environment and response contracts. ``environ`` is a read-only view;
       the application receives its own copy from ``copy_environ()``.

Lifecycle of one Invocation:
    Invocation(environ)      environ validated, response is None
    preinvoke(invocation)    may set_environ / set_environ_value / short_circuit
    invoke(invocation)       default stores app(environ) via set_response
    postinvoke(invocation)   may set_response, or mutate the response
    invocation.result()      final response check, then returned
"""

import logging
from types import MappingProxyType
from typing import Any, Dict, Optional

from stagewrap.contracts import Environ, validate_environment, validate_response
from stagewrap.exceptions import InvalidResponse
from stagewrap.schemas.response import Response

logger = logging.getLogger(__name__)


class Invocation:
    """Call-local pipeline state. Not shared between calls, not thread-safe."""

    __slots__ = ("_environ", "_response", "_short_circuited")

    def __init__(self, environ: Any):
        self._environ: Environ = validate_environment(environ)
        self._response: Optional[Response] = None
        self._short_circuited = False

    def __repr__(self) -> str:
        return (
            f"<Invocation keys={len(self._environ)} "
            f"response={'set' if self._response is not None else 'unset'} "
            f"short_circuited={self._short_circuited}>"
        )

    # ── Environment ───────────────────────────────────────────────────────

    @property
    def environ(self) -> Environ:
        """Read-only view of the current environment; use the setters to change it."""
        return MappingProxyType(self._environ)

    def copy_environ(self) -> Dict[Any, Any]:
        """A fresh dict of the current environment, owned by the caller."""
        return dict(self._environ)

    def set_environ(self, environ: Any) -> None:
        """Replace the current environment. Raises InvalidEnvironment."""
        self._environ = validate_environment(environ)

    def set_environ_value(self, key: str, value: Any) -> None:
        """
        Add or replace one key, without touching the caller's mapping.

        The environment is copied into a new dict, so read-only mappings
        (``MappingProxyType``) are supported and outer layers keep their view.
        Raises InvalidEnvironment for a non-str key under strict keys.
        """
        updated = dict(self._environ)
        updated[key] = value
        self._environ = validate_environment(updated)

    # ── Response ──────────────────────────────────────────────────────────

    @property
    def response(self) -> Optional[Response]:
        """The current response; None until one has been set."""
        return self._response

    @property
    def has_response(self) -> bool:
        return self._response is not None

    @property
    def short_circuited(self) -> bool:
        return self._short_circuited

    def set_response(self, response: Any) -> None:
        """Replace the current response. Raises InvalidResponse."""
        self._response = validate_response(response)

    def short_circuit(self, response: Any) -> None:
        """
        Set the response ahead of invoke and mark the application as skipped.

        The default ``invoke`` honours this mark. A middleware that overrides
        ``invoke`` must check ``short_circuited`` itself.
        """
        self.set_response(response)
        self._short_circuited = True
        logger.debug("Invocation short-circuited with status %d", self._response.status)

    def result(self) -> Response:
        """Final boundary check; the value returned from the pipeline."""
        if self._response is None:
            raise InvalidResponse("Pipeline finished without producing a response")
        return validate_response(self._response)
