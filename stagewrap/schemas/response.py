"""
stagewrap — Response Schema
=============================

What:  Pydantic model describing a well-formed response.
Why:   The core treats responses as opaque beyond this shape; every value
       that crosses a pipeline boundary is checked against it.
How:   ``status`` is a numeric-like HTTP status code, ``headers`` a list of
       (name, value) string pairs, ``body`` a streamable value.

Accepted inputs:
    status:  200, HTTPStatus.OK, "200"          (coerced to int, 100-599)
    headers: [("Content-Type", "text/plain")]    (list of pairs)
             {"Content-Type": "text/plain"}      (mapping)
             ["Content-Type", "text/plain"]      (flat PSGI-style list)
    body:    [b"chunk", "chunk"]                 (list/tuple of str/bytes chunks)
             (chunk for chunk in ...)            (any other non-string iterable)
             open(path, "rb") / io.BytesIO(...)  (file-like with read())

    Rejected bodies: None, a bare str/bytes, a mapping, non-iterables.
"""

from collections.abc import Iterable, Mapping
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

_CHUNK_TYPES = (str, bytes, bytearray)


class Response(BaseModel):
    """
    What:  A status / headers / body triple produced once per invocation.
    Who:   Returned by applications, stored through Invocation.set_response,
           and returned from every wrapped callable.
    """

    status: int = Field(ge=100, le=599, description="HTTP status code")
    headers: List[Tuple[str, str]] = Field(
        default_factory=list,
        description="Ordered (name, value) header pairs",
    )
    body: Any = Field(description="Chunk sequence, iterable or file-like object")

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @field_validator("headers", mode="before")
    @classmethod
    def normalize_headers(cls, v: Any) -> Any:
        """Accepts a mapping or a flat [name, value, ...] list as well as pairs."""
        if v is None:
            raise ValueError("headers are required (use an empty list for none)")
        if isinstance(v, Mapping):
            return list(v.items())
        if isinstance(v, (list, tuple)) and v and all(isinstance(item, str) for item in v):
            if len(v) % 2:
                raise ValueError("flat header list must have an even number of items")
            return [(v[i], v[i + 1]) for i in range(0, len(v), 2)]
        return v

    @field_validator("body")
    @classmethod
    def validate_body(cls, v: Any) -> Any:
        """Ensures the body is present and streamable."""
        if v is None:
            raise ValueError("body is required")
        if isinstance(v, _CHUNK_TYPES):
            raise ValueError(
                "body must be an iterable of chunks or a file-like object, not a bare string"
            )
        if callable(getattr(v, "read", None)):
            return v
        if isinstance(v, Mapping):
            raise ValueError("body must not be a mapping")
        if isinstance(v, (list, tuple)):
            for index, chunk in enumerate(v):
                if not isinstance(chunk, _CHUNK_TYPES):
                    raise ValueError(
                        f"body chunk {index} is {type(chunk).__name__}, expected str or bytes"
                    )
            return v
        if isinstance(v, Iterable):
            return v
        raise ValueError(f"body of type {type(v).__name__} is not streamable")

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Returns the first header value matching ``name`` (case-insensitive)."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return default

    def replace(self, **changes: Any) -> "Response":
        """Returns a validated copy with ``changes`` applied."""
        data = {"status": self.status, "headers": list(self.headers), "body": self.body}
        data.update(changes)
        return type(self).model_validate(data)

    def as_tuple(self) -> Tuple[int, List[Tuple[str, str]], Any]:
        """The (status, headers, body) triple, for hosts that expect one."""
        return self.status, self.headers, self.body
