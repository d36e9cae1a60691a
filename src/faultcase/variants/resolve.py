"""Partial resolution: turn selected failure labels into success values.

Each resolution narrows the schema by exactly the resolved labels. Once no
failure labels remain, ``Variant.extract()`` unwraps the plain success value.

Example:
    >>> errors = Schema(notFound=str, timeout=float)
    >>> fetched = errors.failure("timeout", 2.5)
    >>> partial = fetched.resolve("timeout", lambda secs: f"cached after {secs}s")
    >>> partial.schema
    Schema(notFound=str)
    >>> partial.resolve("notFound", lambda key: "default").extract()
    'cached after 2.5s'
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from faultcase.errors import ErrorCode, misuse

from .schema import SUCCESS, Schema, validate_table
from .variant import Variant

A = TypeVar("A")


def resolve_one(variant: Variant[A], label: str, f: Callable[[Any], A]) -> Variant[A]:
    """Resolve a single failure label.

    Active ``label`` becomes ``success(f(payload))``; any other active label is
    forwarded with the same payload against the narrowed schema.
    """
    narrowed = variant.schema.without(label)

    def on_failure(active: str, payload: Any) -> Variant[A]:
        if active == label:
            return Variant._trusted(narrowed, SUCCESS, f(payload))
        return Variant._trusted(narrowed, active, payload)

    return variant.eliminate(on_failure, narrowed.success)


class Resolver(Generic[A]):
    """Validated table of resolution handlers for one schema.

    The table is checked when declared, before any value is seen: the success
    label and labels missing from the schema are rejected. Applying the
    resolver to a value of another schema raises SCHEMA_MISMATCH.

    Example:
        >>> resolver = errors.resolver(notFound=lambda k: "", timeout=lambda s: "")
        >>> resolver(errors.failure("notFound", "k")).extract()
        ''
    """

    __slots__ = ("schema", "narrowed", "_handlers")

    def __init__(self, schema: Schema, handlers: Mapping[str, Callable[[Any], A]]) -> None:
        validate_table(schema, handlers, success=False, complete=False)
        self.schema = schema
        self.narrowed = schema.without(*handlers)
        self._handlers: Mapping[str, Callable[[Any], A]] = MappingProxyType(dict(handlers))

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    def _on_failure(self, active: str, payload: Any) -> Variant[A]:
        if (handler := self._handlers.get(active)) is not None:
            return Variant._trusted(self.narrowed, SUCCESS, handler(payload))
        return Variant._trusted(self.narrowed, active, payload)

    def __call__(self, variant: Variant[A]) -> Variant[A]:
        if variant.schema != self.schema:
            misuse(ErrorCode.SCHEMA_MISMATCH, f"resolver declared for {self.schema!r}, got {variant.schema!r}")
        return variant.eliminate(self._on_failure, self.narrowed.success)

    resolve = __call__

    def __repr__(self) -> str:
        return f"Resolver({', '.join(self._handlers)} -> {self.narrowed!r})"


def resolve_many(
    variant: Variant[A],
    handlers: Mapping[str, Callable[[Any], A]] | None = None,
    /,
    **kw: Callable[[Any], A],
) -> Variant[A]:
    """Resolve every label present in handlers; forward any other active label."""
    return Resolver(variant.schema, {**(handlers or {}), **kw})(variant)
