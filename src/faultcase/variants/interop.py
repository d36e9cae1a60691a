"""Conversions between labeled unions, binary Results, and optional values.

The optional-value type is plain ``A | None``: a present value is anything but
None. A success carrying None therefore converts to an absent optional.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from faultcase.errors import Result

from .schema import Schema
from .variant import Variant

A = TypeVar("A")
E = TypeVar("E")


def _schema_for(label: str, schema: Schema | None, payload_type: Any = Any) -> Schema:
    if schema is None:
        return Schema({label: payload_type})
    schema.require(label)
    return schema


def from_result(label: str, result: Result[A, E], *, schema: Schema | None = None) -> Variant[A]:
    """Ok(a) → success(a); Err(e) → failure under label.

    Without a schema, the value gets a one-label schema accepting any payload.

    Example:
        >>> from faultcase.errors import Err
        >>> from_result("parse", Err("bad digit"))
        Failure(parse='bad digit')
    """
    schema = _schema_for(label, schema)
    return result.match(ok=schema.success, err=lambda e: schema.failure(label, e))


def to_optional(variant: Variant[A]) -> A | None:
    """Success value, or None for any failure."""
    return variant.to_optional()


def note(label: str, payload: object, value: A | None, *, schema: Schema | None = None) -> Variant[A]:
    """Present value → success; None → failure under label carrying payload."""
    schema = _schema_for(label, schema)
    return schema.success(value) if value is not None else schema.failure(label, payload)


def note_with(label: str, payload: Callable[[], object], value: A | None, *, schema: Schema | None = None) -> Variant[A]:
    """Like note, computing the failure payload only when value is absent."""
    schema = _schema_for(label, schema)
    return schema.success(value) if value is not None else schema.failure(label, payload())


def catch(
    label: str,
    fn: Callable[[], A],
    *exc_types: type[BaseException],
    schema: Schema | None = None,
) -> Variant[A]:
    """Run fn; an exception of exc_types (default Exception) becomes a failure under label.

    Example:
        >>> catch("badInt", lambda: int("x"), ValueError).label
        'badInt'
    """
    schema = _schema_for(label, schema, BaseException)
    caught = exc_types or (Exception,)
    try:
        value = fn()
    except caught as exc:
        return schema.failure(label, exc)
    return schema.success(value)
