"""Labeled union of one success value and many labeled failures.

Variant generalizes the binary Result: the success slot stays uniform while any
number of independently labeled failure cases coexist, each with its own
payload type. Exactly one label is active at a time.

Combinators dispatch through eliminate(). Implements:
- Functor: map
- Monad: bind (and_then)
- Applicative: apply
- Alternative: alt
- Comonad-style extend

Example:
    >>> math_errors = Schema(divByZero=type(None))
    >>>
    >>> def divide(a: float, b: float) -> Variant[float]:
    ...     if b == 0:
    ...         return math_errors.failure("divByZero", None)
    ...     return math_errors.success(a / b)
    >>>
    >>> divide(10, 2).map(lambda x: x * 2).success_or(-1)
    10.0
    >>> divide(10, 0).success_or(-1)
    -1
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any, Generic, TypeVar

from faultcase.config import get_settings
from faultcase.errors import ErrorCode, misuse

from .schema import EMPTY, SUCCESS, Cases, Schema

A = TypeVar("A")
B = TypeVar("B")


_FAILED: Any = object()


def _identity(x: A) -> A:
    return x


class Variant(Generic[A]):
    """One active ``(label, payload)`` pair typed against a Schema.

    Build values with ``Schema.success``/``Schema.failure`` (or the module-level
    ``success``/``failure``). The constructor checks like ``Schema.failure``:
    the label must be ``_`` or a declared failure label, and a failure payload
    must match its declared type.

    Supports structural pattern matching on ``(label, payload)``:

        >>> match divide(10, 0):
        ...     case Variant("_", value): ...
        ...     case Variant("divByZero", _): ...
    """

    __slots__ = ("_schema", "_label", "_payload")
    __match_args__ = ("label", "payload")

    def __init__(self, schema: Schema, label: str, payload: Any) -> None:
        if label != SUCCESS:
            schema.require(label)
            if get_settings().payload.check_types:
                schema.check(label, payload)
        self._schema = schema
        self._label = label
        self._payload = payload

    @classmethod
    def _trusted(cls, schema: Schema, label: str, payload: Any) -> Variant[Any]:
        """Build without checks, for re-tagging values that were already checked."""
        variant = cls.__new__(cls)
        variant._schema = schema
        variant._label = label
        variant._payload = payload
        return variant

    # ─── Inspection ──────────────────────────────────────────────────

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def label(self) -> str:
        return self._label

    @property
    def payload(self) -> Any:
        return self._payload

    def is_success(self) -> bool:
        return self._label == SUCCESS

    def is_failure(self) -> bool:
        return self._label != SUCCESS

    # ─── Elimination ─────────────────────────────────────────────────

    def eliminate(self, on_failure: Callable[[str, Any], B], on_success: Callable[[A], B]) -> B:
        """Total dispatch: on_success(value) if success, else on_failure(label, payload).

        Pass a ``Cases`` table (``schema.cases(...)``) as on_failure to have
        exhaustiveness over the failure labels checked up front.
        """
        if self._label == SUCCESS:
            return on_success(self._payload)
        return on_failure(self._label, self._payload)

    def match(self, handlers: Mapping[str, Callable[[Any], B]] | None = None, /, **kw: Callable[[Any], B]) -> B:
        """Dispatch with one handler per label, ``_`` for success.

        Example:
            >>> divide(10, 0).match(_=str, divByZero=lambda _: "undefined")
            'undefined'
        """
        table = {**(handlers or {}), **kw}
        if SUCCESS not in table:
            misuse(ErrorCode.INCOMPLETE_TABLE, "no entry for the success label", label=SUCCESS)
        on_success = table.pop(SUCCESS)
        return self.eliminate(Cases(self._schema, table), on_success)

    # ─── Functor / Monad ─────────────────────────────────────────────

    def map(self, f: Callable[[A], B]) -> Variant[B]:
        """Apply f to the success value; failures pass through unchanged."""
        return self.eliminate(lambda _l, _p: self, lambda a: Variant._trusted(self._schema, SUCCESS, f(a)))  # type: ignore[return-value]

    def bind(self, f: Callable[[A], Variant[B]]) -> Variant[B]:
        """Monadic bind (>>=). The first failure short-circuits the chain.

        To accumulate failure modes across steps, have each step return values
        of a shared superset schema (see ``Schema.union`` and ``widen``).
        """
        return self.eliminate(lambda _l, _p: self, f)  # type: ignore[return-value]

    and_then = bind

    def apply(self, ff: Variant[Callable[[A], B]]) -> Variant[B]:
        """Apply a wrapped function (Applicative). A failing ``ff`` wins over self."""
        return ff.eliminate(lambda _l, _p: ff, self.map)  # type: ignore[return-value, arg-type]

    def alt(self, other: Variant[A]) -> Variant[A]:
        """Return other only if self is a failure and other a success; otherwise self."""
        return self.eliminate(
            lambda _l, _p: other.eliminate(lambda _ol, _op: self, lambda _: other),
            lambda _: self,
        )

    def extend(self, f: Callable[[Variant[A]], B]) -> Variant[B]:
        """Wrap f(self) as a success, whatever the active label."""
        return Variant._trusted(self._schema, SUCCESS, f(self))

    def map_failure(self, label: str, f: Callable[[Any], Any], payload_type: Any = None) -> Variant[A]:
        """Transform one failure label's payload.

        The declared payload type is kept unless payload_type is given, so a
        type-preserving f leaves the schema unchanged. The new payload is
        checked against the resulting type.
        """
        self._schema.require(label)
        schema = self._schema if payload_type is None else self._schema.retype(label, payload_type)

        def on_failure(active: str, payload: Any) -> Variant[A]:
            return schema.failure(label, f(payload)) if active == label else Variant._trusted(schema, active, payload)

        return self.eliminate(on_failure, schema.success)

    def widen(self, schema: Schema) -> Variant[A]:
        """Re-tag against a superset schema."""
        if not self._schema.issubset(schema):
            misuse(ErrorCode.SCHEMA_MISMATCH, f"{self._schema!r} is not contained in {schema!r}")
        return self.eliminate(lambda label, payload: Variant._trusted(schema, label, payload), schema.success)

    # ─── Partial Resolution ──────────────────────────────────────────

    def resolve(self, label: str, f: Callable[[Any], A]) -> Variant[A]:
        """Turn failure ``label`` into a success via f; the result's schema drops label."""
        from .resolve import resolve_one
        return resolve_one(self, label, f)

    def resolve_many(self, handlers: Mapping[str, Callable[[Any], A]] | None = None, /,
                     **kw: Callable[[Any], A]) -> Variant[A]:
        """Resolve several failure labels at once; the result's schema drops all of them."""
        from .resolve import resolve_many
        return resolve_many(self, handlers, **kw)

    def extract(self) -> A:
        """Unwrap a fully resolved value (schema without failure labels)."""
        if len(self._schema):
            misuse(ErrorCode.UNRESOLVED_FAILURE, f"failure labels remain: {', '.join(self._schema.labels)}")
        return self.eliminate(
            lambda label, _p: misuse(ErrorCode.UNRESOLVED_FAILURE, "failure active in resolved value", label=label),
            _identity,
        )

    # ─── Conversion ──────────────────────────────────────────────────

    def to_optional(self) -> A | None:
        """Success value, or None for any failure."""
        return self.eliminate(lambda _l, _p: None, _identity)

    def success_or(self, default: A) -> A:
        return self.eliminate(lambda _l, _p: default, _identity)

    def success_or_else(self, default: Callable[[], A]) -> A:
        """Like success_or, computing the default only when needed."""
        return self.eliminate(lambda _l, _p: default(), _identity)

    def failure_or(self, default: B, on_failure: Callable[[Fault], B]) -> B:
        """default if success, else on_failure applied to the failure portion."""
        return self.eliminate(lambda label, payload: on_failure(Fault(self._schema, label, payload)),
                              lambda _: default)

    def failure_or_else(self, default: Callable[[], B], on_failure: Callable[[Fault], B]) -> B:
        return self.eliminate(lambda label, payload: on_failure(Fault(self._schema, label, payload)),
                              lambda _: default())

    # ─── Dunder Methods ──────────────────────────────────────────────

    __bool__ = lambda self: self._label == SUCCESS  # noqa: E731
    __hash__ = lambda self: hash((self._label, self._payload))  # noqa: E731

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Variant):
            return NotImplemented
        return self._label == other._label and self._payload == other._payload and self._schema == other._schema

    def __repr__(self) -> str:
        if self._label == SUCCESS:
            return f"Success({self._payload!r})"
        return f"Failure({self._label}={self._payload!r})"

    def __iter__(self) -> Iterator[A]:
        """Iterate: yields value if success, nothing otherwise."""
        if self._label == SUCCESS:
            yield self._payload


class Fault:
    """The failure portion of a Variant: a union over the failure labels only."""

    __slots__ = ("_schema", "_label", "_payload")
    __match_args__ = ("label", "payload")

    def __init__(self, schema: Schema, label: str, payload: Any) -> None:
        self._schema = schema
        self._label = label
        self._payload = payload

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def label(self) -> str:
        return self._label

    @property
    def payload(self) -> Any:
        return self._payload

    def match(self, handlers: Mapping[str, Callable[[Any], B]] | None = None, /, **kw: Callable[[Any], B]) -> B:
        """Exhaustive dispatch over the failure labels."""
        return Cases(self._schema, {**(handlers or {}), **kw})(self._label, self._payload)

    def to_variant(self) -> Variant[Any]:
        return Variant._trusted(self._schema, self._label, self._payload)

    __hash__ = lambda self: hash((self._label, self._payload))  # noqa: E731

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fault):
            return NotImplemented
        return self._label == other._label and self._payload == other._payload and self._schema == other._schema

    def __repr__(self) -> str:
        return f"Fault({self._label}={self._payload!r})"


# ═══════════════════════════════════════════════════════════════════════════════
# Constructors
# ═══════════════════════════════════════════════════════════════════════════════


def success(value: A, schema: Schema | None = None) -> Variant[A]:
    """Build a success value. Without a schema, the value has no failure labels."""
    return (EMPTY if schema is None else schema).success(value)


def failure(label: str, payload: object, schema: Schema) -> Variant[Any]:
    """Build a failure value under a declared label of schema."""
    return schema.failure(label, payload)


# ═══════════════════════════════════════════════════════════════════════════════
# Combinators
# ═══════════════════════════════════════════════════════════════════════════════


def apply(ff: Variant[Callable[[A], B]], fa: Variant[A]) -> Variant[B]:
    """Applicative apply with the function first. Left failure wins."""
    return fa.apply(ff)


def alt(left: Variant[A], right: Variant[A]) -> Variant[A]:
    """right only if left failed and right succeeded; otherwise left."""
    return left.alt(right)


def sequence(variants: Iterable[Variant[A]], schema: Schema | None = None) -> Variant[list[A]]:
    """Iterable[Variant[A]] → Variant[list[A]]. Fail-fast on the first failure.

    Every variant must carry the same schema: ``schema`` if given, else the
    schema of the first variant. A mixed schema raises SCHEMA_MISMATCH (use
    ``widen`` to align them first). An empty input yields a success with no
    failure labels unless ``schema`` is given.
    """
    values: list[A] = []
    for v in variants:
        if schema is None:
            schema = v.schema
        elif v.schema != schema:
            misuse(ErrorCode.SCHEMA_MISMATCH, f"sequence over {schema!r} got a value of {v.schema!r}")
        value = v.eliminate(lambda _l, _p: _FAILED, _identity)
        if value is _FAILED:
            return v  # type: ignore[return-value]
        values.append(value)
    return (EMPTY if schema is None else schema).success(values)


def traverse(items: Iterable[B], f: Callable[[B], Variant[A]], schema: Schema | None = None) -> Variant[list[A]]:
    """Map f over items and sequence the results. Fail-fast on the first failure."""
    return sequence((f(item) for item in items), schema)
