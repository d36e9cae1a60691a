"""Label schemas: the declared failure labels of a labeled union.

A Schema is an ordered, immutable mapping from failure label to payload type.
The reserved success label ``_`` is implicit in every schema and is never
stored. Schemas are compared structurally, so two independently declared
schemas with the same labels and payload types are interchangeable.

Example:
    >>> math_errors = Schema(divByZero=type(None), overflow=int)
    >>> math_errors.labels
    ('divByZero', 'overflow')
    >>> math_errors.without("overflow")
    Schema(divByZero=NoneType)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import is_dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Annotated, Any, Final, Generic, TypeVar, is_typeddict

from pydantic import BaseModel, ConfigDict, StringConstraints, TypeAdapter, ValidationError

from faultcase.errors import ErrorCode, misuse
from faultcase.observability import get_logger

if TYPE_CHECKING:
    from .resolve import Resolver
    from .variant import Variant

A = TypeVar("A")
B = TypeVar("B")

SUCCESS: Final = "_"

Label = Annotated[str, StringConstraints(pattern=r"^[A-Za-z][A-Za-z0-9_]*$")]

log = get_logger("faultcase.schema")

_label_adapter: TypeAdapter[str] = TypeAdapter(Label)
_ARBITRARY = ConfigDict(arbitrary_types_allowed=True)
_UNCHECKED = (Any, object)


def _check_label(label: object) -> str:
    if label == SUCCESS:
        misuse(ErrorCode.RESERVED_LABEL, "the success label cannot be declared as a failure", label=SUCCESS)
    try:
        return _label_adapter.validate_python(label, strict=True)
    except ValidationError as e:
        misuse(ErrorCode.INVALID_LABEL, "failure labels must be identifiers not starting with '_'",
               label=str(label), details=str(e))


def _build_adapter(tp: Any) -> TypeAdapter[Any]:
    # pydantic refuses a config override for types carrying their own config
    if isinstance(tp, type) and (issubclass(tp, BaseModel) or is_dataclass(tp) or is_typeddict(tp)):
        return TypeAdapter(tp)
    return TypeAdapter(tp, config=_ARBITRARY)


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


class Schema:
    """Ordered, immutable set of failure labels with their payload types.

    Declared either from a mapping, an iterable of ``(label, type)`` pairs, or
    keyword arguments (in that order when combined). Declaration validates
    every label: identifiers only, no leading underscore, no duplicates.

    Payload types are anything pydantic can build a TypeAdapter for, including
    arbitrary classes (checked with isinstance). ``Any`` and ``object`` accept
    every payload.
    """

    __slots__ = ("_failures", "_adapters", "_narrowed")

    def __init__(self, failures: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None, /, **labels: Any) -> None:
        pairs = list(failures.items() if isinstance(failures, Mapping) else failures or ())
        declared: dict[str, Any] = {}
        for label, tp in (*pairs, *labels.items()):
            label = _check_label(label)
            if label in declared:
                misuse(ErrorCode.DUPLICATE_LABEL, "failure label declared twice", label=label)
            declared[label] = tp
        self._init(declared)
        log.debug("schema declared", labels=list(declared))

    def _init(self, declared: dict[str, Any]) -> None:
        self._failures: Mapping[str, Any] = MappingProxyType(declared)
        self._adapters: dict[str, TypeAdapter[Any]] = {}
        self._narrowed: dict[frozenset[str], Schema] = {}

    @classmethod
    def _trusted(cls, declared: dict[str, Any]) -> Schema:
        """Build from already-validated labels (narrowing, union)."""
        schema = cls.__new__(cls)
        schema._init(declared)
        return schema

    # ─── Inspection ──────────────────────────────────────────────────

    @property
    def labels(self) -> tuple[str, ...]:
        """Failure labels in declaration order."""
        return tuple(self._failures)

    @property
    def all_labels(self) -> tuple[str, ...]:
        """The success label followed by every failure label."""
        return (SUCCESS, *self._failures)

    @property
    def failure_types(self) -> Mapping[str, Any]:
        return self._failures

    def payload_type(self, label: str) -> Any:
        return self._failures[self.require(label)]

    def require(self, label: str) -> str:
        """Return label if it is a declared failure label, raise otherwise."""
        if label == SUCCESS:
            misuse(ErrorCode.RESERVED_LABEL, "the success label cannot be handled as a failure", label=label)
        if label not in self._failures:
            misuse(ErrorCode.UNKNOWN_LABEL, f"label not declared in {self!r}", label=label)
        return label

    def check(self, label: str, payload: object) -> None:
        """Raise PAYLOAD_MISMATCH if payload does not match the declared type of label."""
        tp = self._failures[label]
        if tp in _UNCHECKED:
            return
        if (adapter := self._adapters.get(label)) is None:
            adapter = self._adapters[label] = _build_adapter(tp)
        try:
            adapter.validate_python(payload, strict=True)
        except ValidationError as e:
            misuse(ErrorCode.PAYLOAD_MISMATCH,
                   f"payload {payload!r} does not match declared type {_type_name(tp)}",
                   label=label, details=str(e))

    def issubset(self, other: Schema) -> bool:
        """True if every label here is declared in other with the same payload type."""
        return all(label in other._failures and other._failures[label] == tp for label, tp in self._failures.items())

    # ─── Narrowing & Widening ────────────────────────────────────────

    def without(self, *labels: str) -> Schema:
        """Schema with the given failure labels removed."""
        key = frozenset(self.require(label) for label in labels)
        if not key:
            return self
        if (narrowed := self._narrowed.get(key)) is None:
            narrowed = self._narrowed[key] = Schema._trusted(
                {label: tp for label, tp in self._failures.items() if label not in key})
        return narrowed

    def union(self, *others: Schema) -> Schema:
        """Combined schema of self and others. Labels keep first-declared order."""
        merged = dict(self._failures)
        for other in others:
            for label, tp in other._failures.items():
                if label in merged and merged[label] != tp:
                    misuse(ErrorCode.SCHEMA_MISMATCH,
                           f"conflicting payload types {_type_name(merged[label])} and {_type_name(tp)}",
                           label=label)
                merged.setdefault(label, tp)
        return Schema._trusted(merged)

    def retype(self, label: str, payload_type: Any) -> Schema:
        """Schema with label's payload type replaced, position kept."""
        self.require(label)
        return Schema._trusted({k: (payload_type if k == label else tp) for k, tp in self._failures.items()})

    # ─── Construction ────────────────────────────────────────────────

    def success(self, value: A) -> Variant[A]:
        """Build the success-labeled value."""
        from .variant import Variant
        return Variant._trusted(self, SUCCESS, value)

    def failure(self, label: str, payload: object) -> Variant[Any]:
        """Build a failure-labeled value.

        The payload is checked against the declared type unless
        ``payload.check_types`` is off in settings.
        """
        from .variant import Variant
        self.require(label)
        return Variant(self, label, payload)

    # ─── Handler Tables ──────────────────────────────────────────────

    def cases(self, handlers: Mapping[str, Callable[[Any], B]] | None = None, /, **kw: Callable[[Any], B]) -> Cases[B]:
        """Exhaustive failure-handler table, usable as ``on_failure`` for eliminate()."""
        return Cases(self, {**(handlers or {}), **kw})

    def resolver(self, handlers: Mapping[str, Callable[[Any], A]] | None = None, /, **kw: Callable[[Any], A]) -> Resolver[A]:
        """Partial handler table resolving the given labels to success."""
        from .resolve import Resolver
        return Resolver(self, {**(handlers or {}), **kw})

    # ─── Dunder Methods ──────────────────────────────────────────────

    def __contains__(self, label: object) -> bool:
        return label in self._failures

    def __iter__(self):
        return iter(self._failures)

    def __len__(self) -> int:
        return len(self._failures)

    def __eq__(self, other: object) -> bool:
        return dict(self._failures) == dict(other._failures) if isinstance(other, Schema) else NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._failures))

    def __repr__(self) -> str:
        return f"Schema({', '.join(f'{k}={_type_name(tp)}' for k, tp in self._failures.items())})"


EMPTY: Final = Schema()


def validate_table(schema: Schema, keys: Iterable[str], *, success: bool, complete: bool) -> None:
    """Check handler/generator table keys against schema.

    Args:
        success: whether the success label ``_`` belongs in the table
        complete: whether every expected label must be present
    """
    keys = list(keys)
    for key in keys:
        if key == SUCCESS:
            if not success:
                misuse(ErrorCode.RESERVED_LABEL, "the success label cannot be registered here", label=key)
        elif key not in schema:
            misuse(ErrorCode.UNKNOWN_LABEL, f"label not declared in {schema!r}", label=key)
    if complete:
        expected = schema.all_labels if success else schema.labels
        if missing := [label for label in expected if label not in keys]:
            misuse(ErrorCode.INCOMPLETE_TABLE, f"no entry for {', '.join(missing)}", label=missing[0])


class Cases(Generic[B]):
    """Exhaustive failure-handler table.

    Built once per schema; construction fails unless every declared failure
    label has a handler and no other label does. Calling the table dispatches
    ``(label, payload)`` to the matching handler.
    """

    __slots__ = ("schema", "_handlers")

    def __init__(self, schema: Schema, handlers: Mapping[str, Callable[[Any], B]]) -> None:
        validate_table(schema, handlers, success=False, complete=True)
        self.schema = schema
        self._handlers: Mapping[str, Callable[[Any], B]] = MappingProxyType(dict(handlers))

    def __call__(self, label: str, payload: Any) -> B:
        return self._handlers[label](payload)

    def __repr__(self) -> str:
        return f"Cases({', '.join(self._handlers)})"
