"""Labeled unions: one success slot, many independently labeled failures.

Example:
    >>> from faultcase.variants import Schema
    >>>
    >>> math_errors = Schema(divByZero=type(None))
    >>>
    >>> def divide(a: float, b: float):
    ...     if b == 0:
    ...         return math_errors.failure("divByZero", None)
    ...     return math_errors.success(a / b)
    >>>
    >>> divide(10, 2).resolve("divByZero", lambda _: float("inf")).extract()
    5.0
"""

from .interop import catch, from_result, note, note_with, to_optional
from .resolve import Resolver, resolve_many, resolve_one
from .schema import EMPTY, SUCCESS, Cases, Label, Schema, validate_table
from .variant import Fault, Variant, alt, apply, failure, sequence, success, traverse

__all__ = [
    # Schema
    "Schema", "SUCCESS", "EMPTY", "Label", "Cases", "validate_table",
    # Core type
    "Variant", "Fault", "success", "failure",
    # Combinators
    "apply", "alt", "sequence", "traverse",
    # Resolution
    "Resolver", "resolve_one", "resolve_many",
    # Interop
    "from_result", "to_optional", "note", "note_with", "catch",
]
