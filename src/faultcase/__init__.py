"""faultcase - labeled unions with many independently named failure cases.

Generalizes Result/Either: the success slot stays uniform while failure modes
stay separate, named, and can be resolved one at a time or in batches until a
plain value remains.

Quick Start:
    >>> from faultcase import Schema
    >>>
    >>> io_errors = Schema(notFound=str, timeout=float)
    >>>
    >>> def fetch(key: str):
    ...     if key == "missing":
    ...         return io_errors.failure("notFound", key)
    ...     return io_errors.success(f"value:{key}")
    >>>
    >>> (
    ...     fetch("missing")
    ...     .map(str.upper)
    ...     .resolve("notFound", lambda key: f"default:{key}")
    ...     .resolve("timeout", lambda secs: "retry later")
    ...     .extract()
    ... )
    'default:missing'

Interop:
    >>> from faultcase import Ok, from_result, note
    >>> from_result("parse", Ok(3)).to_optional()
    3
    >>> note("absent", "no value", None)
    Failure(absent='no value')

Property testing:
    >>> from faultcase.generation import arbitrary, sample
    >>> values = sample(arbitrary(io_errors, str), 20, seed=0)
"""

from __future__ import annotations

__version__ = "0.1.0"

from .errors import Err, ErrorCode, Ok, Result, SchemaError, SchemaException
from .variants import (
    EMPTY,
    SUCCESS,
    Cases,
    Fault,
    Resolver,
    Schema,
    Variant,
    alt,
    apply,
    catch,
    failure,
    from_result,
    note,
    note_with,
    resolve_many,
    resolve_one,
    sequence,
    success,
    to_optional,
    traverse,
)

__all__ = [
    "__version__",
    # Schema & core type
    "Schema", "SUCCESS", "EMPTY", "Cases", "Variant", "Fault", "success", "failure",
    # Combinators
    "apply", "alt", "sequence", "traverse",
    # Resolution
    "Resolver", "resolve_one", "resolve_many",
    # Interop
    "Result", "Ok", "Err", "from_result", "to_optional", "note", "note_with", "catch",
    # Errors
    "ErrorCode", "SchemaError", "SchemaException",
]
