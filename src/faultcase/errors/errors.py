"""Misuse errors for labeled unions.

Domain failures are data carried by a Variant and are never raised. The errors
here cover misuse of the API itself: declaring a handler for a label that does
not exist, constructing a failure whose payload does not match its declared
type, and so on. They are raised eagerly so the single-active-label invariant
can never be broken silently.
"""

from __future__ import annotations

from enum import StrEnum
from typing import NoReturn, Self

from pydantic import BaseModel

from faultcase.observability import get_logger

log = get_logger("faultcase.errors")


class ErrorCode(StrEnum):
    """Standard codes for schema misuse."""
    INVALID_LABEL = "INVALID_LABEL"
    DUPLICATE_LABEL = "DUPLICATE_LABEL"
    RESERVED_LABEL = "RESERVED_LABEL"
    UNKNOWN_LABEL = "UNKNOWN_LABEL"
    PAYLOAD_MISMATCH = "PAYLOAD_MISMATCH"
    INCOMPLETE_TABLE = "INCOMPLETE_TABLE"
    SCHEMA_MISMATCH = "SCHEMA_MISMATCH"
    UNRESOLVED_FAILURE = "UNRESOLVED_FAILURE"
    INVALID_WEIGHT = "INVALID_WEIGHT"
    NO_ARBITRARY = "NO_ARBITRARY"


class SchemaError(BaseModel):
    """Structured description of a schema misuse."""

    model_config = {"frozen": True}

    code: ErrorCode
    message: str
    label: str | None = None
    details: str | None = None

    @classmethod
    def create(
        cls,
        code: ErrorCode,
        message: str,
        *,
        label: str | None = None,
        details: str | None = None,
    ) -> Self:
        """Factory method for construction."""
        return cls(code=code, message=message, label=label, details=details)

    def render(self) -> str:
        lbl = f" (label={self.label!r})" if self.label is not None else ""
        det = f"\n{self.details}" if self.details else ""
        return f"[{self.code}] {self.message}{lbl}{det}"

    __str__ = render


class SchemaException(Exception):
    """Exception wrapping a SchemaError for raising."""

    __slots__ = ("error",)

    def __init__(self, error: SchemaError) -> None:
        self.error = error
        super().__init__(error.render())

    @property
    def code(self) -> ErrorCode:
        return self.error.code

    @classmethod
    def create(
        cls,
        code: ErrorCode,
        message: str,
        *,
        label: str | None = None,
        details: str | None = None,
    ) -> Self:
        """Create schema exception."""
        return cls(SchemaError.create(code, message, label=label, details=details))


def misuse(code: ErrorCode, message: str, *, label: str | None = None, details: str | None = None) -> NoReturn:
    """Log and raise a SchemaException."""
    log.warning("schema misuse", code=code.value, label=label, message=message)
    raise SchemaException.create(code, message, label=label, details=details)
