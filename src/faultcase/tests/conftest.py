"""Shared fixtures: silent logging, fresh settings, fresh Arbitrary registry."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from faultcase.config import clear_settings_cache
from faultcase.generation import reset_registry
from faultcase.observability import configure_logging
from faultcase.variants import Schema


@pytest.fixture(autouse=True)
def isolated_state() -> Iterator[None]:
    clear_settings_cache()
    reset_registry()
    configure_logging(format="none")
    yield
    clear_settings_cache()
    reset_registry()


@pytest.fixture
def math_errors() -> Schema:
    """Single-label schema for division."""
    return Schema(divByZero=type(None))


@pytest.fixture
def io_errors() -> Schema:
    return Schema(notFound=str, timeout=float, denied=int)
