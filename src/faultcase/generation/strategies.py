"""Hypothesis strategies producing labeled unions.

Example:
    >>> from hypothesis import given, strategies as st
    >>> errors = Schema(notFound=str)
    >>>
    >>> @given(variants(errors, st.integers(), notFound=st.text()))
    ... def test_map_identity(v):
    ...     assert v.map(lambda x: x) == v
"""

from __future__ import annotations

from functools import partial
from typing import Any

from hypothesis import strategies as st
from hypothesis.strategies import SearchStrategy

from faultcase.variants import Schema, Variant, validate_table

from .arbitrary import ArbitraryRegistry, arbitrary


def variants(schema: Schema, success: SearchStrategy[Any], **failures: SearchStrategy[Any]) -> SearchStrategy[Variant[Any]]:
    """One branch per label: success from ``success``, each failure from its keyword strategy.

    Every failure label of schema needs a strategy. Shrinking prefers the
    success branch.
    """
    validate_table(schema, failures, success=False, complete=True)
    branches = [success.map(schema.success)]
    branches += [failures[label].map(partial(schema.failure, label)) for label in schema.labels]
    return st.one_of(*branches)


def derived(schema: Schema, success_type: Any, registry: ArbitraryRegistry | None = None) -> SearchStrategy[Variant[Any]]:
    """Strategy driving the derived ``arbitrary`` generator from hypothesis-managed randomness."""
    gen = arbitrary(schema, success_type, registry)
    return st.randoms(use_true_random=False).map(lambda rng: gen(rng))


def seeds() -> SearchStrategy[int]:
    """64-bit perturbation seeds."""
    return st.integers(min_value=0, max_value=2**64 - 1)


__all__ = ["variants", "derived", "seeds"]
