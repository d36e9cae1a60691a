"""Random generation of labeled unions for property-based testing.

A generator is any callable taking a ``random.Random`` and returning a value.
The caller owns the random source, so a fixed seed reproduces a run exactly.

Example:
    >>> import random
    >>> errors = Schema(notFound=str)
    >>> gen = uniform(errors, {"_": lambda r: r.randint(0, 9), "notFound": lambda r: "key"})
    >>> gen(random.Random(7)).label in ("_", "notFound")
    True
"""

from __future__ import annotations

import math
import random
from collections.abc import Callable, Mapping
from itertools import accumulate
from typing import Any, TypeAlias, TypeVar

from faultcase.config import get_settings
from faultcase.errors import ErrorCode, misuse
from faultcase.observability import get_logger
from faultcase.variants import SUCCESS, Schema, Variant, validate_table

T = TypeVar("T")

Gen: TypeAlias = Callable[[random.Random], T]

log = get_logger("faultcase.generation")


def inject(schema: Schema, label: str, value: Any) -> Variant[Any]:
    """Put value under label: success for ``_``, a checked failure otherwise."""
    return schema.success(value) if label == SUCCESS else schema.failure(label, value)


def uniform(schema: Schema, generators: Mapping[str, Gen[Any]]) -> Gen[Variant[Any]]:
    """Generator picking a label uniformly, then running that label's generator.

    generators must cover ``_`` and every failure label of schema.
    """
    validate_table(schema, generators, success=True, complete=True)
    labels = schema.all_labels
    table = dict(generators)
    log.debug("uniform generator declared", labels=list(labels))

    def generate(rng: random.Random) -> Variant[Any]:
        label = rng.choice(labels)
        return inject(schema, label, table[label](rng))

    return generate


def _check_weights(labels: tuple[str, ...], weights: list[float]) -> None:
    for label, weight in zip(labels, weights):
        if not (isinstance(weight, (int, float)) and math.isfinite(weight) and weight >= 0):
            misuse(ErrorCode.INVALID_WEIGHT, f"weight must be finite and non-negative, got {weight!r}", label=label)
    if not any(weights):
        misuse(ErrorCode.INVALID_WEIGHT, "at least one weight must be positive")


def _lenient_weights(weights: list[float]) -> list[float]:
    # anything but a finite positive number counts as zero; no positive weight means uniform
    kept = [float(w) if isinstance(w, (int, float)) and math.isfinite(w) and w > 0 else 0.0 for w in weights]
    return kept if any(kept) else [1.0] * len(kept)


def weighted(schema: Schema, generators: Mapping[str, tuple[float, Gen[Any]]]) -> Gen[Variant[Any]]:
    """Generator picking each label with probability proportional to its weight.

    generators maps every label (``_`` included) to ``(weight, generator)``.
    Weights must be finite and non-negative with at least one positive,
    otherwise INVALID_WEIGHT is raised here. With ``generation.validate_weights``
    off, bad weights are tolerated instead: negative, non-finite and non-numeric
    weights count as zero, and a table with no positive weight draws labels
    uniformly. Either way drawing never fails on the weights.
    """
    validate_table(schema, generators, success=True, complete=True)
    labels = schema.all_labels
    weights = [generators[label][0] for label in labels]
    if get_settings().generation.validate_weights:
        _check_weights(labels, weights)
    else:
        weights = _lenient_weights(weights)
    table = {label: generators[label][1] for label in labels}
    cum_weights = list(accumulate(weights))
    log.debug("weighted generator declared", labels=list(labels), weights=weights)

    def generate(rng: random.Random) -> Variant[Any]:
        label = rng.choices(labels, cum_weights=cum_weights)[0]
        return inject(schema, label, table[label](rng))

    return generate


def sample(gen: Gen[T], n: int | None = None, seed: int | None = None) -> list[T]:
    """Draw n values from a fresh ``random.Random(seed)``. Defaults come from settings."""
    cfg = get_settings().generation
    rng = random.Random(cfg.seed if seed is None else seed)
    return [gen(rng) for _ in range(cfg.samples if n is None else n)]
