"""Derived generation and perturbation from declared payload types.

Each payload type gets an ``Arbitrary`` capability: a default generator and a
perturbation function folding a value into an integer seed (QuickCheck's
coarbitrary). ``arbitrary`` and ``coarbitrary`` walk a schema's labels and
look the capability up for every payload type, failing early with NO_ARBITRARY
when one is missing.

Example:
    >>> errors = Schema(notFound=str, timeout=float)
    >>> gen = arbitrary(errors, int)
    >>> values = sample(gen, 50, seed=1)
    >>> seeds = {coarbitrary(errors, int)(v, 0) for v in values}
"""

from __future__ import annotations

import hashlib
import random
import string
import struct
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeAlias, TypeVar

from faultcase.errors import ErrorCode, misuse
from faultcase.variants import SUCCESS, Schema, Variant, validate_table

from .gen import Gen, uniform

T = TypeVar("T")

Perturb: TypeAlias = Callable[[T, int], int]

_MASK64 = (1 << 64) - 1
_PRINTABLE = string.ascii_letters + string.digits + string.punctuation + " "


# ═══════════════════════════════════════════════════════════════════════════════
# Seed Mixing
# ═══════════════════════════════════════════════════════════════════════════════


def mix(seed: int, salt: int) -> int:
    """Fold salt into seed (SplitMix64 finalizer). Deterministic across processes."""
    z = (seed + 0x9E3779B97F4A7C15 + salt) & _MASK64
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK64
    return z ^ (z >> 31)


def perturb_bytes(value: bytes, seed: int) -> int:
    return mix(seed, int.from_bytes(hashlib.blake2b(value, digest_size=8).digest(), "big"))


def perturb_str(value: str, seed: int) -> int:
    return perturb_bytes(value.encode("utf-8"), seed)


def perturb_int(value: int, seed: int) -> int:
    return mix(seed, value)


def perturb_float(value: float, seed: int) -> int:
    return perturb_bytes(struct.pack("<d", value), seed)


def perturb_none(value: None, seed: int) -> int:
    return mix(seed, 0)


# ═══════════════════════════════════════════════════════════════════════════════
# Capabilities
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Arbitrary(Generic[T]):
    """Default random generation and perturbation for one payload type."""

    generate: Gen[T]
    perturb: Perturb[T]


def _gen_str(rng: random.Random) -> str:
    return "".join(rng.choice(_PRINTABLE) for _ in range(rng.randint(0, 16)))


_DEFAULTS: dict[Any, Arbitrary[Any]] = {
    type(None): Arbitrary(lambda rng: None, perturb_none),
    bool: Arbitrary(lambda rng: rng.random() < 0.5, lambda v, s: perturb_int(int(v), s)),
    int: Arbitrary(lambda rng: rng.randint(-(2**31), 2**31 - 1), perturb_int),
    float: Arbitrary(lambda rng: rng.uniform(-1e6, 1e6), perturb_float),
    str: Arbitrary(_gen_str, perturb_str),
    bytes: Arbitrary(lambda rng: rng.randbytes(rng.randint(0, 16)), perturb_bytes),
}


class ArbitraryRegistry:
    """Payload type → Arbitrary lookup, pre-filled for None, bool, int, float, str, bytes."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[Any, Arbitrary[Any]] | None = None) -> None:
        self._entries: dict[Any, Arbitrary[Any]] = {**_DEFAULTS}
        for tp, arb in (entries or {}).items():
            self.register(tp, arb)

    @staticmethod
    def _key(tp: Any) -> Any:
        return type(None) if tp is None else tp

    def register(self, tp: Any, arbitrary: Arbitrary[Any]) -> None:
        self._entries[self._key(tp)] = arbitrary

    def get(self, tp: Any, *, label: str | None = None) -> Arbitrary[Any]:
        if (arb := self._entries.get(self._key(tp))) is None:
            misuse(ErrorCode.NO_ARBITRARY, f"no Arbitrary registered for {getattr(tp, '__name__', tp)!r}", label=label)
        return arb

    def __contains__(self, tp: object) -> bool:
        return self._key(tp) in self._entries


_registry: ArbitraryRegistry | None = None


def get_registry() -> ArbitraryRegistry:
    """Get the global registry, creating it on first use."""
    global _registry
    if _registry is None:
        _registry = ArbitraryRegistry()
    return _registry


def reset_registry() -> None:
    """Drop custom registrations from the global registry."""
    global _registry
    _registry = None


def _capabilities(schema: Schema, success_type: Any, registry: ArbitraryRegistry | None) -> dict[str, Arbitrary[Any]]:
    reg = get_registry() if registry is None else registry
    types = {SUCCESS: success_type, **schema.failure_types}
    return {label: reg.get(tp, label=label) for label, tp in types.items()}


# ═══════════════════════════════════════════════════════════════════════════════
# Derivation
# ═══════════════════════════════════════════════════════════════════════════════


def arbitrary(schema: Schema, success_type: Any, registry: ArbitraryRegistry | None = None) -> Gen[Variant[Any]]:
    """Uniform generator derived from every label's payload type."""
    caps = _capabilities(schema, success_type, registry)
    return uniform(schema, {label: cap.generate for label, cap in caps.items()})


def _scan(variant: Variant[Any], seed: int, perturbers: Mapping[str, Perturb[Any]]) -> int:
    for index, label in enumerate(variant.schema.all_labels):
        if label == variant.label:
            return perturbers[label](variant.payload, mix(seed, index))
    raise AssertionError(f"active label {variant.label!r} missing from {variant.schema!r}")


def perturb(variant: Variant[Any], seed: int, perturbers: Mapping[str, Perturb[Any]]) -> int:
    """Perturb seed by the active label's position and its payload.

    perturbers must cover ``_`` and every failure label of the variant's schema.
    """
    validate_table(variant.schema, perturbers, success=True, complete=True)
    return _scan(variant, seed, perturbers)


def coarbitrary(
    schema: Schema,
    success_type: Any,
    registry: ArbitraryRegistry | None = None,
) -> Callable[[Variant[Any], int], int]:
    """Perturbation function derived from every label's payload type."""
    table = {label: cap.perturb for label, cap in _capabilities(schema, success_type, registry).items()}

    def perturb_variant(variant: Variant[Any], seed: int) -> int:
        if variant.schema != schema:
            misuse(ErrorCode.SCHEMA_MISMATCH, f"perturbation declared for {schema!r}, got {variant.schema!r}")
        return _scan(variant, seed, table)

    return perturb_variant
