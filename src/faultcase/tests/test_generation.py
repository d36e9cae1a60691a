"""Tests for random generation, derivation, and perturbation.

Validates:
- uniform/weighted: every label reachable, zero weights never drawn, seeds reproducible
- arbitrary/coarbitrary: derivation from payload types, NO_ARBITRARY on gaps
- perturb: deterministic, sensitive to the active label
- Property tests over hypothesis strategies
"""

from __future__ import annotations

import random
from collections import Counter

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from faultcase.config import clear_settings_cache
from faultcase.errors import ErrorCode, SchemaException
from faultcase.generation import (
    Arbitrary,
    ArbitraryRegistry,
    arbitrary,
    coarbitrary,
    derived,
    get_registry,
    inject,
    mix,
    perturb,
    perturb_float,
    perturb_int,
    perturb_str,
    sample,
    seeds,
    uniform,
    variants,
    weighted,
)
from faultcase.variants import SUCCESS, Schema, Variant

IO = Schema(notFound=str, timeout=float)

STUBS = {
    SUCCESS: lambda rng: 0,
    "notFound": lambda rng: "key",
    "timeout": lambda rng: 1.0,
}

PERTURBERS = {SUCCESS: perturb_int, "notFound": perturb_str, "timeout": perturb_float}


class Oops:
    pass


# ═════════════════════════════════════════════════════════════════════════════
# Uniform
# ═════════════════════════════════════════════════════════════════════════════


def test_uniform_realizes_every_label() -> None:
    values = sample(uniform(IO, STUBS), 300, seed=42)
    assert {v.label for v in values} == set(IO.all_labels)
    assert all(v.schema == IO for v in values)


def test_uniform_uses_label_generator() -> None:
    for v in sample(uniform(IO, STUBS), 50, seed=1):
        assert v.payload == STUBS[v.label](None)


def test_uniform_reproducible() -> None:
    gen = uniform(IO, {**STUBS, SUCCESS: lambda rng: rng.randint(0, 1000)})
    assert sample(gen, 20, seed=5) == sample(gen, 20, seed=5)
    assert gen(random.Random(9)) == gen(random.Random(9))


def test_uniform_incomplete_table() -> None:
    with pytest.raises(SchemaException) as exc:
        uniform(IO, {SUCCESS: STUBS[SUCCESS], "notFound": STUBS["notFound"]})
    assert exc.value.code is ErrorCode.INCOMPLETE_TABLE


def test_uniform_unknown_label() -> None:
    with pytest.raises(SchemaException) as exc:
        uniform(IO, {**STUBS, "exploded": lambda rng: None})
    assert exc.value.code is ErrorCode.UNKNOWN_LABEL


def test_uniform_checks_generated_payload() -> None:
    gen = uniform(IO, {**STUBS, "timeout": lambda rng: "soon"})
    with pytest.raises(SchemaException) as exc:
        sample(gen, 100, seed=0)
    assert exc.value.code is ErrorCode.PAYLOAD_MISMATCH


def test_inject() -> None:
    assert inject(IO, SUCCESS, 3) == IO.success(3)
    assert inject(IO, "notFound", "k") == IO.failure("notFound", "k")


# ═════════════════════════════════════════════════════════════════════════════
# Weighted
# ═════════════════════════════════════════════════════════════════════════════


def _weighted_table(w_ok: float, w_nf: float, w_to: float) -> dict:
    return {
        SUCCESS: (w_ok, STUBS[SUCCESS]),
        "notFound": (w_nf, STUBS["notFound"]),
        "timeout": (w_to, STUBS["timeout"]),
    }


def test_weighted_zero_weight_never_drawn() -> None:
    counts = Counter(v.label for v in sample(weighted(IO, _weighted_table(1, 0, 3)), 500, seed=3))
    assert counts["notFound"] == 0
    assert counts[SUCCESS] > 0
    assert counts["timeout"] > counts[SUCCESS]


def test_weighted_single_label() -> None:
    values = sample(weighted(IO, _weighted_table(0, 0, 1)), 50, seed=0)
    assert {v.label for v in values} == {"timeout"}


def test_weighted_reproducible() -> None:
    gen = weighted(IO, _weighted_table(1, 2, 3))
    assert sample(gen, 30, seed=11) == sample(gen, 30, seed=11)


@pytest.mark.parametrize("weights", [(-1, 1, 1), (1, float("inf"), 1), (1, float("nan"), 1), (0, 0, 0)])
def test_weighted_invalid_weights(weights: tuple[float, float, float]) -> None:
    with pytest.raises(SchemaException) as exc:
        weighted(IO, _weighted_table(*weights))
    assert exc.value.code is ErrorCode.INVALID_WEIGHT


def _lenient(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FAULTCASE_GENERATION_VALIDATE_WEIGHTS", "false")
    clear_settings_cache()


def test_lenient_weights_treat_bad_values_as_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    """With validation off, negative and non-finite weights are never drawn."""
    _lenient(monkeypatch)
    labels = {v.label for v in sample(weighted(IO, _weighted_table(-5, 1, 1)), 200, seed=0)}
    assert labels == {"notFound", "timeout"}

    labels = {v.label for v in sample(weighted(IO, _weighted_table(float("nan"), float("inf"), 2)), 100, seed=0)}
    assert labels == {"timeout"}


@pytest.mark.parametrize("weights", [(0, 0, 0), (-1, -2, float("nan"))])
def test_lenient_weights_without_positive_draw_uniformly(
    monkeypatch: pytest.MonkeyPatch, weights: tuple[float, float, float]
) -> None:
    _lenient(monkeypatch)
    gen = weighted(IO, _weighted_table(*weights))
    assert gen(random.Random(0)).label in IO.all_labels
    assert {v.label for v in sample(gen, 300, seed=1)} == set(IO.all_labels)


def test_weighted_incomplete_table() -> None:
    table = _weighted_table(1, 1, 1)
    del table["timeout"]
    with pytest.raises(SchemaException) as exc:
        weighted(IO, table)
    assert exc.value.code is ErrorCode.INCOMPLETE_TABLE


# ═════════════════════════════════════════════════════════════════════════════
# Sampling defaults
# ═════════════════════════════════════════════════════════════════════════════


def test_sample_defaults_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    gen = uniform(IO, STUBS)
    assert len(sample(gen)) == 100

    monkeypatch.setenv("FAULTCASE_GENERATION_SAMPLES", "7")
    monkeypatch.setenv("FAULTCASE_GENERATION_SEED", "99")
    clear_settings_cache()
    assert len(sample(gen)) == 7
    assert sample(gen) == sample(gen, 7, seed=99)


# ═════════════════════════════════════════════════════════════════════════════
# Derivation
# ═════════════════════════════════════════════════════════════════════════════


def test_arbitrary_realizes_every_label_with_declared_types() -> None:
    values = sample(arbitrary(IO, int), 300, seed=2)
    assert {v.label for v in values} == set(IO.all_labels)
    expected = {SUCCESS: int, "notFound": str, "timeout": float}
    assert all(type(v.payload) is expected[v.label] for v in values)


def test_arbitrary_unit_and_bytes() -> None:
    schema = Schema(divByZero=type(None), corrupt=bytes, flag=bool)
    for v in sample(arbitrary(schema, None), 100, seed=4):
        assert v.label in schema.all_labels


def test_arbitrary_missing_capability() -> None:
    with pytest.raises(SchemaException) as exc:
        arbitrary(Schema(oops=Oops), int)
    assert exc.value.code is ErrorCode.NO_ARBITRARY
    assert exc.value.error.label == "oops"


def test_arbitrary_missing_success_capability() -> None:
    with pytest.raises(SchemaException) as exc:
        arbitrary(IO, Oops)
    assert exc.value.error.label == SUCCESS


def test_arbitrary_custom_registry() -> None:
    registry = ArbitraryRegistry({Oops: Arbitrary(lambda rng: Oops(), lambda v, s: mix(s, 1))})
    values = sample(arbitrary(Schema(oops=Oops), int, registry), 50, seed=0)
    assert any(isinstance(v.payload, Oops) for v in values)
    assert Oops in registry
    assert Oops not in get_registry()


def test_global_registry_registration() -> None:
    get_registry().register(Oops, Arbitrary(lambda rng: Oops(), lambda v, s: mix(s, 1)))
    assert callable(arbitrary(Schema(oops=Oops), int))


# ═════════════════════════════════════════════════════════════════════════════
# Perturbation
# ═════════════════════════════════════════════════════════════════════════════


def test_perturb_deterministic() -> None:
    v = IO.failure("notFound", "key")
    assert perturb(v, 123, PERTURBERS) == perturb(v, 123, PERTURBERS)


def test_perturb_distinguishes_labels_with_equal_payloads() -> None:
    schema = Schema(a=int, b=int)
    table = {SUCCESS: perturb_int, "a": perturb_int, "b": perturb_int}
    seeds_seen = {perturb(v, 0, table) for v in (schema.success(1), schema.failure("a", 1), schema.failure("b", 1))}
    assert len(seeds_seen) == 3


def test_perturb_incomplete_table() -> None:
    with pytest.raises(SchemaException) as exc:
        perturb(IO.success(1), 0, {SUCCESS: perturb_int})
    assert exc.value.code is ErrorCode.INCOMPLETE_TABLE


def test_coarbitrary_matches_explicit_table() -> None:
    co = coarbitrary(IO, int)
    for v in sample(arbitrary(IO, int), 50, seed=8):
        assert co(v, 77) == perturb(v, 77, PERTURBERS)


def test_coarbitrary_after_type_preserving_map_failure() -> None:
    v = IO.failure("timeout", 1.0).map_failure("timeout", lambda secs: secs * 2)
    assert coarbitrary(IO, int)(v, 0) == perturb(IO.failure("timeout", 2.0), 0, PERTURBERS)


def test_coarbitrary_schema_mismatch() -> None:
    with pytest.raises(SchemaException) as exc:
        coarbitrary(IO, int)(Schema(other=int).success(1), 0)
    assert exc.value.code is ErrorCode.SCHEMA_MISMATCH


def test_mix_stays_in_64_bits() -> None:
    for seed, salt in [(0, 0), (2**64 - 1, 2**64 - 1), (5, -3)]:
        assert 0 <= mix(seed, salt) < 2**64


# ═════════════════════════════════════════════════════════════════════════════
# Property Tests
# ═════════════════════════════════════════════════════════════════════════════

io_values = variants(
    IO,
    st.integers(),
    notFound=st.text(),
    timeout=st.floats(allow_nan=False),
)


def test_variants_requires_every_failure_strategy() -> None:
    with pytest.raises(SchemaException) as exc:
        variants(IO, st.integers(), notFound=st.text())
    assert exc.value.code is ErrorCode.INCOMPLETE_TABLE


@given(io_values)
@settings(max_examples=50, deadline=None, derandomize=True)
def test_functor_identity_property(v: Variant[int]) -> None:
    assert v.map(lambda x: x) == v


@given(io_values)
@settings(max_examples=50, deadline=None, derandomize=True)
def test_monad_associativity_property(v: Variant[int]) -> None:
    f = lambda x: IO.success(x + 1) if x % 2 else IO.failure("notFound", str(x))
    g = lambda x: IO.success(x * 3)
    assert v.bind(f).bind(g) == v.bind(lambda x: f(x).bind(g))


@given(io_values)
@settings(max_examples=50, deadline=None, derandomize=True)
def test_resolution_order_property(v: Variant[int]) -> None:
    f = lambda key: len(key)
    g = lambda secs: 0
    assert v.resolve("notFound", f).resolve("timeout", g) == v.resolve("timeout", g).resolve("notFound", f)


@given(derived(IO, int))
@settings(max_examples=50, deadline=None, derandomize=True)
def test_derived_strategy(v: Variant[int]) -> None:
    assert v.schema == IO
    assert v.label in IO.all_labels


@given(io_values, seeds())
@settings(max_examples=50, deadline=None, derandomize=True)
def test_coarbitrary_property(v: Variant[int], seed: int) -> None:
    co = coarbitrary(IO, int)
    assert co(v, seed) == co(v, seed)
    assert 0 <= co(v, seed) < 2**64
