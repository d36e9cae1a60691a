"""Random generation of labeled unions for property-based testing.

- uniform/weighted: generators from explicit per-label tables
- arbitrary/coarbitrary: derivation from declared payload types
- variants/derived: hypothesis strategies
"""

from .arbitrary import (
    Arbitrary,
    ArbitraryRegistry,
    Perturb,
    arbitrary,
    coarbitrary,
    get_registry,
    mix,
    perturb,
    perturb_bytes,
    perturb_float,
    perturb_int,
    perturb_none,
    perturb_str,
    reset_registry,
)
from .gen import Gen, inject, sample, uniform, weighted
from .strategies import derived, seeds, variants

__all__ = [
    # Table-driven generation
    "Gen", "uniform", "weighted", "inject", "sample",
    # Derivation
    "Arbitrary", "ArbitraryRegistry", "get_registry", "reset_registry", "arbitrary",
    # Perturbation
    "Perturb", "perturb", "coarbitrary", "mix",
    "perturb_bytes", "perturb_float", "perturb_int", "perturb_none", "perturb_str",
    # Hypothesis
    "variants", "derived", "seeds",
]
