"""
Pytest configuration and shared fixtures for mhlab tests.
"""

import pytest
import numpy as np

from mhlab.batch_specs import joint_blocks, componentwise_blocks
from mhlab.mcmc.config import configure_precision


@pytest.fixture(autouse=True)
def double_precision():
    """Every test starts in float64; runs with use_double=False switch it off."""
    configure_precision(True)
    yield
    configure_precision(True)


@pytest.fixture
def rng_seed():
    """Default RNG seed for reproducible tests."""
    return 42


@pytest.fixture
def counts():
    """Genotype counts used throughout (n_AA, n_Aa, n_aa)."""
    return (30, 10, 10)


@pytest.fixture
def flat_priors():
    return (1.0, 1.0, 1.0, 1.0)


@pytest.fixture
def joint_specs():
    return joint_blocks((0.07, 0.07), ("f", "p"))


@pytest.fixture
def componentwise_specs():
    return componentwise_blocks((0.07, 0.07), ("f", "p"))


@pytest.fixture
def linear_weights():
    """Weights 1..20: state k has weight k."""
    return np.arange(1, 21, dtype=float)


@pytest.fixture
def total_variation():
    """Total variation distance between two discrete distributions."""
    def tv(p, q):
        return 0.5 * np.abs(np.asarray(p, dtype=float) - np.asarray(q, dtype=float)).sum()
    return tv
