"""
MCMC Configuration.

This module handles setting up run configurations:
- clean_config: Fill in defaults for a run configuration dict
- configure_precision: Switch JAX between single and double precision
- gen_rng_key / split_keys / resolve_key: Explicit random sources

All config keys use lowercase with underscores (e.g., 'rng_seed', 'f_sd').
"""

import jax
import jax.numpy as jnp
import jax.random as random
from typing import Any, Dict, List, Optional

from ..error_handling import InvalidArgument

DEFAULT_SEED = 42


def clean_config(run_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Cleans the config dict and sets defaults.

    Returns a new dict; the caller's dict is left untouched.
    """
    run_config = dict(run_config)
    run_config.setdefault('sampler', 'joint')
    run_config.setdefault('rng_seed', DEFAULT_SEED)
    run_config.setdefault('use_double', True)
    run_config.setdefault('log_summary', True)

    if run_config['sampler'] in ('biased_walk', 'random_walk'):
        run_config.setdefault('steps', 1000)
        run_config.setdefault('init', 1)
        run_config.setdefault('left', 1)
        run_config.setdefault('right', 20)
    else:
        run_config.setdefault('sweeps', 1000)
        run_config.setdefault('init', (0.2, 0.5))
        run_config.setdefault('priors', (1.0, 1.0, 1.0, 1.0))
        run_config.setdefault('f_sd', 0.07)
        run_config.setdefault('p_sd', 0.07)

    return run_config


def configure_precision(use_double: bool = True):
    """
    Configure JAX precision and return the float dtype in use.

    Double precision is the default so recorded states equal the Python floats
    supplied by the caller.
    """
    jax.config.update("jax_enable_x64", bool(use_double))
    return jnp.float64 if use_double else jnp.float32


def gen_rng_key(rng_seed: int = DEFAULT_SEED):
    """Generate a JAX PRNG key from an integer seed."""
    return random.PRNGKey(rng_seed)


def split_keys(key, n: int) -> List[Any]:
    """
    Independent keys for n replicate chains.

    Chains run from these keys share no random state and can be executed in
    any order, or concurrently, without changing their outputs.
    """
    return list(random.split(key, n))


def resolve_key(key=None, seed: Optional[int] = None):
    """
    Pick the random source for a run.

    An explicit key is used as is; otherwise the seed (default DEFAULT_SEED) is turned
    into a key. Passing both is an error, since the seed would be ignored.
    """
    if key is not None and seed is not None:
        raise InvalidArgument("Pass either key or seed, not both")
    if key is not None:
        return key
    return gen_rng_key(DEFAULT_SEED if seed is None else seed)
