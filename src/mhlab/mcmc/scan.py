"""
MCMC Scan Loop.

This module contains the compiled chain loop:
- mcmc_scan_body: One sweep of the chain as a lax.scan body
- run_chain: Run a fixed number of sweeps under jit

The initial state is not part of the scan output; the caller prepends it as
record 0 so that every record in the output is written exactly once.
"""

import jax
from functools import partial

from .types import BlockArrays
from .sampling import full_sweep


def mcmc_scan_body(carry, _, block_arrays: BlockArrays, log_density_fn):
    """
    One iteration of the MCMC scan.

    Args:
        carry: (chain_state, key)
        _: Unused scan input
        block_arrays: Block layout of the chain
        log_density_fn: state -> LogDensityResult

    Returns:
        Updated carry and the sweep outputs
        (state, proposals, ratios, accepts), each of shape (n_params,)
    """
    chain_state, key = carry
    new_state, new_key, proposals, ratios, accepts = full_sweep(
        key, chain_state, block_arrays, log_density_fn
    )
    return (new_state, new_key), (new_state, proposals, ratios, accepts)


@partial(jax.jit, static_argnames=('log_density_fn', 'num_sweeps'))
def run_chain(key, init_state, block_arrays: BlockArrays, log_density_fn, num_sweeps: int):
    """
    Run num_sweeps sweeps from init_state.

    log_density_fn is a static argument: it is hashed by identity, so reusing
    the same function object reuses the compiled kernel.

    Returns:
        states, proposals, ratios, accepts: arrays of shape (num_sweeps, n_params)
    """
    body = partial(mcmc_scan_body, block_arrays=block_arrays, log_density_fn=log_density_fn)
    _, (states, proposals, ratios, accepts) = jax.lax.scan(
        body,
        (init_state, key),
        None,
        length=num_sweeps
    )
    return states, proposals, ratios, accepts
