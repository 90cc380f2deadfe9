"""
MCMC Single Run - Single-chain block-MH engine.

This module provides run_block_mh(), which every continuous sampler in the
package is built on, and its helper functions:
- _initial_records: Record 0 for a run (initial state, no proposal)
- _transfer_to_host: Move results from device to host
"""

import time
from datetime import timedelta
from typing import Callable, List, Optional, Sequence, Type

import jax
import jax.numpy as jnp
import numpy as np

from ..batch_specs import BlockSpec, validate_block_specs, param_labels, summarize_blocks
from ..error_handling import InvalidArgument
from .config import configure_precision, resolve_key
from .diagnostics import log_acceptance_summary
from .scan import run_chain
from .types import MHTrajectory, build_block_arrays

import logging
logger = logging.getLogger('mhlab')

__all__ = ['run_block_mh']


def _initial_records(init_state: np.ndarray):
    """Record 0: the initial state, NaN proposals and ratios, no acceptance."""
    n_params = init_state.shape[0]
    return (
        init_state[None, :],
        np.full((1, n_params), np.nan),
        np.full((1, n_params), np.nan),
        np.zeros((1, n_params), dtype=bool),
    )


def _transfer_to_host(init_state, outputs):
    """Prepend record 0 to the device outputs and copy everything to numpy."""
    first = _initial_records(np.asarray(init_state))
    return tuple(
        np.concatenate([head, np.asarray(rest).astype(head.dtype)], axis=0)
        for head, rest in zip(first, outputs)
    )


def run_block_mh(
    log_density_fn: Callable,
    init: Sequence[float],
    block_specs: List[BlockSpec],
    sweeps: int,
    *,
    key=None,
    seed: Optional[int] = None,
    use_double: bool = True,
    labels: Optional[Sequence[str]] = None,
    trajectory_cls: Type[MHTrajectory] = MHTrajectory,
    log_summary: bool = True,
) -> MHTrajectory:
    """
    Run a single block Metropolis-Hastings chain.

    Each sweep updates the blocks in order; a block's proposal is accepted or
    rejected as a whole. The caller is responsible for validating model
    inputs; this function validates only the block layout.

    Args:
        log_density_fn: state (n_params,) -> LogDensityResult. Must be usable
            under jax.jit. Reuse the same function object across runs to reuse
            the compiled kernel.
        init: Initial state, one value per parameter
        block_specs: Block layout of the parameters
        sweeps: Number of sweeps (the output has sweeps + 1 records)
        key: JAX PRNG key (the explicit random source of the chain)
        seed: Integer seed, used when no key is given
        use_double: Run in float64 (default) or float32
        labels: Parameter labels (default: derived from block labels)
        trajectory_cls: Trajectory type to build
        log_summary: Log the acceptance summary after the run

    Returns:
        Trajectory of length sweeps + 1 whose record 0 is the initial state
    """
    float_dtype = configure_precision(use_double)
    key = resolve_key(key, seed)

    init_state = jnp.asarray(init, dtype=float_dtype)
    if init_state.ndim != 1:
        raise InvalidArgument(f"init must be one-dimensional, got shape {init_state.shape}")
    validate_block_specs(block_specs, n_params=init_state.shape[0])
    block_arrays = build_block_arrays(block_specs)
    labels = tuple(labels) if labels is not None else param_labels(block_specs)

    logger.debug(summarize_blocks(block_specs))
    logger.info(f"Starting {len(block_specs)}-block MH run: {sweeps} sweeps on {jax.default_backend()}")

    start_time = time.perf_counter()
    outputs = run_chain(key, init_state, block_arrays, log_density_fn, sweeps)
    outputs = jax.block_until_ready(outputs)
    wall_time = time.perf_counter() - start_time
    logger.info(f"  Total Wall Time: {timedelta(seconds=int(wall_time))} ({wall_time:.2f}s)")

    states, proposals, ratios, accepted = _transfer_to_host(init_state, outputs)
    trajectory = trajectory_cls(
        states=states,
        proposals=proposals,
        ratios=ratios,
        accepted=accepted,
        labels=labels,
    )

    if log_summary:
        log_acceptance_summary(labels, trajectory.acceptance_rates())
    return trajectory
