"""
Biased random walk on the integers [left, right].

A Metropolis chain with a symmetric +/-1 proposal:

- a proposal outside [left, right] is rejected and the walk stays put (the
  target is not evaluated);
- an in-bounds proposal with weight(proposed) >= weight(current) is always
  accepted;
- otherwise it is accepted iff u < weight(proposed) / weight(current).

The stationary distribution is the weight vector normalized over
[left, right]. With equal weights every in-bounds proposal is accepted and the
walk is the plain (unbiased) random walk.

Draw order per step: direction, then acceptance.
"""

import time
from datetime import timedelta
from functools import partial
from typing import Optional, Sequence, Union

import jax
import jax.numpy as jnp
import jax.random as random
import numpy as np

from .error_handling import validate_walk_inputs
from .mcmc.config import configure_precision, resolve_key
from .mcmc.diagnostics import log_acceptance_summary
from .mcmc.types import WalkTrajectory
from .proposals import step_proposal
from .target import DiscreteTargetDensity

import logging
logger = logging.getLogger('mhlab')


def walk_step(carry, _, weights, left, right):
    """
    One transition of the walk as a lax.scan body.

    Args:
        carry: (current_state, key)
        weights: Weight of state s at index s - 1
        left, right: Walk bounds (inclusive)

    Returns:
        Updated carry and (next_state, proposed, accepted, in_bounds)
    """
    current, key = carry

    one = jnp.ones(1, dtype=current.dtype)
    proposed, _, new_key = step_proposal((key, current[None], one, one))
    proposed = proposed[0]

    new_key, accept_key = random.split(new_key)
    uniform = random.uniform(accept_key, shape=(), dtype=weights.dtype)

    in_bounds = (proposed >= left) & (proposed <= right)
    # Clipped lookup; out-of-bounds proposals never reach the comparison below
    w_current = weights[current - 1]
    w_proposed = weights[jnp.clip(proposed, left, right) - 1]

    uphill = w_proposed >= w_current
    accept = in_bounds & (uphill | (uniform < w_proposed / w_current))
    next_state = jnp.where(accept, proposed, current)

    return (next_state, new_key), (next_state, proposed, accept, in_bounds)


@partial(jax.jit, static_argnames=('steps',))
def run_walk(key, init, weights, left, right, steps: int):
    """Run the walk for `steps` transitions under jit."""
    body = partial(walk_step, weights=weights, left=left, right=right)
    _, outputs = jax.lax.scan(body, (init, key), None, length=steps)
    return outputs


def _as_target(target_weights) -> DiscreteTargetDensity:
    if isinstance(target_weights, DiscreteTargetDensity):
        return target_weights
    return DiscreteTargetDensity(target_weights)


def run_biased_walk(
    init: int,
    steps: int,
    target_weights: Union[Sequence[float], DiscreteTargetDensity],
    left: int = 1,
    right: int = 20,
    *,
    key=None,
    seed: Optional[int] = None,
    use_double: bool = True,
    log_summary: bool = True,
) -> WalkTrajectory:
    """
    Run the biased random walk and keep every proposal and decision.

    Args:
        init: Starting state, left <= init <= right
        steps: Number of transitions (the output has steps + 1 states)
        target_weights: Weights of states 1..K, or a DiscreteTargetDensity.
            [left, right] must lie within [1, K].
        left, right: Walk bounds (inclusive)
        key: JAX PRNG key; takes the place of seed
        seed: Integer seed (default 42 when no key is given)

    Returns:
        WalkTrajectory

    Raises:
        InvalidArgument: On invalid inputs, before the first step
    """
    target = _as_target(target_weights)
    validate_walk_inputs(init, steps, len(target), left, right)

    float_dtype = configure_precision(use_double)
    key = resolve_key(key, seed)

    logger.info(f"Starting random walk on [{left}, {right}]: {steps} steps from {init}")
    start_time = time.perf_counter()
    states, proposed, accepted, in_bounds = jax.block_until_ready(run_walk(
        key,
        jnp.asarray(init, dtype=jnp.int32),
        jnp.asarray(target.weights, dtype=float_dtype),
        jnp.asarray(left, dtype=jnp.int32),
        jnp.asarray(right, dtype=jnp.int32),
        steps,
    ))
    wall_time = time.perf_counter() - start_time
    logger.info(f"  Total Wall Time: {timedelta(seconds=int(wall_time))} ({wall_time:.2f}s)")

    trajectory = WalkTrajectory(
        states=np.concatenate([[init], np.asarray(states)]).astype(np.int64),
        proposed=np.concatenate([[init], np.asarray(proposed)]).astype(np.int64),
        accepted=np.concatenate([[False], np.asarray(accepted)]).astype(bool),
        in_bounds=np.concatenate([[False], np.asarray(in_bounds)]).astype(bool),
        left=left,
        right=right,
    )
    if log_summary:
        log_acceptance_summary(("state",), [trajectory.acceptance_rate()])
    return trajectory


def biased_random_walk(init: int, steps: int, target_weights, left: int = 1,
                       right: int = 20, *, key=None, seed: Optional[int] = None,
                       **kwargs) -> np.ndarray:
    """Visited states of the biased walk: a read-only int array of length steps + 1."""
    return run_biased_walk(init, steps, target_weights, left, right,
                           key=key, seed=seed, **kwargs).states


def random_walk(init: int, steps: int, left: int = 1, right: int = 20, *,
                key=None, seed: Optional[int] = None, **kwargs) -> np.ndarray:
    """Unbiased walk on [left, right]: the biased walk with a flat target."""
    target = DiscreteTargetDensity.uniform(max(right, 1))
    return biased_random_walk(init, steps, target, left, right,
                              key=key, seed=seed, **kwargs)
