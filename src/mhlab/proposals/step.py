"""
Discrete Step Proposal

Moves every active parameter one unit left or right with equal probability:

    x'_d = x_d + s_d,   s_d uniform on {-1, +1}

Hastings ratio: 0 (symmetric proposal)

Used by the discrete random walk, and by MH blocks over integer-valued
parameters. The proposal can leave the target's support; the caller rejects
such moves without evaluating the target.
"""

import jax.numpy as jnp
import jax.random as random


def step_proposal(operand):
    """
    Symmetric +/-1 step proposal.

    Args:
        operand: Tuple of (key, current_block, block_scale, block_mask)
            key: JAX random key
            current_block: Current values (block_size,), integer or float
            block_scale: Unused (the step length is always one)
            block_mask: Mask for valid parameters

    Returns:
        proposal: Proposed values, same dtype as current_block
        log_hastings_ratio: 0.0 (symmetric proposal)
        new_key: Updated random key
    """
    key, current_block, block_scale, block_mask = operand
    del block_scale  # Unused

    new_key, proposal_key = random.split(key)

    coin = random.randint(proposal_key, current_block.shape, 0, 2, dtype=jnp.int32)
    direction = (2 * coin - 1).astype(current_block.dtype)
    proposal = current_block + direction * block_mask.astype(current_block.dtype)

    log_hastings_ratio = 0.0

    return proposal, log_hastings_ratio, new_key
