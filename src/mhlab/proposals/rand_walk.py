"""
Random Walk Proposal for MCMC Sampling

Independent Gaussian perturbation of every active parameter in the block.

Proposal: x'_d ~ N(x_d, scale_d^2)
where scale_d is the per-parameter proposal standard deviation taken from the
BlockSpec scale.

Hastings ratio: 0 (symmetric proposal, q(x'|x) = q(x|x'))

The proposal knows nothing about the support of the target. Values that land
outside it are handed to the log density, which flags them as out of domain so
the step rejects them.
"""

import jax.random as random


def rand_walk_proposal(operand):
    """
    Random walk proposal with a diagonal, per-parameter scale.

    A block of size d draws a single normal vector of shape (d,), so the
    noise for parameter 0 is always drawn before the noise for parameter 1.

    Args:
        operand: Tuple of (key, current_block, block_scale, block_mask)
            key: JAX random key
            current_block: Current parameter values (block_size,)
            block_scale: Proposal standard deviation per parameter (block_size,)
            block_mask: Mask for valid parameters (1.0 = active, 0.0 = padding)

    Returns:
        proposal: Proposed parameter values
        log_hastings_ratio: 0.0 (symmetric proposal)
        new_key: Updated random key
    """
    key, current_block, block_scale, block_mask = operand

    new_key, proposal_key = random.split(key)

    noise = random.normal(proposal_key, shape=current_block.shape, dtype=current_block.dtype)
    proposal = current_block + noise * block_scale * block_mask

    log_hastings_ratio = 0.0

    return proposal, log_hastings_ratio, new_key
