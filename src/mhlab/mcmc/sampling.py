"""
MCMC Sampling Functions.

Core sampling functions for the block-MH engine:
- propose_block: Generate a proposal for one parameter block
- metropolis_block_step: Metropolis-Hastings step for a single block
- full_sweep: One sweep over all blocks, in order

Log density functions map a full chain state to a LogDensityResult. A result
that is not in_domain rejects the proposal outright; no NaN is ever relied on
to make a comparison fail.
"""

import jax
import jax.numpy as jnp
import jax.random as random
from functools import partial

from ..batch_specs import ProposalType
from ..proposals import rand_walk_proposal, step_proposal
from .types import BlockArrays


# Map from ProposalType enum value to proposal function
# Used to build compact dispatch tables containing only used proposals
PROPOSAL_REGISTRY = {
    int(ProposalType.RAND_WALK): rand_walk_proposal,
    int(ProposalType.STEP): step_proposal,
}


def propose_block(key, current_block, block_scale, block_mask, proposal_type,
                  used_proposal_types):
    """
    Generate a proposal for a parameter block.

    Args:
        key: JAX random key
        current_block: Current parameter values (block_size,)
        block_scale: Proposal scale per parameter (block_size,)
        block_mask: Mask for valid parameters
        proposal_type: REMAPPED index into compact dispatch table
        used_proposal_types: Tuple of original ProposalType values actually used,
                            in the order they appear in the dispatch table.

    Returns:
        proposal: Proposed parameter values
        log_ratio: Log Hastings ratio
        new_key: Updated random key
    """
    operand = (key, current_block, block_scale, block_mask)
    dispatch_table = [PROPOSAL_REGISTRY[ptype] for ptype in used_proposal_types]

    if len(dispatch_table) == 1:
        return dispatch_table[0](operand)
    return jax.lax.switch(proposal_type, dispatch_table, operand)


def metropolis_block_step(operand, log_density_fn, used_proposal_types):
    """
    Perform one Metropolis-Hastings step for a single block.

    Draw order: the proposal draw(s) for the block, then one uniform(0, 1)
    acceptance draw. The acceptance ratio is formed in log space and only
    exponentiated at the end:

        ratio = exp(log_hastings + lp(proposed) - lp(current))

    and the block is accepted iff the proposal is in domain and u < ratio.

    Args:
        operand: Tuple of (key, chain_state, block_idx_vec, block_scale,
                          block_mask, proposal_type)
        log_density_fn: state -> LogDensityResult
        used_proposal_types: Tuple of ProposalType values actually used

    Returns:
        next_state, new_key, proposed_state, ratio (NaN when out of domain), accepted
    """
    key, chain_state, block_idx_vec, block_scale, block_mask, proposal_type = operand

    safe_indices = jnp.clip(block_idx_vec, 0, chain_state.shape[0] - 1)
    current_block_values = jnp.take(chain_state, safe_indices)

    proposed_block_values, log_hastings_ratio, key = propose_block(
        key, current_block_values, block_scale, block_mask, proposal_type,
        used_proposal_types
    )

    actual_proposal_values = jnp.where(block_mask > 0, proposed_block_values, current_block_values)

    # Padding indices are clipped to 0, so .at[].set() would write index 0
    # several times. Match each chain_state position against the valid block
    # positions instead.
    chain_indices = jnp.arange(chain_state.shape[0])
    matches = (block_idx_vec[None, :] == chain_indices[:, None]) & (block_mask[None, :] > 0)
    update_needed = jnp.any(matches, axis=1)
    first_match_idx = jnp.argmax(matches, axis=1)
    values_from_block = actual_proposal_values[first_match_idx]
    proposed_state = jnp.where(update_needed, values_from_block, chain_state)

    lp_current = log_density_fn(chain_state)
    lp_proposed = log_density_fn(proposed_state)

    valid = lp_proposed.in_domain & lp_current.in_domain & jnp.all(jnp.isfinite(actual_proposal_values))
    log_ratio = log_hastings_ratio + lp_proposed.value - lp_current.value
    safe_log_ratio = jnp.where(valid, log_ratio, 0.0)
    ratio = jnp.where(valid, jnp.exp(safe_log_ratio), jnp.nan)

    new_key, accept_key = random.split(key)
    uniform = random.uniform(accept_key, shape=(), dtype=chain_state.dtype)

    accept = jnp.where(valid, uniform < ratio, False)
    next_state = jnp.where(accept, proposed_state, chain_state)

    return next_state, new_key, proposed_state, ratio, accept


def full_sweep(key, chain_state, block_arrays: BlockArrays, log_density_fn):
    """
    Run one sweep over all blocks, in block order.

    Each block sees the state left by the blocks before it in the same sweep.
    With one block per parameter this is a component-wise sweep; with a single
    block it is a joint update.

    Args:
        key: JAX random key
        chain_state: Current state of the chain (n_params,)
        block_arrays: BlockArrays with indices, masks, scales, proposal types
        log_density_fn: state -> LogDensityResult

    Returns:
        final_state: State after the sweep
        final_key: Updated random key
        proposals: Proposed value of each parameter (n_params,)
        ratios: Acceptance ratio of the block owning each parameter (n_params,)
        accepts: Acceptance flag of the block owning each parameter (n_params,)
    """
    metro_step = partial(metropolis_block_step, log_density_fn=log_density_fn,
                         used_proposal_types=block_arrays.used_proposal_types)

    def scan_body(carry_state, block_i):
        current_state, current_key = carry_state

        (updated_state, new_key, proposed_state, ratio, accepted) = metro_step(
            (current_key, current_state,
             block_arrays.indices[block_i],
             block_arrays.scales[block_i].astype(current_state.dtype),
             block_arrays.masks[block_i].astype(current_state.dtype),
             block_arrays.proposal_types[block_i])
        )
        return (updated_state, new_key), (proposed_state, ratio, accepted)

    (final_state, final_key), (block_proposals, block_ratios, block_accepts) = jax.lax.scan(
        scan_body,
        (chain_state, key),
        jnp.arange(block_arrays.num_blocks)
    )

    param_ids = jnp.arange(block_arrays.total_params)
    owner = block_arrays.param_block
    proposals = block_proposals[owner, param_ids]
    ratios = block_ratios[owner]
    accepts = block_accepts[owner]

    return final_state, final_key, proposals, ratios, accepts
