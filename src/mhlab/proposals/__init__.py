"""
Proposal Distributions for MCMC Sampling

This package implements proposal distributions for Metropolis-Hastings sampling.
ProposalType enum is defined in batch_specs.py.

To add a new proposal:
1. Add enum value to ProposalType in batch_specs.py
2. Create new file in proposals/ directory with proposal function
3. Add to PROPOSAL_REGISTRY in mcmc/sampling.py
4. Export from this __init__.py

All proposal functions accept a single operand tuple:
    (key, current_block, block_scale, block_mask)

and return (proposal, log_hastings_ratio, new_key). Each proposal computes its
own Hastings ratio; both proposals here are symmetric so the ratio is 0 and the
proposal density is never evaluated.
"""

from .rand_walk import rand_walk_proposal
from .step import step_proposal

__all__ = [
    'rand_walk_proposal',
    'step_proposal',
]
