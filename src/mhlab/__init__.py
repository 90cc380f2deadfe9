"""
mhlab - Metropolis-Hastings teaching samplers

Public API:
    Discrete walk:
        biased_random_walk - States of a Metropolis walk on [left, right]
        run_biased_walk - Same walk, returning every proposal and decision
        random_walk - Unbiased walk (flat target)
        DiscreteTargetDensity - Unnormalized weights over states 1..K

    Inbreeding model:
        joint_mh - Joint (f, p) Metropolis-Hastings
        componentwise_mh - Component-wise (f then p) Metropolis-Hastings
        log_density - Unnormalized log posterior, tagged with in_domain
        CountData, PriorHyperparameters, LogDensityResult

    Engine:
        run_block_mh - Block Metropolis-Hastings over any log density
        BlockSpec, ProposalType, UpdateScheme - Block layout
        run_sampler - Config-dict entry point

    Errors:
        InvalidArgument, InvalidState

Example:
    from mhlab import joint_mh, componentwise_mh

    joint = joint_mh(counts=(30, 10, 10), init=(0.2, 0.5), sweeps=5000, seed=1)
    cw = componentwise_mh(counts=(30, 10, 10), init=(0.2, 0.5), sweeps=5000, seed=1)
    print(joint.acceptance_rates(), cw.acceptance_rates())
"""
# CRITICAL: Import jax_config FIRST to set environment variables before JAX loads
from . import jax_config  # noqa: F401

# Import mcmc subpackage to register BlockArrays pytree
from . import mcmc as _mcmc  # noqa: F401

from .error_handling import InvalidArgument, InvalidState
from .batch_specs import (
    BlockSpec,
    ProposalType,
    UpdateScheme,
    joint_blocks,
    componentwise_blocks,
    create_blocks,
)
from .target import DiscreteTargetDensity
from .inbreeding import (
    CountData,
    PriorHyperparameters,
    LogDensityResult,
    log_density,
    genotype_probabilities,
    inbreeding_log_density_fn,
)
from .walk import biased_random_walk, run_biased_walk, random_walk
from .samplers import joint_mh, componentwise_mh

from .mcmc import (
    run_block_mh,
    run_sampler,
    SweepRecord,
    ChainRecord,
    WalkRecord,
    MHTrajectory,
    InbreedingTrajectory,
    WalkTrajectory,
    acceptance_rates,
    gen_rng_key,
    split_keys,
)

__version__ = "0.1.0"
