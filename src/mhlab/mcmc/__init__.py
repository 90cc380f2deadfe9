"""
MCMC Subpackage - Core MCMC sampling implementation.

This package contains the core MCMC sampling logic:
- backend: Config-driven entry point (run_sampler)
- single_run: Single-chain block-MH engine (run_block_mh)
- config: Configuration, precision and random keys
- diagnostics: Acceptance bookkeeping
- sampling: Proposal and MH step functions
- scan: JAX scan loop
- types: Core data structures (BlockArrays, records, trajectories)
"""

# Import types first (needed by other modules)
from .types import (
    BlockArrays,
    build_block_arrays,
    ChainRecord,
    SweepRecord,
    WalkRecord,
    MHTrajectory,
    InbreedingTrajectory,
    WalkTrajectory,
)

from .single_run import run_block_mh
from .backend import run_sampler, SAMPLERS

from .config import (
    clean_config,
    configure_precision,
    gen_rng_key,
    split_keys,
    resolve_key,
)
from .diagnostics import acceptance_rates, log_acceptance_summary
from .sampling import metropolis_block_step, full_sweep

__all__ = [
    # Main entry points
    'run_block_mh',
    'run_sampler',
    'SAMPLERS',
    # Types
    'BlockArrays',
    'build_block_arrays',
    'ChainRecord',
    'SweepRecord',
    'WalkRecord',
    'MHTrajectory',
    'InbreedingTrajectory',
    'WalkTrajectory',
    # Config
    'clean_config',
    'configure_precision',
    'gen_rng_key',
    'split_keys',
    'resolve_key',
    # Diagnostics
    'acceptance_rates',
    'log_acceptance_summary',
    # Sampling
    'metropolis_block_step',
    'full_sweep',
]
