"""
MCMC Backend - config-driven entry point.

run_sampler() takes a plain config dict, fills in defaults, validates it, and
dispatches to the requested sampler. It is the single place that turns a
serializable configuration into a run.

Example:
    from mhlab import run_sampler

    traj = run_sampler({
        'sampler': 'componentwise',
        'counts': (30, 10, 10),
        'sweeps': 5000,
        'rng_seed': 7,
    })
"""

from datetime import datetime
from typing import Any, Dict

import jax

from ..error_handling import InvalidArgument, validate_run_config, diagnose_trajectory, print_diagnostics
from .config import clean_config
from .diagnostics import acceptance_rates

import logging
logger = logging.getLogger('mhlab')


def _run_joint(cfg):
    from ..samplers import joint_mh
    return joint_mh(cfg['counts'], cfg['priors'], cfg['init'], cfg['sweeps'],
                    cfg['f_sd'], cfg['p_sd'], seed=cfg['rng_seed'],
                    use_double=cfg['use_double'], log_summary=cfg['log_summary'])


def _run_componentwise(cfg):
    from ..samplers import componentwise_mh
    return componentwise_mh(cfg['counts'], cfg['priors'], cfg['init'], cfg['sweeps'],
                            cfg['f_sd'], cfg['p_sd'], seed=cfg['rng_seed'],
                            use_double=cfg['use_double'], log_summary=cfg['log_summary'])


def _run_biased_walk(cfg):
    from ..walk import run_biased_walk
    return run_biased_walk(cfg['init'], cfg['steps'], cfg['target_weights'],
                           cfg['left'], cfg['right'], seed=cfg['rng_seed'],
                           use_double=cfg['use_double'], log_summary=cfg['log_summary'])


def _run_random_walk(cfg):
    from ..target import DiscreteTargetDensity
    cfg = dict(cfg, target_weights=DiscreteTargetDensity.uniform(max(cfg['right'], 1)))
    return _run_biased_walk(cfg)


SAMPLERS = {
    'joint': _run_joint,
    'componentwise': _run_componentwise,
    'biased_walk': _run_biased_walk,
    'random_walk': _run_random_walk,
}

REQUIRED_KEYS = {
    'joint': ('counts',),
    'componentwise': ('counts',),
    'biased_walk': ('target_weights',),
    'random_walk': (),
}


def run_sampler(run_config: Dict[str, Any], diagnose: bool = False):
    """
    Run the sampler named by run_config['sampler'].

    Args:
        run_config: Config dict. Keys (all lowercase):
            sampler: 'joint', 'componentwise', 'biased_walk' or 'random_walk'
            rng_seed, use_double, log_summary: run settings
            counts, priors, init, sweeps, f_sd, p_sd: MH samplers
            target_weights, init, steps, left, right: walks
        diagnose: Also run the trajectory diagnostics and log them

    Returns:
        The sampler's trajectory

    Raises:
        InvalidArgument: If the configuration or the sampler inputs are invalid
    """
    cfg = clean_config(run_config)
    validate_run_config(cfg, SAMPLERS)

    missing = [k for k in REQUIRED_KEYS[cfg['sampler']] if k not in cfg]
    if missing:
        raise InvalidArgument(f"Missing required config key(s) for '{cfg['sampler']}': {missing}")

    logger.info(f"Starting {cfg['sampler']} sampler at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    logger.info(f"JAX backend: {jax.default_backend()}")

    trajectory = SAMPLERS[cfg['sampler']](cfg)

    if diagnose:
        labels = getattr(trajectory, 'labels', ('state',))
        print_diagnostics(diagnose_trajectory(trajectory.states, acceptance_rates(trajectory), labels))
    return trajectory
