"""
Metropolis-Hastings samplers for the inbreeding model.

Both samplers propose independent Gaussian perturbations of f and p and differ
only in update granularity:

- joint_mh: one block (f, p). Both values move together or neither moves.
  Draw order per sweep: f-proposal, p-proposal, acceptance.
- componentwise_mh: blocks f then p. The p-update is evaluated at the f
  accepted earlier in the same sweep.
  Draw order per sweep: f-proposal, acceptance, p-proposal, acceptance.

Smaller proposals are accepted more often, at the cost of slower mixing when
f and p are strongly correlated in the posterior.
"""

from typing import Optional, Sequence

from .batch_specs import UpdateScheme, create_blocks
from .error_handling import validate_mh_inputs
from .inbreeding import CountData, PriorHyperparameters, inbreeding_log_density_fn
from .mcmc.single_run import run_block_mh
from .mcmc.types import InbreedingTrajectory

import logging
logger = logging.getLogger('mhlab')

PARAM_LABELS = ("f", "p")
DEFAULT_INIT = (0.2, 0.5)
DEFAULT_SD = 0.07


def _run_inbreeding_mh(scheme: UpdateScheme, counts, priors, init, sweeps,
                       f_sd, p_sd, key, seed, use_double, log_summary) -> InbreedingTrajectory:
    validate_mh_inputs(counts, priors, init, sweeps, f_sd, p_sd)
    counts = CountData(*(int(c) for c in counts))
    priors = PriorHyperparameters(*(float(a) for a in priors))

    logger.info(f"{scheme} MH for counts={tuple(counts)}, priors={tuple(priors)}, "
                f"init={tuple(init)}, f_sd={f_sd}, p_sd={p_sd}")

    return run_block_mh(
        inbreeding_log_density_fn(counts, priors),
        (float(init[0]), float(init[1])),
        create_blocks(scheme, (f_sd, p_sd), PARAM_LABELS),
        sweeps,
        key=key,
        seed=seed,
        use_double=use_double,
        labels=PARAM_LABELS,
        trajectory_cls=InbreedingTrajectory,
        log_summary=log_summary,
    )


def joint_mh(
    counts: Sequence[int],
    priors: Sequence[float] = (1.0, 1.0, 1.0, 1.0),
    init: Sequence[float] = DEFAULT_INIT,
    sweeps: int = 1000,
    f_sd: float = DEFAULT_SD,
    p_sd: float = DEFAULT_SD,
    *,
    key=None,
    seed: Optional[int] = None,
    use_double: bool = True,
    log_summary: bool = True,
) -> InbreedingTrajectory:
    """
    Joint ("2-D") Metropolis-Hastings sampler for (f, p).

    Args:
        counts: Genotype counts (n_AA, n_Aa, n_aa)
        priors: Beta hyperparameters (alpha_f, beta_f, alpha_p, beta_p)
        init: Initial (f, p), each in (0, 1)
        sweeps: Number of sweeps
        f_sd: Proposal standard deviation for f
        p_sd: Proposal standard deviation for p
        key: JAX PRNG key; takes the place of seed
        seed: Integer seed (default 42 when no key is given)

    Returns:
        InbreedingTrajectory of sweeps + 1 SweepRecords. Both ratios of a
        record hold the joint ratio and both flags are equal.

    Raises:
        InvalidArgument: On invalid inputs, before any sweep runs
    """
    return _run_inbreeding_mh(UpdateScheme.JOINT, counts, priors, init, sweeps,
                              f_sd, p_sd, key, seed, use_double, log_summary)


def componentwise_mh(
    counts: Sequence[int],
    priors: Sequence[float] = (1.0, 1.0, 1.0, 1.0),
    init: Sequence[float] = DEFAULT_INIT,
    sweeps: int = 1000,
    f_sd: float = DEFAULT_SD,
    p_sd: float = DEFAULT_SD,
    *,
    key=None,
    seed: Optional[int] = None,
    use_double: bool = True,
    log_summary: bool = True,
) -> InbreedingTrajectory:
    """
    Component-wise Metropolis-Hastings sampler for (f, p).

    Same arguments as joint_mh. Each sweep updates f, then p given the new f.
    The two ratios and flags of a record are independent of each other.
    """
    return _run_inbreeding_mh(UpdateScheme.COMPONENTWISE, counts, priors, init, sweeps,
                              f_sd, p_sd, key, seed, use_double, log_summary)
