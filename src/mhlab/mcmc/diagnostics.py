"""
MCMC Acceptance Bookkeeping.

Raw acceptance statistics only; convergence diagnostics across chains are
deliberately not provided.
"""

import numpy as np
from typing import Sequence

import logging
logger = logging.getLogger('mhlab')

LOW_ACCEPTANCE = 0.10


def acceptance_rates(trajectory) -> np.ndarray:
    """
    Per-parameter acceptance rates of a finished run.

    Works for MH trajectories (one rate per parameter) and walk trajectories
    (a single rate). Record 0 carries no proposal and is excluded.
    """
    if hasattr(trajectory, 'acceptance_rates'):
        return np.asarray(trajectory.acceptance_rates())
    return np.atleast_1d(trajectory.acceptance_rate())


def log_acceptance_summary(labels: Sequence[str], rates: np.ndarray) -> None:
    """
    Log summary statistics for MH acceptance rates.

    Args:
        labels: Parameter (or block) labels
        rates: Acceptance rates aligned with labels
    """
    rates = np.atleast_1d(np.asarray(rates, dtype=float))
    if rates.size == 0 or not np.any(np.isfinite(rates)):
        return

    logger.info(f"--- MH Acceptance Rates ({rates.size} parameters) ---")
    for label, rate in zip(labels, rates):
        logger.info(f"  {label}: {rate:.1%}")

    low_rate_mask = rates < LOW_ACCEPTANCE
    if np.any(low_rate_mask):
        low_labels = [lbl for lbl, is_low in zip(labels, low_rate_mask) if is_low]
        logger.warning(
            f"  WARNING: {len(low_labels)} parameter(s) have acceptance rate < 10%: "
            f"{', '.join(low_labels)}"
        )
