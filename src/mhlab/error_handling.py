"""
Error Handling and Validation Utilities for the samplers

This module holds the exception types raised on bad input, the validators run
before any sweep executes, and diagnostic tools for finished trajectories.

Out-of-domain proposals are never errors: they are rejected inside the chain.
Validation therefore only ever fires before sampling starts.
"""

from numbers import Integral, Real
from typing import Any, Dict, Sequence

import numpy as np

import logging
logger = logging.getLogger('mhlab')


class InvalidArgument(ValueError):
    """Caller-supplied parameter is unusable; raised before the run starts."""


class InvalidState(InvalidArgument):
    """A discrete state lies outside the index range of a target density."""


def _raise_if_errors(errors, title):
    if errors:
        raise InvalidArgument(f"{title}:\n  " + "\n  ".join(errors))


def _is_int(value) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


def _check_count(name, value, errors, minimum=0):
    if not _is_int(value):
        errors.append(f"{name} must be an integer, got {value!r}")
    elif value < minimum:
        errors.append(f"{name} must be >= {minimum}, got {value}")


def _check_positive(name, value, errors):
    if not isinstance(value, Real) or not np.isfinite(value) or value <= 0:
        errors.append(f"{name} must be a positive finite number, got {value!r}")


def _check_unit_interval(name, value, errors):
    if not isinstance(value, Real) or not (0.0 < value < 1.0):
        errors.append(f"{name} must lie in the open interval (0, 1), got {value!r}")


def validate_weights(weights: Sequence[float]) -> np.ndarray:
    """
    Validate a target weight vector.

    Returns:
        The weights as a float64 numpy array

    Raises:
        InvalidArgument: If the vector is empty, not one-dimensional, or holds
            a non-positive or non-finite entry
    """
    arr = np.asarray(weights, dtype=float)
    errors = []
    if arr.ndim != 1:
        errors.append(f"weights must be one-dimensional, got shape {arr.shape}")
    elif arr.size == 0:
        errors.append("weights must not be empty")
    else:
        bad = np.flatnonzero(~np.isfinite(arr) | (arr <= 0))
        if bad.size:
            # Report 1-based states, matching how weights are indexed
            errors.append(
                f"weights must be positive and finite; bad entries at states {list(bad + 1)}"
            )
    _raise_if_errors(errors, "Invalid target weights")
    return arr


def validate_walk_inputs(init, steps, n_weights: int, left, right) -> bool:
    """Validate biased random walk inputs before starting the walk."""
    errors = []

    _check_count("steps", steps, errors)
    for name, value in (("init", init), ("left", left), ("right", right)):
        if not _is_int(value):
            errors.append(f"{name} must be an integer, got {value!r}")

    if not errors:
        if left > right:
            errors.append(f"left ({left}) must be <= right ({right})")
        elif not (left <= init <= right):
            errors.append(f"init ({init}) must lie in [left, right] = [{left}, {right}]")
        if left < 1 or right > n_weights:
            errors.append(
                f"walk range [{left}, {right}] must lie within the weight states [1, {n_weights}]"
            )

    _raise_if_errors(errors, "Random walk input validation failed")
    return True


def validate_mh_inputs(counts, priors, init, sweeps, f_sd, p_sd) -> bool:
    """Validate inbreeding-model sampler inputs before the first sweep."""
    errors = []

    if len(counts) != 3:
        errors.append(f"counts must be (n_AA, n_Aa, n_aa), got {tuple(counts)!r}")
    else:
        for name, value in zip(("n_AA", "n_Aa", "n_aa"), counts):
            _check_count(name, value, errors)

    if len(priors) != 4:
        errors.append(f"priors must be (alpha_f, beta_f, alpha_p, beta_p), got {tuple(priors)!r}")
    else:
        for name, value in zip(("alpha_f", "beta_f", "alpha_p", "beta_p"), priors):
            _check_positive(name, value, errors)

    if len(init) != 2:
        errors.append(f"init must be (f, p), got {tuple(init)!r}")
    else:
        _check_unit_interval("initial f", init[0], errors)
        _check_unit_interval("initial p", init[1], errors)

    _check_count("sweeps", sweeps, errors)
    _check_positive("f_sd", f_sd, errors)
    _check_positive("p_sd", p_sd, errors)

    _raise_if_errors(errors, "MH input validation failed")
    return True


def validate_run_config(config: Dict[str, Any], known_samplers) -> None:
    """
    Validates that a run configuration is sensible.

    Only the keys shared by every sampler are checked here; sampler-specific
    arguments are checked by the sampler's own validator.

    Raises:
        InvalidArgument: If configuration is invalid
    """
    errors = []

    sampler = config.get('sampler')
    if sampler not in known_samplers:
        errors.append(f"Unknown sampler {sampler!r}. Available: {sorted(known_samplers)}")

    if 'rng_seed' in config and not _is_int(config['rng_seed']):
        errors.append(f"rng_seed must be an integer, got {config['rng_seed']!r}")

    if not isinstance(config.get('use_double', True), bool):
        errors.append("use_double must be True or False")

    _raise_if_errors(errors, "Invalid run configuration")


def diagnose_trajectory(states: np.ndarray, acceptance: np.ndarray,
                        labels: Sequence[str]) -> Dict[str, Any]:
    """
    Analyzes a finished chain to identify common issues.

    Args:
        states: Visited states (n_records,) or (n_records, n_params)
        acceptance: Per-parameter acceptance rates, aligned with labels
        labels: Parameter names

    Returns:
        diagnostics: Dictionary with issues, warnings, and info
    """
    diagnostics = {
        'issues': [],
        'warnings': [],
        'info': []
    }
    states = np.asarray(states)
    if states.ndim == 1:
        states = states[:, None]

    if not np.all(np.isfinite(states)):
        diagnostics['issues'].append(
            "Trajectory contains NaN or Inf states - sampler became unstable"
        )

    if states.shape[0] > 1:
        stuck = [lbl for lbl, var in zip(labels, np.var(states, axis=0)) if var < 1e-12]
        if stuck:
            diagnostics['warnings'].append(
                f"Parameter(s) never moved: {', '.join(stuck)}"
            )

    for lbl, rate in zip(labels, np.atleast_1d(acceptance)):
        if np.isfinite(rate) and rate < 0.10:
            diagnostics['warnings'].append(
                f"Acceptance rate for {lbl} is {rate:.1%} (< 10%) - consider a smaller step size"
            )

    diagnostics['info'].append(f"Total records: {states.shape[0]}")
    diagnostics['info'].append(f"Number of parameters: {states.shape[1]}")

    return diagnostics


def print_diagnostics(diagnostics: Dict[str, Any]) -> None:
    """Report diagnostics from diagnose_trajectory through the package logger."""
    if diagnostics['issues']:
        logger.error("[ERROR] ISSUES:")
        for issue in diagnostics['issues']:
            logger.error(f"  - {issue}")

    if diagnostics['warnings']:
        logger.warning("[WARN] WARNINGS:")
        for warning in diagnostics['warnings']:
            logger.warning(f"  - {warning}")

    if diagnostics['info']:
        logger.info("[INFO] INFO:")
        for info in diagnostics['info']:
            logger.info(f"  - {info}")

    if not diagnostics['issues'] and not diagnostics['warnings']:
        logger.info("[OK] No issues detected")
