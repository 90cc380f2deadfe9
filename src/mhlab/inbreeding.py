"""
Inbreeding Model - unnormalized log posterior of (f, p)

Model:
    f ~ Beta(alpha_f, beta_f)                  [inbreeding coefficient]
    p ~ Beta(alpha_p, beta_p)                  [allele frequency]
    (n_AA, n_Aa, n_aa) ~ Multinomial(n, (P_AA, P_Aa, P_aa))

with genotype probabilities under inbreeding:
    P_AA = f p + (1 - f) p^2
    P_Aa = (1 - f) 2 p (1 - p)
    P_aa = f (1 - p) + (1 - f) (1 - p)^2

The multinomial coefficient and the Beta normalizers are left out: they
cancel in every Metropolis-Hastings ratio.
"""

from functools import lru_cache
from typing import NamedTuple

import jax.numpy as jnp


class CountData(NamedTuple):
    """Observed genotype counts, fixed for a run."""
    n_AA: int
    n_Aa: int
    n_aa: int


class PriorHyperparameters(NamedTuple):
    """Beta prior hyperparameters; all ones is the uniform prior."""
    alpha_f: float = 1.0
    beta_f: float = 1.0
    alpha_p: float = 1.0
    beta_p: float = 1.0


class LogDensityResult(NamedTuple):
    """
    Tagged log-density value.

    in_domain is False when (f, p) lies outside (0, 1) x (0, 1), or when the
    density is not finite there. value is -inf in that case and must not be
    used; samplers reject such proposals without looking at it.
    """
    value: jnp.ndarray
    in_domain: jnp.ndarray


UNIFORM_PRIOR = PriorHyperparameters()


def genotype_probabilities(f, p):
    """(P_AA, P_Aa, P_aa) for inbreeding coefficient f and allele frequency p."""
    q = 1.0 - p
    prob_AA = f * p + (1.0 - f) * p ** 2
    prob_Aa = (1.0 - f) * 2.0 * p * q
    prob_aa = f * q + (1.0 - f) * q ** 2
    return prob_AA, prob_Aa, prob_aa


def log_density(counts, f, p, priors=UNIFORM_PRIOR) -> LogDensityResult:
    """
    Unnormalized log posterior of (f, p) given genotype counts.

    Never raises for out-of-domain (f, p): the result is tagged instead. Works
    eagerly and under jax.jit.

    Args:
        counts: (n_AA, n_Aa, n_aa)
        f: Inbreeding coefficient
        p: Allele frequency
        priors: (alpha_f, beta_f, alpha_p, beta_p)

    Returns:
        LogDensityResult(value, in_domain)
    """
    n_AA, n_Aa, n_aa = counts
    alpha_f, beta_f, alpha_p, beta_p = priors

    f = jnp.asarray(f)
    p = jnp.asarray(p)
    in_domain = (f > 0.0) & (f < 1.0) & (p > 0.0) & (p < 1.0)

    # Evaluate at an interior point when out of domain so no log sees a
    # non-positive argument; the value is discarded below anyway.
    f_safe = jnp.where(in_domain, f, 0.5)
    p_safe = jnp.where(in_domain, p, 0.5)
    prob_AA, prob_Aa, prob_aa = genotype_probabilities(f_safe, p_safe)

    log_prior = ((alpha_f - 1.0) * jnp.log(f_safe)
                 + (beta_f - 1.0) * jnp.log1p(-f_safe)
                 + (alpha_p - 1.0) * jnp.log(p_safe)
                 + (beta_p - 1.0) * jnp.log1p(-p_safe))
    log_lik = (n_AA * jnp.log(prob_AA)
               + n_Aa * jnp.log(prob_Aa)
               + n_aa * jnp.log(prob_aa))
    value = log_prior + log_lik

    valid = in_domain & jnp.isfinite(value)
    return LogDensityResult(jnp.where(valid, value, -jnp.inf), valid)


@lru_cache(maxsize=64)
def inbreeding_log_density_fn(counts: CountData, priors: PriorHyperparameters):
    """
    Log density over the packed state [f, p] for the block-MH engine.

    Cached per (counts, priors) so repeated runs on the same data reuse one
    function object, and therefore one compiled kernel.
    """
    def log_density_fn(state):
        return log_density(counts, state[0], state[1], priors)

    return log_density_fn
