"""
State-augmented (joint) likelihood.

The latent path x is treated as a vector of free parameters and the negative
log-likelihood is the sum of transition, observation and initial-prior terms:

    -log p(x_{1:n-1} | x_0) - log p(y | x) - log p(x_0)
"""

import numpy as np

from ar1_ssm.likelihood.density import log_density
from ar1_ssm.models.params import (
    as_numeric,
    as_observations,
    check_structural,
    stationary_variance,
)


def state_augmented_nll(y, a: float, q: float, r: float, x) -> float:
    """
    Joint NLL of a trial state path and the observations.

    Parameters
    ----------
    y : array-like
        Observations, length n >= 1
    a : float
        AR coefficient, |a| < 1
    q : float
        State noise variance
    r : float
        Observation noise variance
    x : array-like
        Trial state path, length n

    Returns
    -------
    float
        Negative log-likelihood of (x, y)

    Raises
    ------
    EmptySequence, InvalidObservation, InvalidScale, NonStationaryCoefficient
    """
    y = as_observations(y)
    x = as_numeric(x)
    if x.shape != y.shape:
        raise ValueError(f"state path has length {x.size}, observations have {y.size}")
    check_structural(a, q, r)

    # State equation (empty for n == 1)
    nll = -np.sum(log_density(x[1:], a * x[:-1], np.sqrt(q)))

    # Observation equation
    nll -= np.sum(log_density(y, x, np.sqrt(r)))

    # Prior for initial state
    nll -= log_density(x[0], 0.0, np.sqrt(stationary_variance(a, q)))

    return nll


def state_augmented_nll_log(y, a: float, log_q: float, log_r: float, x) -> float:
    """``state_augmented_nll`` with log-variances, for unconstrained optimization."""
    return state_augmented_nll(y, a, np.exp(log_q), np.exp(log_r), x)
