"""
AR(1) State-Space Likelihoods
=============================

Negative log-likelihoods of the linear Gaussian AR(1) plus noise model

    x_t = a x_{t-1} + w_t,  w_t ~ N(0, q)
    y_t = x_t + v_t,        v_t ~ N(0, r)

for use inside a numerical optimizer.

Main components:
- likelihood: joint (state-augmented) and marginal (Kalman) evaluators
- models: parameters, results and simulation
- estimation: maximum likelihood fitting

Example usage:
    >>> from ar1_ssm import kalman_marginal_nll, state_augmented_nll
    >>> kalman_marginal_nll([0.5, 0.3, -0.1, 0.4], a=0.7, q=1.0, r=0.5)
"""

__version__ = "0.1.0"

from ar1_ssm.exceptions import (
    DomainError,
    InvalidScale,
    NonStationaryCoefficient,
    EmptySequence,
    InvalidObservation,
)
from ar1_ssm.likelihood import (
    log_density,
    state_augmented_nll,
    state_augmented_nll_log,
    kalman_filter,
    kalman_marginal_nll,
    kalman_marginal_nll_log,
    laplace_marginal_nll,
    covariance_marginal_nll,
)
from ar1_ssm.models import AR1Params, AR1Model, FitResult
from ar1_ssm.estimation import VarianceMode, fit_marginal, fit_joint, fit_model

__all__ = [
    "__version__",
    # Errors
    "DomainError",
    "InvalidScale",
    "NonStationaryCoefficient",
    "EmptySequence",
    "InvalidObservation",
    # Likelihoods
    "log_density",
    "state_augmented_nll",
    "state_augmented_nll_log",
    "kalman_filter",
    "kalman_marginal_nll",
    "kalman_marginal_nll_log",
    "laplace_marginal_nll",
    "covariance_marginal_nll",
    # Models
    "AR1Params",
    "AR1Model",
    "FitResult",
    # Estimation
    "VarianceMode",
    "fit_marginal",
    "fit_joint",
    "fit_model",
]
