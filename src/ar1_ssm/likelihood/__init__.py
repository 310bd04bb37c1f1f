"""
Likelihood evaluators for the AR(1) state-space model.

Provides:
- log_density: scalar normal log-density
- state_augmented_nll: joint NLL of (states, observations)
- kalman_marginal_nll: marginal NLL via the Kalman filter
- laplace_marginal_nll: marginal NLL by integrating the joint over the states
- covariance_marginal_nll: marginal NLL from the dense covariance (reference)
"""

from ar1_ssm.likelihood.density import log_density, log_density_var
from ar1_ssm.likelihood.joint import state_augmented_nll, state_augmented_nll_log
from ar1_ssm.likelihood.marginal import (
    kalman_filter,
    kalman_marginal_nll,
    kalman_marginal_nll_log,
)
from ar1_ssm.likelihood.laplace import (
    conditional_mode,
    joint_hessian_banded,
    laplace_marginal_nll,
)
from ar1_ssm.likelihood.dense import covariance_marginal_nll, observation_covariance

__all__ = [
    # Density
    "log_density",
    "log_density_var",
    # Joint
    "state_augmented_nll",
    "state_augmented_nll_log",
    # Kalman
    "kalman_filter",
    "kalman_marginal_nll",
    "kalman_marginal_nll_log",
    # Laplace
    "conditional_mode",
    "joint_hessian_banded",
    "laplace_marginal_nll",
    # Dense reference
    "covariance_marginal_nll",
    "observation_covariance",
]
