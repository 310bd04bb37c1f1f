"""
Marginal likelihood from the full observation covariance.

y ~ N(0, Σ) with Σ_ij = q/(1-a²) a^|i-j| + r δ_ij. O(n²) memory and O(n³)
time, so this is only meant as an independent reference for short series.
"""

import numpy as np
from scipy.linalg import toeplitz
from scipy.stats import multivariate_normal

from ar1_ssm.models.params import as_observations, check_structural, stationary_variance


def observation_covariance(n: int, a: float, q: float, r: float) -> np.ndarray:
    """Covariance matrix of (y_0, ..., y_{n-1})."""
    check_structural(a, q, r)
    lags = np.arange(n)
    cov = toeplitz(stationary_variance(a, q) * a ** lags)
    cov[np.diag_indices(n)] += r
    return cov


def covariance_marginal_nll(y, a: float, q: float, r: float) -> float:
    y = as_observations(y)
    cov = observation_covariance(len(y), a, q, r)
    return float(-multivariate_normal.logpdf(y, mean=np.zeros(len(y)), cov=cov))
