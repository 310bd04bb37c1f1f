"""
Log-density of a scalar normal distribution.
"""

import numpy as np

from ar1_ssm.exceptions import InvalidScale

LOG_2PI = float(np.log(2.0 * np.pi))


def _check_scale(value, name: str) -> None:
    arr = np.asarray(value)
    if not np.all(np.isfinite(arr)) or np.any(np.real(arr) <= 0.0):
        raise InvalidScale(f"{name} must be finite and > 0, got {value!r}")


def log_density(x, mean, sd):
    """
    Log of the N(mean, sd²) density evaluated at x.

    Parameters
    ----------
    x : float or np.ndarray
        Evaluation point(s)
    mean : float or np.ndarray
        Mean (broadcast against x)
    sd : float or np.ndarray
        Standard deviation, strictly positive

    Returns
    -------
    float or np.ndarray
        -0.5*log(2π) - log(sd) - 0.5*((x - mean)/sd)²

    Raises
    ------
    InvalidScale
        If any sd is <= 0 or not finite.
    """
    _check_scale(sd, "sd")
    z = (x - mean) / sd
    return -0.5 * LOG_2PI - np.log(sd) - 0.5 * z * z


def log_density_var(x, mean, var):
    """Same as ``log_density`` but parameterized by the variance."""
    _check_scale(var, "var")
    resid = x - mean
    return -0.5 * (LOG_2PI + np.log(var) + resid * resid / var)
