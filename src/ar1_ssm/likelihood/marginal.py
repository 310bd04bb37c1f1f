"""
Kalman-filter (marginal) likelihood.

For the model:
    State:  x_t = a x_{t-1} + w_t,  w_t ~ N(0, q)
    Obs:    y_t = x_t + v_t,        v_t ~ N(0, r)

the latent path is integrated out by the filter recursion started at the
stationary prior x_0 ~ N(0, q / (1 - a²)).
"""

import numpy as np
from typing import Tuple

from ar1_ssm.exceptions import InvalidScale
from ar1_ssm.likelihood.density import log_density_var
from ar1_ssm.models.params import AR1Params, as_observations, check_structural


def kalman_filter(
    y,
    params: AR1Params,
) -> Tuple[float, np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Scalar Kalman filter with stationary initialization.

    Parameters
    ----------
    y : array-like
        Observations, length n >= 1
    params : AR1Params
        Model parameters (a, q, r)

    Returns
    -------
    nll : float
        Negative log-likelihood of the observations
    x_filt : np.ndarray
        Filtered states E[x_t | y_{0:t}]
    x_pred : np.ndarray
        Predicted states E[x_t | y_{0:t-1}]
    P_filt : np.ndarray
        Filtered variances Var[x_t | y_{0:t}]
    P_pred : np.ndarray
        Predicted variances Var[x_t | y_{0:t-1}]
    """
    y = as_observations(y)
    a, q, r = params.a, params.q, params.r
    check_structural(a, q, r)

    # Buffers follow the input type (float, or complex for complex-step derivatives)
    dtype = np.result_type(y, a, q, r)
    n = len(y)
    x_filt = np.zeros(n, dtype=dtype)
    x_pred = np.zeros(n, dtype=dtype)
    P_filt = np.zeros(n, dtype=dtype)
    P_pred = np.zeros(n, dtype=dtype)

    # Stationary prior
    x = 0.0
    P = params.stationary_variance
    nll = 0.0

    for t in range(n):
        x_pred[t] = x
        P_pred[t] = P

        # === MEASUREMENT UPDATE ===
        v = y[t] - x
        S = P + r
        if not np.real(S) > 0.0:
            raise InvalidScale(f"innovation variance S={S!r} at t={t}")
        K = P / S

        x = x + K * v
        P = (1.0 - K) * P
        x_filt[t] = x
        P_filt[t] = P

        # -log N(y_t; x_pred, S) = 0.5 * (log(2πS) + v²/S)
        nll -= log_density_var(y[t], x_pred[t], S)

        # === TIME UPDATE ===
        x = a * x
        P = a * a * P + q

    return nll, x_filt, x_pred, P_filt, P_pred


def kalman_marginal_nll(y, a: float, q: float, r: float) -> float:
    """
    Marginal NLL of the observations with the latent path integrated out.

    Raises
    ------
    EmptySequence, InvalidObservation, InvalidScale, NonStationaryCoefficient
    """
    nll, _, _, _, _ = kalman_filter(y, AR1Params(a=a, q=q, r=r))
    return nll


def kalman_marginal_nll_log(y, a: float, log_q: float, log_r: float) -> float:
    """``kalman_marginal_nll`` with log-variances."""
    return kalman_marginal_nll(y, a, np.exp(log_q), np.exp(log_r))
