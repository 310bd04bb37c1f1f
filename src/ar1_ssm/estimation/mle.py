"""
Maximum likelihood estimation for the AR(1) state-space model.

Two approaches, both minimizing an NLL over unconstrained parameters with
scipy.optimize (gradients by finite differences):

- marginal: Kalman-filter likelihood of the observations.
- joint: state-augmented likelihood with the state path integrated out as
  random effects (Laplace, exact for this model).

Two variance modes:

- estimated: log(q) and log(r) are free parameters.
- known: q and r are fixed data supplied by the caller; only a is estimated.
"""

from enum import Enum
import numpy as np
import pandas as pd
from typing import Callable, List, Optional, Tuple
from scipy.optimize import minimize

from ar1_ssm.exceptions import DomainError
from ar1_ssm.likelihood.laplace import conditional_mode, laplace_marginal_nll
from ar1_ssm.likelihood.marginal import kalman_filter, kalman_marginal_nll
from ar1_ssm.models.ar1 import AR1Model
from ar1_ssm.models.params import AR1Params, FitResult, as_observations
from ar1_ssm.utils.logging import get_logger

logger = get_logger(__name__)

# Objective value returned for parameter vectors outside the model domain
PENALTY = 1e10

BOUNDED_METHODS = {"l-bfgs-b", "nelder-mead", "powell", "tnc", "slsqp", "trust-constr"}

# Bounds on arctanh(a), log(q), log(r)
BOUNDS = [
    (-3.8, 3.8),
    (-30.0, 10.0),
    (-30.0, 10.0),
]


class VarianceMode(str, Enum):
    ESTIMATED = "estimated"
    KNOWN = "known"


def _prepare(y) -> Tuple[np.ndarray, pd.Index]:
    if isinstance(y, pd.Series):
        y = y.dropna().astype(float)
        return as_observations(y.values), y.index
    y_arr = as_observations(y)
    return y_arr, pd.RangeIndex(len(y_arr))


def _resolve_mode(
    variance_mode,
    q: Optional[float],
    r: Optional[float],
) -> VarianceMode:
    mode = VarianceMode(variance_mode)
    if mode is VarianceMode.KNOWN and (q is None or r is None):
        raise ValueError("known variance mode requires both q and r")
    return mode


def make_objective(
    evaluate: Callable[..., float],
    y: np.ndarray,
    mode: VarianceMode,
    q: Optional[float] = None,
    r: Optional[float] = None,
) -> Callable[[np.ndarray], float]:
    """
    Wrap an evaluator ``evaluate(y, a, q, r)`` as an objective of the
    unconstrained vector z.

    Domain errors reject the trial vector with ``PENALTY``; any other
    exception propagates.
    """
    fixed_q = q if mode is VarianceMode.KNOWN else None
    fixed_r = r if mode is VarianceMode.KNOWN else None

    def neg_loglik(z: np.ndarray) -> float:
        params = AR1Model.unpack_params(z, fixed_q, fixed_r)
        try:
            value = evaluate(y, params.a, params.q, params.r)
        except DomainError as e:
            logger.debug(f"Rejected trial {params.to_dict()}: {e}")
            return PENALTY
        if not np.isfinite(value):
            return PENALTY
        return value

    return neg_loglik


def _minimize(
    objective: Callable[[np.ndarray], float],
    z0: np.ndarray,
    method: str,
    maxiter: int,
):
    options = {"maxiter": maxiter}
    if method.lower() in BOUNDED_METHODS:
        return minimize(objective, z0, method=method, bounds=BOUNDS[: len(z0)], options=options)
    return minimize(objective, z0, method=method, options=options)


def _start(
    y: np.ndarray,
    mode: VarianceMode,
    init_params: Optional[AR1Params],
) -> np.ndarray:
    if init_params is None:
        init_params = AR1Model.get_initial_params(y)
    return AR1Model(init_params).pack_params(known_variance=mode is VarianceMode.KNOWN)


def fit_marginal(
    y,
    variance_mode: str = "estimated",
    q: Optional[float] = None,
    r: Optional[float] = None,
    method: str = "L-BFGS-B",
    maxiter: int = 2000,
    init_params: Optional[AR1Params] = None,
    verbose: bool = True,
) -> FitResult:
    """
    Fit by minimizing the Kalman-filter marginal NLL.

    Parameters
    ----------
    y : pd.Series or array-like
        Observations
    variance_mode : str
        "estimated" (a, log q, log r free) or "known" (only a free)
    q, r : float, optional
        Fixed variances, required in known mode
    method : str
        scipy.optimize.minimize method
    maxiter : int
        Maximum iterations
    init_params : AR1Params, optional
        Starting point (default: moment estimates from y)
    verbose : bool
        Log the estimates

    Returns
    -------
    FitResult
        Estimates with the filtered states
    """
    y_arr, index = _prepare(y)
    mode = _resolve_mode(variance_mode, q, r)

    if verbose:
        logger.info(f"Fitting marginal likelihood ({mode.value} variances), n={len(y_arr)}")

    objective = make_objective(kalman_marginal_nll, y_arr, mode, q, r)
    z0 = _start(y_arr, mode, init_params)
    result = _minimize(objective, z0, method, maxiter)

    params = AR1Model.unpack_params(result.x, q, r)
    nll, x_filt, _, _, _ = kalman_filter(y_arr, params)

    fit = FitResult(
        params=params,
        states=pd.Series(x_filt, index=index, name="x_filt"),
        nll=nll,
        n_obs=len(y_arr),
        n_params=len(z0),
        approach="marginal",
        variance_mode=mode.value,
        converged=bool(result.success),
        n_iter=int(getattr(result, "nit", 0)),
        message=str(result.message),
    )
    if verbose:
        _log_fit(fit)
    return fit


def fit_joint(
    y,
    variance_mode: str = "estimated",
    q: Optional[float] = None,
    r: Optional[float] = None,
    method: str = "L-BFGS-B",
    maxiter: int = 2000,
    init_params: Optional[AR1Params] = None,
    verbose: bool = True,
) -> FitResult:
    """
    Fit through the state-augmented likelihood.

    The states are random effects: the joint density is integrated over x
    (Laplace, exact here) and the result minimized over (a, log q, log r), or
    over a alone with known variances. Maximizing the joint density over x as
    well would bias a and is degenerate once q and r are free.

    Parameters are as in ``fit_marginal``. The returned states are the
    conditional mode of x at the estimates.
    """
    y_arr, index = _prepare(y)
    mode = _resolve_mode(variance_mode, q, r)

    if verbose:
        logger.info(f"Fitting joint likelihood ({mode.value} variances), n={len(y_arr)}")

    objective = make_objective(laplace_marginal_nll, y_arr, mode, q, r)
    z0 = _start(y_arr, mode, init_params)
    result = _minimize(objective, z0, method, maxiter)

    params = AR1Model.unpack_params(result.x, q, r)
    nll = laplace_marginal_nll(y_arr, params.a, params.q, params.r)
    x_hat = conditional_mode(y_arr, params.a, params.q, params.r)

    fit = FitResult(
        params=params,
        states=pd.Series(x_hat, index=index, name="x_mode"),
        nll=nll,
        n_obs=len(y_arr),
        n_params=len(z0),
        approach="joint",
        variance_mode=mode.value,
        converged=bool(result.success),
        n_iter=int(getattr(result, "nit", 0)),
        message=str(result.message),
    )
    if verbose:
        _log_fit(fit)
    return fit


def fit_model(y, approach: str = "marginal", **fit_kwargs) -> FitResult:
    """Dispatch to ``fit_marginal`` or ``fit_joint``."""
    if approach.lower() == "marginal":
        return fit_marginal(y, **fit_kwargs)
    elif approach.lower() == "joint":
        return fit_joint(y, **fit_kwargs)
    raise ValueError(f"Unknown approach: {approach}")


def compare_approaches(
    y,
    approaches: List[str] = ["marginal", "joint"],
    **fit_kwargs,
) -> pd.DataFrame:
    """
    Fit with each approach and tabulate the estimates.

    Returns
    -------
    pd.DataFrame
        One row per approach with a, q, r, NLL, AIC and BIC
    """
    rows = []
    for approach in approaches:
        fit = fit_model(y, approach=approach, verbose=False, **fit_kwargs)
        rows.append({
            "Approach": approach,
            "a": fit.params.a,
            "q": fit.params.q,
            "r": fit.params.r,
            "NLL": fit.nll,
            "AIC": fit.aic,
            "BIC": fit.bic,
            "converged": fit.converged,
        })
    return pd.DataFrame(rows)


def _log_fit(fit: FitResult) -> None:
    logger.info(f"{fit.approach} estimates ({fit.variance_mode} variances):")
    logger.info(f"  a   = {fit.params.a:.6f}")
    logger.info(f"  q   = {fit.params.q:.6g}")
    logger.info(f"  r   = {fit.params.r:.6g}")
    logger.info(f"  NLL = {fit.nll:.4f}")
    if not fit.converged:
        logger.warning(f"Optimizer did not converge: {fit.message}")
