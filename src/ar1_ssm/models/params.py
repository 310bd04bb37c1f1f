"""
Parameter and result dataclasses for the AR(1) state-space model.
"""

from dataclasses import dataclass
from typing import Optional
import numpy as np
import pandas as pd

from ar1_ssm.exceptions import (
    EmptySequence,
    InvalidObservation,
    InvalidScale,
    NonStationaryCoefficient,
)


def as_numeric(values) -> np.ndarray:
    """
    Copy a sequence into a fresh 1-D array.

    Integer and boolean input is promoted to float; float and complex dtypes
    are kept so that complex-step derivatives pass through the evaluators.
    """
    arr = np.array(values).ravel()
    if arr.dtype.kind in "biu":
        arr = arr.astype(float)
    return arr


def as_observations(y) -> np.ndarray:
    """
    Copy an observation sequence into a fresh 1-D numeric array.

    Raises
    ------
    EmptySequence
        If the sequence has no elements.
    InvalidObservation
        If any observation is NaN or infinite.
    """
    y_arr = as_numeric(y)
    if y_arr.size == 0:
        raise EmptySequence("observation sequence must have length >= 1")
    if not np.all(np.isfinite(y_arr)):
        raise InvalidObservation("observations must be finite")
    return y_arr


def check_structural(a: float, q: float, r: float) -> None:
    """
    Validate (a, q, r) against the model domain.

    Only the real parts are checked, so complex-step perturbations of a valid
    point pass.

    Raises
    ------
    InvalidScale
        If q or r is not strictly positive and finite.
    NonStationaryCoefficient
        If |a| >= 1 (or a is not finite).
    """
    for name, value in (("q", q), ("r", r)):
        if not np.isfinite(value) or np.real(value) <= 0.0:
            raise InvalidScale(f"{name} must be finite and > 0, got {value!r}")
    _check_coefficient(a)


def _check_coefficient(a) -> None:
    if not np.isfinite(a) or abs(np.real(a)) >= 1.0:
        raise NonStationaryCoefficient(f"|a| must be < 1, got a={a!r}")


def stationary_variance(a: float, q: float) -> float:
    """Stationary variance q / (1 - a²) of the AR(1) state."""
    _check_coefficient(a)
    return q / (1.0 - a * a)


@dataclass
class AR1Params:
    """
    Structural parameters of the AR(1) plus noise model.

    State equation:  x_t = a x_{t-1} + w_t,  w_t ~ N(0, q)
    Observation:     y_t = x_t + v_t,        v_t ~ N(0, r)
    """
    a: float = 0.5               # AR coefficient
    q: float = 1.0               # State noise variance
    r: float = 1.0               # Observation noise variance

    @classmethod
    def from_log(cls, a: float, log_q: float, log_r: float) -> "AR1Params":
        """Build from log-variances."""
        return cls(a=float(a), q=float(np.exp(log_q)), r=float(np.exp(log_r)))

    @property
    def log_q(self) -> float:
        return float(np.log(self.q))

    @property
    def log_r(self) -> float:
        return float(np.log(self.r))

    @property
    def stationary_variance(self) -> float:
        """Variance of the initial state prior."""
        return stationary_variance(self.a, self.q)

    def validate(self) -> "AR1Params":
        check_structural(self.a, self.q, self.r)
        return self

    def to_dict(self) -> dict:
        return {"a": self.a, "q": self.q, "r": self.r}

    @classmethod
    def from_dict(cls, d: dict) -> "AR1Params":
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


@dataclass
class FitResult:
    """
    Result of a maximum-likelihood fit.
    """
    params: AR1Params                  # Estimated parameters
    states: pd.Series                  # Filtered states or conditional mode
    nll: float                         # Minimized negative log-likelihood
    n_obs: int                         # Number of observations
    n_params: int                      # Number of free structural parameters
    approach: str = "marginal"         # "marginal" or "joint"
    variance_mode: str = "estimated"   # "estimated" or "known"
    converged: bool = True
    n_iter: int = 0
    message: Optional[str] = None

    @property
    def aic(self) -> float:
        return 2.0 * self.nll + 2.0 * self.n_params

    @property
    def bic(self) -> float:
        return 2.0 * self.nll + self.n_params * np.log(self.n_obs)

    def summary(self) -> str:
        """Generate text summary."""
        lines = [
            f"Approach: {self.approach} ({self.variance_mode} variances)",
            f"Parameters:",
            f"  a       = {self.params.a:.6f}",
            f"  q       = {self.params.q:.6g}",
            f"  r       = {self.params.r:.6g}",
            f"",
            f"Fit:",
            f"  NLL     = {self.nll:.4f}",
            f"  AIC     = {self.aic:.2f}",
            f"  BIC     = {self.bic:.2f}",
            f"  n       = {self.n_obs}",
            f"  converged = {self.converged} ({self.n_iter} iterations)",
        ]
        return "\n".join(lines)
