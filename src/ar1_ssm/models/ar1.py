"""
AR(1) plus noise state-space model.

State equation:  x_t = a x_{t-1} + w_t,  w_t ~ N(0, q)
Observation:     y_t = x_t + v_t,        v_t ~ N(0, r)
Initial state:   x_0 ~ N(0, q / (1 - a²))
"""

import numpy as np
from typing import Optional, Tuple

from ar1_ssm.models.params import AR1Params


class AR1Model:
    """
    Linear Gaussian AR(1) model observed with noise.
    """

    def __init__(self, params: AR1Params):
        self.params = params.validate()

    def simulate(
        self,
        n_steps: int,
        n_paths: int = 1,
        seed: Optional[int] = None,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Simulate state and observation paths.

        Parameters
        ----------
        n_steps : int
            Number of time steps
        n_paths : int
            Number of independent paths
        seed : int, optional
            Random seed

        Returns
        -------
        x, y : np.ndarray
            States and observations, shape (n_paths, n_steps)
        """
        rng = np.random.default_rng(seed)
        a, q, r = self.params.a, self.params.q, self.params.r

        x = np.zeros((n_paths, n_steps))
        x[:, 0] = np.sqrt(self.params.stationary_variance) * rng.standard_normal(n_paths)
        for t in range(1, n_steps):
            x[:, t] = a * x[:, t - 1] + np.sqrt(q) * rng.standard_normal(n_paths)

        y = x + np.sqrt(r) * rng.standard_normal((n_paths, n_steps))
        return x, y

    @staticmethod
    def param_names(known_variance: bool = False) -> list:
        """Names of free parameters."""
        return ["a"] if known_variance else ["a", "q", "r"]

    def pack_params(self, known_variance: bool = False) -> np.ndarray:
        """
        Pack parameters into an unconstrained vector for optimization.

        Transforms:
        - a -> arctanh(a) to enforce (-1, 1)
        - q, r -> log(q), log(r) to enforce positivity
        """
        p = self.params
        z_a = np.arctanh(np.clip(p.a, -0.999, 0.999))
        if known_variance:
            return np.array([z_a])
        return np.array([z_a, p.log_q, p.log_r])

    @staticmethod
    def unpack_params(
        z: np.ndarray,
        q: Optional[float] = None,
        r: Optional[float] = None,
    ) -> AR1Params:
        """
        Unpack an unconstrained vector to AR1Params.

        With a single element, z holds arctanh(a) and the fixed (q, r) are used.
        Otherwise z = [arctanh(a), log(q), log(r)].
        """
        a = float(np.tanh(z[0]))
        if len(z) == 1:
            if q is None or r is None:
                raise ValueError("known q and r are required for a one-element vector")
            return AR1Params(a=a, q=float(q), r=float(r))
        return AR1Params.from_log(a, z[1], z[2])

    @staticmethod
    def get_initial_params(y: np.ndarray) -> AR1Params:
        """
        Initial estimates from the sample autocovariances of y.

        For this model Var(y) = s + r, Cov(y_t, y_{t-1}) = a s and
        Cov(y_t, y_{t-2}) = a² s, with s = q / (1 - a²).
        """
        y = np.asarray(y, dtype=float)
        y = y - y.mean()
        n = len(y)
        var_y = float(np.var(y)) if n > 1 else 1.0
        var_y = max(var_y, 1e-8)

        if n < 4:
            return AR1Params(a=0.5, q=0.375 * var_y, r=0.5 * var_y)

        c1 = float(np.mean(y[1:] * y[:-1]))
        c2 = float(np.mean(y[2:] * y[:-2]))
        a = c2 / c1 if abs(c1) > 1e-12 else 0.0
        a = float(np.clip(a, -0.95, 0.95))

        s = c1 / a if abs(a) > 1e-3 else 0.5 * var_y
        s = float(np.clip(s, 0.05 * var_y, 0.95 * var_y))

        return AR1Params(a=a, q=max(s * (1.0 - a * a), 1e-8), r=max(var_y - s, 1e-8))
