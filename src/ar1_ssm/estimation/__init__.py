"""Maximum likelihood estimation."""

from ar1_ssm.estimation.mle import (
    VarianceMode,
    fit_marginal,
    fit_joint,
    fit_model,
    compare_approaches,
    make_objective,
)

__all__ = [
    "VarianceMode",
    "fit_marginal",
    "fit_joint",
    "fit_model",
    "compare_approaches",
    "make_objective",
]
