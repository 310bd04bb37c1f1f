"""State-space model definitions."""

from ar1_ssm.models.params import AR1Params, FitResult
from ar1_ssm.models.ar1 import AR1Model

__all__ = [
    "AR1Params",
    "FitResult",
    "AR1Model",
]
