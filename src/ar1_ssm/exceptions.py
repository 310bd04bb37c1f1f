"""
Error taxonomy for likelihood evaluation.

All errors derive from ``DomainError`` (itself a ``ValueError``) so that an
optimizer can reject a trial parameter vector with a single ``except`` clause.
"""


class DomainError(ValueError):
    """An argument lies outside the domain of the model."""


class InvalidScale(DomainError):
    """A variance or standard deviation is not strictly positive."""


class NonStationaryCoefficient(DomainError):
    """AR coefficient with |a| >= 1: the stationary variance is undefined."""


class EmptySequence(DomainError):
    """Observation sequence of length zero."""


class InvalidObservation(DomainError):
    """Observation that is NaN or infinite."""
