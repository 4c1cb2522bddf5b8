"""Errors raised while setting up or running a simulation.

None of these are retried; each aborts the current simulation.
"""


class FdfdError(Exception):
    """
    Base class for simulation errors
    """

    def __init__(self, value):
        super().__init__(value)
        self.value = value

    def __str__(self):
        return str(self.value)


class InvalidDimensions(FdfdError):
    """Requested grid is non-positive or smaller than the permittivity."""


class DegenerateMode(FdfdError):
    """Source normalization is singular (mode at or near cutoff)."""


class SingularMatrix(FdfdError):
    """The system matrix could not be factorized."""


class ShapeMismatch(FdfdError):
    """Sizes of two pipeline stages disagree."""
