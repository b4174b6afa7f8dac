"""
The :mod:`larsen_lm.exceptions` module includes all custom warnings and error
classes used across the package.
"""
# License: BSD 3 clause

from sklearn.exceptions import ConvergenceWarning

__all__ = ['NumericalInstabilityError',
           'InvalidTargetLambdaError',
           'IndexOutOfRangeError',
           'NotInitializedError',
           'ConvergenceWarning']


class NumericalInstabilityError(ArithmeticError):
    """Raised when the active set becomes linearly dependent.

    This happens when a Cholesky pivot is non-positive (or negligible
    compared to the squared norm of the entering column), or when the
    covariance of the active variables cannot be solved against. The
    solve is aborted; increasing the ridge weight usually helps.
    """


class InvalidTargetLambdaError(ValueError):
    """Raised when a LASSO target lies outside the span of the path.

    Either the target is negative, fewer than two path entries exist when
    interpolating, or the target is not bracketed by the last two recorded
    regularization values.
    """


class IndexOutOfRangeError(IndexError):
    """Raised when a variable index or active-set position is out of range."""


class NotInitializedError(RuntimeError):
    """Raised when a solver is used before :meth:`LarsSolver.initialize`."""
