"""
Least Angle Regression, LASSO and Elastic Net solution paths.
"""
# License: BSD 3 clause

from ._active_set import ActiveSet
from ._cholesky import (cholesky_delete, cholesky_insert,
                        cholesky_insert_gram, givens_rotation)
from ._design import DesignCache
from ._least_angle import (LarsEN, LarsSolver, LarsStep, lars_path,
                           sign_scaled_covariance)
from ._path import SolutionPath
from .exceptions import (ConvergenceWarning, IndexOutOfRangeError,
                         InvalidTargetLambdaError, NotInitializedError,
                         NumericalInstabilityError)

__version__ = '0.1'

__all__ = ['ActiveSet',
           'ConvergenceWarning',
           'DesignCache',
           'IndexOutOfRangeError',
           'InvalidTargetLambdaError',
           'LarsEN',
           'LarsSolver',
           'LarsStep',
           'NotInitializedError',
           'NumericalInstabilityError',
           'SolutionPath',
           'cholesky_delete',
           'cholesky_insert',
           'cholesky_insert_gram',
           'givens_rotation',
           'lars_path',
           'sign_scaled_covariance']
