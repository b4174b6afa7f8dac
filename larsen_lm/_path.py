"""
Recording of the piecewise-linear regularization path.
"""
# License: BSD 3 clause

import numpy as np

from .exceptions import InvalidTargetLambdaError


class SolutionPath:
    """Append-only sequence of ``(coef, lambda)`` knots.

    Lambdas are non-increasing. The last knot may be moved onto a target
    lambda with :meth:`interpolate_final`.

    Parameters
    ----------
    n_features : int
        Length of every recorded coefficient vector.
    """

    def __init__(self, n_features):
        self.n_features = n_features
        self._coefs = []
        self._lambdas = []

    def __len__(self):
        return len(self._lambdas)

    def clear(self):
        self._coefs = []
        self._lambdas = []

    def record(self, coef, lambda_):
        coef = np.array(coef, dtype=np.float64).ravel()
        if coef.shape[0] != self.n_features:
            raise ValueError('Expected %i coefficients, got %i.'
                             % (self.n_features, coef.shape[0]))
        lambda_ = float(lambda_)
        if self._lambdas and lambda_ > self._lambdas[-1]:
            raise ValueError('Path lambdas must be non-increasing: %.6g '
                             'follows %.6g.' % (lambda_, self._lambdas[-1]))
        self._coefs.append(coef)
        self._lambdas.append(lambda_)

    def interpolate_final(self, target_lambda):
        """Move the last knot onto ``target_lambda``.

        The last coefficient vector is replaced by the point at
        ``target_lambda`` on the segment joining the last two knots, and
        the last lambda by ``target_lambda`` itself.

        Raises
        ------
        InvalidTargetLambdaError
            If fewer than two knots are recorded or ``target_lambda`` is
            not between the last two lambdas.
        """
        if len(self._lambdas) < 2:
            raise InvalidTargetLambdaError(
                'Interpolation needs at least two path entries, got %i.'
                % len(self._lambdas))
        prev_lambda, last_lambda = self._lambdas[-2], self._lambdas[-1]
        if not last_lambda <= target_lambda <= prev_lambda:
            raise InvalidTargetLambdaError(
                'Target lambda %.6g is not between the last two path '
                'lambdas %.6g and %.6g.'
                % (target_lambda, prev_lambda, last_lambda))

        if prev_lambda == last_lambda:
            ss = 1.
        else:
            # interpolation factor 0 <= ss <= 1
            ss = (prev_lambda - target_lambda) / (prev_lambda - last_lambda)
        self._coefs[-1] = ((1 - ss) * self._coefs[-2]
                           + ss * self._coefs[-1])
        self._lambdas[-1] = float(target_lambda)

    def settle_final(self, target_lambda, atol):
        """Lower the last lambda onto ``target_lambda``.

        Used when the path is flat below its last knot, so the last
        coefficients are also the solution at ``target_lambda``.

        Raises
        ------
        InvalidTargetLambdaError
            If no knot is recorded or the last lambda is not within
            ``atol`` above ``target_lambda``.
        """
        if not self._lambdas:
            raise InvalidTargetLambdaError('The path has no knots.')
        gap = self._lambdas[-1] - target_lambda
        if not 0 <= gap <= atol:
            raise InvalidTargetLambdaError(
                'Path ends at lambda %.6g, which is not within %.3g above '
                'the target %.6g.' % (self._lambdas[-1], atol, target_lambda))
        self._lambdas[-1] = float(target_lambda)

    @property
    def coefs(self):
        """Recorded coefficients, shape (n_knots, n_features)."""
        if not self._coefs:
            return np.zeros((0, self.n_features))
        return np.vstack(self._coefs)

    @property
    def lambdas(self):
        return np.array(self._lambdas, dtype=np.float64)
