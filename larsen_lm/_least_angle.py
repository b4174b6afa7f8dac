"""
Least Angle Regression, LASSO and Elastic Net paths computed with an
incrementally maintained Cholesky factor of the active covariance.
"""
# License: BSD 3 clause

from collections import namedtuple
import sys
import warnings

import numpy as np
from scipy import linalg
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.utils import check_array, check_consistent_length, column_or_1d
from sklearn.utils.validation import check_is_fitted, check_X_y

from ._active_set import ActiveSet
from ._cholesky import (DEFAULT_PIVOT_EPS, SOLVE_TRIANGULAR_ARGS,
                        cholesky_delete, cholesky_insert_gram)
from ._design import DesignCache
from ._path import SolutionPath
from .exceptions import (ConvergenceWarning, InvalidTargetLambdaError,
                         NotInitializedError, NumericalInstabilityError)

#: Largest relative gap between the last knot and the target that is
#: treated as rounding residue.
LAMBDA_RESIDUE_RTOL = np.sqrt(np.finfo(np.float64).eps)

#: Record passed to the ``callback`` of :class:`LarsSolver` after each step.
LarsStep = namedtuple('LarsStep', ['n_iter', 'added', 'dropped', 'n_active',
                                   'gamma', 'lambda_'])


def sign_scaled_covariance(gram_active, signs):
    """Covariance of the active columns after flipping them by ``signs``.

    Let ``S = diag(signs)``. The flipped columns ``X_A S`` all correlate
    positively with the residual and their covariance is ``S G_A S``, which
    is the elementwise product ``G_A * outer(signs, signs)``.

    The equiangular direction needs ``G_A^{-1} s``. Solving
    ``(S G_A S) u = 1`` gives ``u = S G_A^{-1} S 1 = S G_A^{-1} s``, and
    since ``S S = I`` the direction is ``S u``, i.e. ``u * signs``.
    ``s' G_A^{-1} s`` equals ``1' u = sum(u)``.
    """
    signs = np.asarray(signs)
    return gram_active * np.outer(signs, signs)


class _LarsState:
    """Mutable state of a single run of :meth:`LarsSolver.run`."""

    def __init__(self, design, use_cholesky):
        n_features = design.n_features
        self.coef = np.zeros(n_features)
        self.prediction = np.zeros(design.n_samples)
        self.corr = design.Xty.copy()
        self.active = ActiveSet(n_features)
        # upper triangular; only the leading n_factor block is referenced
        self.R = np.zeros((n_features, n_features)) if use_cholesky else None
        self.n_factor = 0

        self.candidate = int(np.argmax(np.abs(self.corr)))
        self.max_corr = float(np.abs(self.corr[self.candidate]))
        # position in the active set of a variable to drop next iteration
        self.drop_position = None
        self.just_dropped = None


def _add_variable(state, design, eps):
    j = state.candidate
    if state.R is not None:
        active = state.active.indices
        diag = design.covariance([j], [j])[0, 0]
        gram_col = design.covariance(active, [j])[:, 0]
        state.n_factor = cholesky_insert_gram(state.R, state.n_factor,
                                              diag, gram_col, eps=eps)
    state.active.activate(j)
    state.candidate = None
    return j


def _remove_variable(state):
    position = state.drop_position
    if state.R is not None:
        state.n_factor = cholesky_delete(state.R, state.n_factor, position)
    j = state.active.deactivate(position)
    state.drop_position = None
    state.just_dropped = j
    return j


def _equiangular_direction(state, design, eps):
    """Return ``(direction, normalization)`` for the active set.

    ``direction`` is ``normalization * G_A^{-1} s`` with ``s`` the signs of
    the active correlations and ``normalization = (s' G_A^{-1} s)^{-1/2}``.
    """
    active = state.active.indices
    n_active = len(active)
    signs = np.sign(state.corr[active])

    if state.R is not None:
        R = state.R[:n_active, :n_active]
        # G_A^{-1} s = R^{-1} R'^{-1} s
        z = linalg.solve_triangular(R, signs, trans='T', lower=False,
                                    **SOLVE_TRIANGULAR_ARGS)
        least_squares = linalg.solve_triangular(R, z, lower=False,
                                                **SOLVE_TRIANGULAR_ARGS)
        AA = np.dot(signs, least_squares)
    else:
        cov = sign_scaled_covariance(design.covariance(active, active), signs)
        # factored in active order with the pivot test of the incremental
        # factor; flipping signs leaves the pivots unchanged
        factor = np.zeros((n_active, n_active))
        for k in range(n_active):
            cholesky_insert_gram(factor, k, cov[k, k], cov[:k, k], eps=eps)
        u = linalg.cho_solve((factor, False), np.ones(n_active),
                             **SOLVE_TRIANGULAR_ARGS)
        least_squares = u * signs
        AA = np.sum(u)

    if not (np.isfinite(AA) and AA > 0):
        raise NumericalInstabilityError(
            'Non-positive equiangular normalization with an active set of '
            '%i regressors.' % n_active)
    AA = 1. / np.sqrt(AA)
    return AA * least_squares, AA


def _min_positive(values):
    """Replace non-positive or non-finite entries by +inf."""
    values[~(np.isfinite(values) & (values > 0))] = np.inf
    return values


def _entering_step(state, design, direction, normalization, eq_dir, gamma_):
    """Smallest step at which an inactive variable joins the active set.

    Returns ``(gamma_, candidate)``; ``candidate`` is None when no inactive
    variable catches up before ``gamma_``.
    """
    inactive = state.active.inactive()
    if state.just_dropped is not None:
        inactive = inactive[inactive != state.just_dropped]
    if not inactive.size:
        return gamma_, None

    if design.gram is not None:
        corr_eq_dir = np.dot(
            design.covariance(inactive, state.active.indices), direction)
    else:
        corr_eq_dir = np.dot(design.X[:, inactive].T, eq_dir)

    C, AA, Cov = state.max_corr, normalization, state.corr[inactive]
    with np.errstate(divide='ignore', invalid='ignore'):
        g1 = _min_positive((C - Cov) / (AA - corr_eq_dir))
        g2 = _min_positive((C + Cov) / (AA + corr_eq_dir))
    g = np.minimum(g1, g2)

    # argmin keeps the first minimum, i.e. the lowest variable index
    best = int(np.argmin(g))
    if g[best] < gamma_:
        return float(g[best]), int(inactive[best])
    return gamma_, None


def _lasso_step(state, direction, gamma_):
    """Smallest step at which an active coefficient crosses zero.

    Returns ``(gamma_, position)``; ``position`` is the active-set position
    of the variable to drop, or None if no crossing happens before
    ``gamma_``.
    """
    with np.errstate(divide='ignore', invalid='ignore'):
        z = _min_positive(-state.coef[state.active.indices] / direction)
    position = int(np.argmin(z))
    if z[position] < gamma_:
        return float(z[position]), position
    return gamma_, None


def _print_step(step):
    print("%s\t\t%s\t\t%s\t\t%s\t\t%s"
          % (step.n_iter,
             '' if step.added is None else step.added,
             '' if step.dropped is None else step.dropped,
             step.n_active, step.lambda_))


class LarsSolver:
    """Least Angle Regression with optional LASSO and Elastic Net modes.

    The solver keeps a copy of the design matrix and response and traces
    the piecewise-linear path of coefficients as the regularization value
    (the largest absolute correlation with the residual) decreases.

    Parameters
    ----------
    max_iter : int, default=500
        Maximum number of steps. A :class:`ConvergenceWarning` is issued if
        it is reached before the path is complete.
    tol : float, default=1e-10
        The path is complete once the max correlation drops below ``tol``
        times its initial value.
    eps : float, default=1e-12
        Relative threshold for the Cholesky pivots. An entering variable
        whose pivot is below ``eps`` times its squared norm is considered
        linearly dependent on the active set.
    verbose : int, default=0
        Controls output verbosity.
    callback : callable, default=None
        Called with a :data:`LarsStep` after each step.

    Attributes
    ----------
    coef_ : ndarray of shape (n_features,)
        Coefficients at the end of the last run.
    active_ : list of int
        Active variables at the end of the last run, in activation order.
    n_iter_ : int
        Number of steps taken by the last run.

    Examples
    --------
    >>> import numpy as np
    >>> from larsen_lm import LarsSolver
    >>> X = np.array([[1., 0.], [0., 1.], [0., 0.]])
    >>> solver = LarsSolver().initialize(X, [3., 2., 0.])
    >>> np.allclose(solver.run().get_lambda_path(), [3., 2., 0.])
    True
    """

    def __init__(self, *, max_iter=500, tol=1e-10, eps=DEFAULT_PIVOT_EPS,
                 verbose=0, callback=None):
        if max_iter < 0:
            raise ValueError('max_iter must be non-negative, got %r.'
                             % max_iter)
        if tol < 0 or eps < 0:
            raise ValueError('tol and eps must be non-negative, got %r and '
                             '%r.' % (tol, eps))
        self.max_iter = max_iter
        self.tol = tol
        self.eps = eps
        self.verbose = verbose
        self.callback = callback
        self.design_ = None

    @staticmethod
    def _check_target(target_lambda):
        target_lambda = float(target_lambda)
        if not (np.isfinite(target_lambda) and target_lambda >= 0):
            raise InvalidTargetLambdaError(
                'Target lambda must be finite and non-negative, got %r.'
                % target_lambda)
        return target_lambda

    def _check_initialized(self):
        if self.design_ is None:
            raise NotInitializedError(
                'This LarsSolver is not initialized yet. Call initialize '
                'with the data before using it.')

    def initialize(self, X, y, use_cholesky=True, *, target_lambda=None,
                   ridge=None):
        """Load the data and fix the mode of the solver.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Design matrix. Copied.
        y : array-like of shape (n_samples,)
            Response. Copied.
        use_cholesky : bool, default=True
            Maintain a Cholesky factor of the active covariance. If False,
            the full Gram matrix is precomputed instead and the active
            system is solved from it at every step.
        target_lambda : float, default=None
            Enables the LASSO modification. The path stops exactly at this
            regularization value.
        ridge : float, default=None
            Enables the Elastic Net with this ridge weight.

        Returns
        -------
        self : LarsSolver
        """
        X = check_array(X, dtype=np.float64, order='F')
        y = column_or_1d(check_array(y, dtype=np.float64, ensure_2d=False))
        check_consistent_length(X, y)
        if target_lambda is not None:
            target_lambda = self._check_target(target_lambda)
        if ridge is not None and not ridge >= 0:
            raise ValueError('ridge must be non-negative, got %r.' % ridge)

        self.lasso = target_lambda is not None
        self.target_lambda = target_lambda
        self.elastic_net = ridge is not None
        self.ridge = float(ridge) if self.elastic_net else 0.
        self.use_cholesky = bool(use_cholesky)

        self.design_ = DesignCache(X, y, use_gram=not self.use_cholesky,
                                   ridge=self.ridge)
        self.path_ = SolutionPath(X.shape[1])
        return self

    def update_columns(self, indices, new_columns):
        """Replace columns of the design matrix.

        Parameters
        ----------
        indices : sequence of int
            Columns to replace.
        new_columns : array-like of shape (n_samples, len(indices))
            New values of those columns.
        """
        self._check_initialized()
        self.design_.update_columns(indices, new_columns)
        return self

    def set_response(self, y):
        """Replace the response vector."""
        self._check_initialized()
        self.design_.set_response(y)
        return self

    def _hooks(self):
        hooks = []
        if self.verbose > 1:
            hooks.append(_print_step)
        if self.callback is not None:
            hooks.append(self.callback)
        return hooks

    def run(self, target_lambda=None):
        """Trace the path from zero coefficients.

        Parameters
        ----------
        target_lambda : float, default=None
            Overrides the target given to :meth:`initialize`. Only allowed
            in LASSO mode.

        Returns
        -------
        self : LarsSolver
        """
        self._check_initialized()
        if target_lambda is not None:
            if not self.lasso:
                raise ValueError('A target lambda requires LASSO mode; pass '
                                 'target_lambda to initialize.')
            target_lambda = self._check_target(target_lambda)
        else:
            target_lambda = self.target_lambda

        design = self.design_
        state = _LarsState(design, self.use_cholesky)
        path = self.path_
        path.clear()
        path.record(state.coef, state.max_corr)
        threshold = self.tol * state.max_corr
        hooks = self._hooks()

        if self.verbose:
            if self.verbose > 1:
                print("Step\t\tAdded\t\tDropped\t\tActive set size\t\tC")
            else:
                sys.stdout.write('.')
                sys.stdout.flush()

        n_iter = 0
        truncated = False
        while state.max_corr > threshold:
            if state.drop_position is None and (
                    state.candidate is None or state.active.is_full()):
                break
            if n_iter >= self.max_iter:
                warnings.warn('Stopping the path after %i iterations with '
                              'lambda=%.3e and an active set of %i '
                              'regressors. Increase max_iter.'
                              % (n_iter, state.max_corr, len(state.active)),
                              ConvergenceWarning)
                truncated = True
                break

            added = dropped = None
            if state.drop_position is not None:
                dropped = _remove_variable(state)
            else:
                added = _add_variable(state, design, self.eps)

            direction, normalization = _equiangular_direction(
                state, design, self.eps)
            active = np.asarray(state.active.indices, dtype=np.intp)
            # equiangular direction in output space
            eq_dir = np.dot(design.X[:, active], direction)

            gamma_ = state.max_corr / normalization
            gamma_, state.candidate = _entering_step(
                state, design, direction, normalization, eq_dir, gamma_)
            state.just_dropped = None
            if self.lasso:
                gamma_, state.drop_position = _lasso_step(
                    state, direction, gamma_)
                if state.drop_position is not None:
                    state.candidate = None

            state.prediction += gamma_ * eq_dir
            state.coef[active] += gamma_ * direction
            if state.drop_position is not None:
                # this coefficient crosses zero exactly at gamma_
                state.coef[active[state.drop_position]] = 0.
            state.corr = design.correlation(state.prediction, state.coef)
            state.max_corr -= gamma_ * normalization
            n_iter += 1
            path.record(state.coef, state.max_corr)

            step = LarsStep(n_iter, added, dropped, len(state.active),
                            gamma_, state.max_corr)
            for hook in hooks:
                hook(step)

            if self.lasso and state.max_corr <= target_lambda:
                path.interpolate_final(target_lambda)
                break

        if (self.lasso and not truncated
                and path.lambdas[-1] > target_lambda):
            # nothing moves below the last knot; what is left of lambda
            # there is rounding residue
            atol = max(threshold, LAMBDA_RESIDUE_RTOL * path.lambdas[0])
            path.settle_final(target_lambda, atol)

        self.coef_ = path.coefs[-1]
        self.active_ = list(state.active.indices)
        self.n_iter_ = n_iter
        return self

    def get_coef_path(self):
        """Coefficients at each knot, shape (n_knots, n_features)."""
        self._check_initialized()
        return self.path_.coefs

    def get_lambda_path(self):
        """Regularization value at each knot, shape (n_knots,)."""
        self._check_initialized()
        return self.path_.lambdas


def lars_path(
    X,
    y,
    *,
    Gram=None,
    max_iter=500,
    alpha_min=0,
    method="lar",
    ridge=0.,
    tol=1e-10,
    eps=DEFAULT_PIVOT_EPS,
    verbose=0,
    callback=None,
    return_n_iter=False,
):
    """Compute the LARS, LASSO or Elastic Net path.

    The regularization value along the path is the largest absolute
    correlation ``max |X'(y - X coef) - ridge * coef|``. Unlike
    scikit-learn's ``lars_path`` it is not divided by ``n_samples``.

    Parameters
    ----------
    X : array-like of shape (n_samples, n_features)
        Input data.
    y : array-like of shape (n_samples,)
        Input targets.
    Gram : None, bool or 'auto', default=None
        Whether to precompute the Gram matrix instead of maintaining a
        Cholesky factor. If ``'auto'``, the Gram matrix is used when there
        are more samples than features.
    max_iter : int, default=500
        Maximum number of iterations to perform.
    alpha_min : float, default=0
        Regularization value at which a ``'lasso'`` path stops, with the
        last coefficients interpolated onto it.
    method : {'lar', 'lasso'}, default='lar'
        Select ``'lar'`` for Least Angle Regression, ``'lasso'`` for the
        Lasso (variables leave the active set when their coefficient
        crosses zero).
    ridge : float, default=0.
        Ridge weight. A positive value gives the Elastic Net path.
    tol : float, default=1e-10
        Relative stopping tolerance on the max correlation.
    eps : float, default=1e-12
        Relative threshold for the Cholesky pivots.
    verbose : int, default=0
        Controls output verbosity.
    callback : callable, default=None
        Called with a :data:`LarsStep` after each step.
    return_n_iter : bool, default=False
        Whether to return the number of iterations.

    Returns
    -------
    alphas : ndarray of shape (n_alphas,)
        Max correlation at each knot, non-increasing.
    active : list of int
        Indices of active variables at the end of the path.
    coefs : ndarray of shape (n_features, n_alphas)
        Coefficients along the path.
    n_iter : int
        Number of iterations run. Returned only if return_n_iter is set
        to True.

    References
    ----------
    .. [1] "Least Angle Regression", Efron et al.
           http://statweb.stanford.edu/~tibs/ftp/lars.pdf
    .. [2] "Regularization and variable selection via the elastic net",
           Zou and Hastie.
    """
    if method not in ('lar', 'lasso'):
        raise ValueError("method must be 'lar' or 'lasso', got %r." % method)
    if method == 'lar' and alpha_min:
        raise ValueError("alpha_min is only supported with method='lasso'.")
    X = check_array(X, dtype=np.float64)

    if Gram is None or Gram is False:
        use_cholesky = True
    elif Gram is True or isinstance(Gram, str) and Gram == 'auto':
        use_cholesky = not (Gram is True or X.shape[0] > X.shape[1])
    else:
        raise ValueError("Gram must be None, a bool or 'auto', got %r."
                         % (Gram,))

    solver = LarsSolver(max_iter=max_iter, tol=tol, eps=eps,
                        verbose=verbose, callback=callback)
    solver.initialize(
        X, y, use_cholesky,
        target_lambda=alpha_min if method == 'lasso' else None,
        ridge=ridge if ridge else None)
    solver.run()

    alphas = solver.get_lambda_path()
    coefs = solver.get_coef_path().T
    if return_n_iter:
        return alphas, solver.active_, coefs, solver.n_iter_
    return alphas, solver.active_, coefs


class LarsEN(RegressorMixin, BaseEstimator):
    """Linear model fit with LARS, the LASSO or the Elastic Net.

    The optimization objective for ``method='lasso'`` is::

        (1 / (2 * n_samples)) * ||y - Xw||^2_2 + alpha * ||w||_1
            + (ridge / (2 * n_samples)) * ||w||^2_2

    Parameters
    ----------
    alpha : float, default=1.0
        Constant that multiplies the L1 term, on the scikit-learn scale:
        the path stops at the max correlation ``alpha * n_samples``.
        Ignored when ``method='lar'``.
    method : {'lar', 'lasso'}, default='lasso'
        Whether variables may leave the active set.
    ridge : float, default=0.
        Ridge weight, on the scale of ``X'X``.
    fit_intercept : bool, default=True
        Whether to center ``X`` and ``y`` before fitting.
    precompute : bool or 'auto', default='auto'
        Whether to use a precomputed Gram matrix instead of an
        incrementally updated Cholesky factor.
    max_iter : int, default=500
        Maximum number of iterations to perform.
    tol : float, default=1e-10
        Relative stopping tolerance on the max correlation.
    eps : float, default=1e-12
        Relative threshold for the Cholesky pivots.
    verbose : int, default=0
        Controls output verbosity.

    Attributes
    ----------
    alphas_ : ndarray of shape (n_alphas,)
        Max correlation divided by ``n_samples`` at each knot.
    active_ : list of int
        Indices of active variables at the end of the path.
    coef_path_ : ndarray of shape (n_features, n_alphas)
        Coefficients along the path.
    coef_ : ndarray of shape (n_features,)
    intercept_ : float
    n_iter_ : int
    n_features_in_ : int
    """

    def __init__(self, alpha=1.0, *, method='lasso', ridge=0.,
                 fit_intercept=True, precompute='auto', max_iter=500,
                 tol=1e-10, eps=DEFAULT_PIVOT_EPS, verbose=0):
        self.alpha = alpha
        self.method = method
        self.ridge = ridge
        self.fit_intercept = fit_intercept
        self.precompute = precompute
        self.max_iter = max_iter
        self.tol = tol
        self.eps = eps
        self.verbose = verbose

    def fit(self, X, y):
        """Fit the model using X, y as training data.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Training data.
        y : array-like of shape (n_samples,)
            Target values.

        Returns
        -------
        self : object
            returns an instance of self.
        """
        X, y = check_X_y(X, y, dtype=np.float64, y_numeric=True)
        n_samples, n_features = X.shape

        if self.fit_intercept:
            X_offset = X.mean(axis=0)
            y_offset = y.mean()
            X = X - X_offset
            y = y - y_offset
        else:
            X_offset = np.zeros(n_features)
            y_offset = 0.

        if self.alpha < 0:
            raise ValueError('alpha must be non-negative, got %r.'
                             % self.alpha)
        alpha_min = self.alpha * n_samples if self.method == 'lasso' else 0
        C = np.max(np.abs(np.dot(X.T, y)))
        if self.method == 'lasso' and alpha_min >= C:
            # the whole path lies below alpha, the solution is zero
            alphas, active = np.array([C]), []
            coef_path, n_iter = np.zeros((n_features, 1)), 0
        else:
            alphas, active, coef_path, n_iter = lars_path(
                X, y, Gram=self.precompute, max_iter=self.max_iter,
                alpha_min=alpha_min, method=self.method, ridge=self.ridge,
                tol=self.tol, eps=self.eps, verbose=self.verbose,
                return_n_iter=True)

        self.alphas_ = alphas / n_samples
        self.active_ = active
        self.coef_path_ = coef_path
        self.coef_ = coef_path[:, -1]
        self.intercept_ = float(y_offset - np.dot(X_offset, self.coef_))
        self.n_iter_ = n_iter
        self.n_features_in_ = n_features
        return self

    def predict(self, X):
        """Predict using the linear model.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)

        Returns
        -------
        C : ndarray of shape (n_samples,)
            Predicted values.
        """
        check_is_fitted(self)
        X = check_array(X, dtype=np.float64)
        if X.shape[1] != self.n_features_in_:
            raise ValueError('X has %i features, but LarsEN is expecting %i '
                             'features as input.'
                             % (X.shape[1], self.n_features_in_))
        return np.dot(X, self.coef_) + self.intercept_
