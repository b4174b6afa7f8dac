"""
In-place updates of the Cholesky factor of the active covariance.

The factor lives in the leading ``n_active x n_active`` block of a
preallocated ``(n_features, n_features)`` buffer and is upper triangular,
so that ``R.T @ R`` equals the covariance of the active columns (plus the
ridge term on its diagonal when running the Elastic Net).
"""
# License: BSD 3 clause

import numpy as np
from scipy import linalg
from scipy.linalg.blas import drotg

from .exceptions import IndexOutOfRangeError, NumericalInstabilityError

SOLVE_TRIANGULAR_ARGS = {'check_finite': False}
DEFAULT_PIVOT_EPS = 1e-12


def cholesky_insert(R, n_active, x, X_active, ridge=0., eps=DEFAULT_PIVOT_EPS):
    """Append a variable to the factor given its raw column.

    Parameters
    ----------
    R : ndarray of shape (n_features, n_features)
        Factor buffer, modified in place.
    n_active : int
        Size of the factor currently held in ``R``.
    x : ndarray of shape (n_samples,)
        Column of the entering variable.
    X_active : ndarray of shape (n_samples, n_active)
        Columns of the variables already in the factor, in factor order.
    ridge : float, default=0.
        Ridge weight added to the squared norm of ``x``.
    eps : float, default=1e-12
        Relative threshold below which the new pivot is considered zero.

    Returns
    -------
    n_active : int
        The new size of the factor.
    """
    x = np.asarray(x, dtype=np.float64).ravel()
    diag = np.dot(x, x) + ridge
    gram_col = np.dot(np.asarray(X_active).T, x)
    return _cholesky_append(R, n_active, diag, gram_col, eps)


def cholesky_insert_gram(R, n_active, diag, gram_col, eps=DEFAULT_PIVOT_EPS):
    """Append a variable to the factor given its precomputed inner products.

    ``diag`` is the (ridge adjusted) squared norm of the entering column and
    ``gram_col`` its inner products with the ``n_active`` columns already in
    the factor, in factor order. Returns the new size of the factor.
    """
    return _cholesky_append(R, n_active, diag, gram_col, eps)


def _cholesky_append(R, n_active, diag, gram_col, eps):
    ##########################################################
    # Append x_j to the Cholesky factorization of (Xa' * Xa) #
    #                                                        #
    #            ( R   w )                                   #
    #     R  ->  (       )  , where R' * w = Xa' x_j         #
    #            ( 0   z )    and z^2 = x_j' x_j - w' w      #
    #                                                        #
    ##########################################################
    if n_active >= R.shape[0]:
        raise IndexOutOfRangeError(
            'Cannot grow a factor of size %i in a buffer of size %i.'
            % (n_active, R.shape[0]))
    diag = float(diag)
    if n_active == 0:
        if not diag > 0:
            raise NumericalInstabilityError(
                'Non-positive pivot %.3e for the first active variable.'
                % diag)
        R[0, 0] = np.sqrt(diag)
        return 1

    gram_col = np.asarray(gram_col, dtype=np.float64).ravel()
    w = linalg.solve_triangular(R[:n_active, :n_active], gram_col,
                                trans='T', lower=False,
                                **SOLVE_TRIANGULAR_ARGS)
    pivot = diag - np.dot(w, w)
    if not (np.isfinite(pivot) and pivot > eps * abs(diag)):
        raise NumericalInstabilityError(
            'Regressors in active set degenerate: pivot %.3e with an '
            'active set of %i regressors.' % (pivot, n_active))

    R[:n_active, n_active] = w
    R[n_active, :n_active] = 0.
    R[n_active, n_active] = np.sqrt(pivot)
    return n_active + 1


def givens_rotation(a, b):
    """Plane rotation ``G`` with ``G @ [a, b] == [r, 0]``.

    Returns ``(G, r)`` where ``r`` is the Euclidean norm of ``(a, b)``. When
    ``b`` is zero the rotation is the identity and ``r`` is ``a``.
    """
    if b == 0:
        return np.eye(2), a
    c, s = drotg(a, b)
    r = c * a + s * b
    if r < 0:
        # BLAS signs r like the larger of |a|, |b|; keep the diagonal positive
        c, s, r = -c, -s, -r
    G = np.array([[c, s],
                  [-s, c]])
    return G, r


def cholesky_delete(R, n_active, position):
    """Remove the variable at ``position`` from the factor, in place.

    The column is dropped and the columns to its right shifted left, which
    leaves one sub-diagonal entry per shifted column; a sweep of Givens
    rotations restores the triangular shape and the last row is cleared.

    Returns the new size of the factor.
    """
    if not 0 <= position < n_active:
        raise IndexOutOfRangeError(
            'Position %r is out of range for a factor of size %i.'
            % (position, n_active))
    last = n_active - 1
    if position == last:
        R[last, :n_active] = 0.
        R[:n_active, last] = 0.
        return last

    R[:n_active, position:last] = R[:n_active, position + 1:n_active]
    R[:n_active, last] = 0.

    for k in range(position, last):
        G, r = givens_rotation(R[k, k], R[k + 1, k])
        R[k, k] = r
        R[k + 1, k] = 0.
        if k + 1 < last:
            R[k:k + 2, k + 1:last] = np.dot(G, R[k:k + 2, k + 1:last])

    R[last, :n_active] = 0.
    return last
