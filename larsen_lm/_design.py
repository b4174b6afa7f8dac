"""
Design matrix, response and the products derived from them.
"""
# License: BSD 3 clause

import numpy as np

from .exceptions import IndexOutOfRangeError


class DesignCache:
    """Hold ``X``, ``y`` and keep ``X'y`` (and optionally the Gram) current.

    Parameters
    ----------
    X : array-like of shape (n_samples, n_features)
        Design matrix. Copied, so later changes by the caller are not seen.
    y : array-like of shape (n_samples,)
        Response. Copied.
    use_gram : bool, default=False
        Whether to precompute and maintain ``X'X + ridge * I``.
    ridge : float, default=0.
        Ridge weight of the Elastic Net. Zero means plain LARS/LASSO.

    Attributes
    ----------
    Xty : ndarray of shape (n_features,)
    gram : ndarray of shape (n_features, n_features) or None
        Only maintained when ``use_gram`` is True.
    """

    def __init__(self, X, y, *, use_gram=False, ridge=0.):
        # fortran order makes column access and replacement cheap
        self.X = np.array(X, dtype=np.float64, order='F', copy=True)
        self.y = np.array(y, dtype=np.float64, copy=True).ravel()
        if self.X.ndim != 2:
            raise ValueError('X must be 2-dimensional, got shape %r.'
                             % (self.X.shape,))
        if self.y.shape[0] != self.X.shape[0]:
            raise ValueError('X and y have inconsistent numbers of samples: '
                             '%i and %i.' % (self.X.shape[0], self.y.shape[0]))
        self.use_gram = use_gram
        self.ridge = float(ridge)

        self.Xty = np.dot(self.X.T, self.y)
        self.gram = None
        if use_gram:
            self.gram = np.dot(self.X.T, self.X)
            self.gram.flat[::self.n_features + 1] += self.ridge

    @property
    def n_samples(self):
        return self.X.shape[0]

    @property
    def n_features(self):
        return self.X.shape[1]

    def _check_indices(self, indices):
        indices = np.asarray(indices, dtype=np.intp).ravel()
        bad = (indices < 0) | (indices >= self.n_features)
        if np.any(bad):
            raise IndexOutOfRangeError(
                'Column indices %r are out of range for %i features.'
                % (indices[bad].tolist(), self.n_features))
        if np.unique(indices).size != indices.size:
            raise ValueError('Column indices must be unique, got %r.'
                             % indices.tolist())
        return indices

    def update_columns(self, indices, new_columns):
        """Replace columns of ``X`` and refresh the dependent products.

        Parameters
        ----------
        indices : sequence of int
            Columns to replace.
        new_columns : array-like of shape (n_samples, len(indices))
            Replacement values, ``new_columns[:, i]`` goes to column
            ``indices[i]``.
        """
        indices = self._check_indices(indices)
        new_columns = np.asarray(new_columns, dtype=np.float64)
        if new_columns.ndim == 1:
            new_columns = new_columns[:, np.newaxis]
        if new_columns.shape != (self.n_samples, indices.size):
            raise ValueError('Expected replacement columns of shape %r, '
                             'got %r.' % ((self.n_samples, indices.size),
                                          new_columns.shape))

        self.X[:, indices] = new_columns
        self.Xty[indices] = np.dot(new_columns.T, self.y)

        if self.gram is not None:
            block = np.dot(new_columns.T, self.X)
            self.gram[indices, :] = block
            self.gram[:, indices] = block.T
            self.gram[indices, indices] += self.ridge

    def set_response(self, y):
        """Replace ``y`` and recompute ``X'y``."""
        y = np.array(y, dtype=np.float64, copy=True).ravel()
        if y.shape[0] != self.n_samples:
            raise ValueError('Expected a response of length %i, got %i.'
                             % (self.n_samples, y.shape[0]))
        self.y = y
        self.Xty = np.dot(self.X.T, self.y)

    def covariance(self, rows, cols):
        """Block ``(X'X + ridge * I)[rows][:, cols]``.

        This is the only place the ridge term enters a covariance, for the
        Gram and the Cholesky strategy alike.
        """
        rows = np.asarray(rows, dtype=np.intp).ravel()
        cols = np.asarray(cols, dtype=np.intp).ravel()
        if self.gram is not None:
            return self.gram[np.ix_(rows, cols)]
        cov = np.dot(self.X[:, rows].T, self.X[:, cols])
        if self.ridge:
            cov += self.ridge * (rows[:, np.newaxis] == cols[np.newaxis, :])
        return cov

    def correlation(self, prediction, coef):
        """Correlation of each variable with the current residual.

        For the Elastic Net this is the residual of the augmented problem
        ``[X; sqrt(ridge) I] coef ~ [y; 0]``, hence the ``ridge * coef``
        term.
        """
        corr = self.Xty - np.dot(self.X.T, prediction)
        if self.ridge:
            corr -= self.ridge * coef
        return corr
