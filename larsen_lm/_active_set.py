"""
Bookkeeping for the active set of the LARS path.
"""
# License: BSD 3 clause

import numpy as np

from .exceptions import IndexOutOfRangeError


class ActiveSet:
    """Ordered set of active variables with a membership mask.

    The order of ``indices`` is the activation order; position ``i`` in it
    is the row/column ``i`` of the Cholesky factor. Positions shift when a
    variable is removed, so callers must not cache them across
    :meth:`deactivate`.

    Parameters
    ----------
    n_features : int
        Number of candidate variables.

    Attributes
    ----------
    indices : list of int
        Active variables in activation order.
    mask : ndarray of shape (n_features,), dtype=bool
        ``mask[j]`` is True iff ``j`` is in ``indices``.
    """

    def __init__(self, n_features):
        self.n_features = n_features
        self.indices = []
        self.mask = np.zeros(n_features, dtype=bool)

    def __len__(self):
        return len(self.indices)

    def __contains__(self, variable):
        return 0 <= variable < self.n_features and bool(self.mask[variable])

    def __iter__(self):
        return iter(self.indices)

    def activate(self, variable):
        if not 0 <= variable < self.n_features:
            raise IndexOutOfRangeError(
                'Variable %r is out of range for %i features.'
                % (variable, self.n_features))
        if self.mask[variable]:
            raise ValueError('Variable %i is already active.' % variable)
        self.indices.append(int(variable))
        self.mask[variable] = True

    def deactivate(self, position):
        """Remove the variable at ``position`` and return it."""
        if not 0 <= position < len(self.indices):
            raise IndexOutOfRangeError(
                'Position %r is out of range for an active set of size %i.'
                % (position, len(self.indices)))
        variable = self.indices.pop(position)
        self.mask[variable] = False
        return variable

    def inactive(self):
        """Inactive variables in increasing order."""
        return np.flatnonzero(~self.mask)

    def is_full(self):
        return len(self.indices) == self.n_features
