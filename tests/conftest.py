"""Shared fixtures for the larsen tests."""

import numpy as np
import pytest
from sklearn import datasets


@pytest.fixture
def diabetes():
    X, y = datasets.load_diabetes(return_X_y=True)
    return X, y


@pytest.fixture
def random_regression():
    rng = np.random.RandomState(0)
    X = rng.randn(40, 6)
    coef = np.array([3., -2., 0., 0., 1.5, 0.])
    y = np.dot(X, coef) + 0.5 * rng.randn(40)
    return X, y


@pytest.fixture
def orthonormal_design():
    rng = np.random.RandomState(7)
    Q, _ = np.linalg.qr(rng.randn(12, 4))
    y = np.dot(Q, np.array([4., -3., 2., -1.])) + 0.1 * rng.randn(12)
    return Q, y
