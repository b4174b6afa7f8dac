import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from larsen_lm import InvalidTargetLambdaError, SolutionPath


def _path():
    path = SolutionPath(3)
    path.record([0., 0., 0.], 4.)
    path.record([1., 0., 0.], 3.)
    path.record([2., -1., 0.], 1.)
    return path


def test_record_copies_coefficients():
    coef = np.array([1., 2.])
    path = SolutionPath(2)
    path.record(coef, 1.)
    coef[0] = 10.
    assert_array_equal(path.coefs, [[1., 2.]])
    assert_array_equal(path.lambdas, [1.])
    assert len(path) == 1


def test_record_rejects_increasing_lambda():
    path = SolutionPath(1)
    path.record([0.], 1.)
    path.record([0.5], 1.)
    with pytest.raises(ValueError):
        path.record([0.7], 1.5)


def test_record_rejects_wrong_length():
    with pytest.raises(ValueError):
        SolutionPath(2).record([0.], 1.)


def test_interpolate_final_is_convex_combination():
    path = _path()
    path.interpolate_final(2.)
    # halfway between lambda 3 and lambda 1
    assert_allclose(path.coefs[-1], [1.5, -0.5, 0.])
    assert path.lambdas[-1] == 2.
    assert_array_equal(path.coefs[:-1], [[0., 0., 0.], [1., 0., 0.]])
    assert len(path) == 3


@pytest.mark.parametrize('target, expected', [(3., [1., 0., 0.]),
                                              (1., [2., -1., 0.])])
def test_interpolate_final_at_bracket_ends(target, expected):
    path = _path()
    path.interpolate_final(target)
    assert_allclose(path.coefs[-1], expected)
    assert path.lambdas[-1] == target


@pytest.mark.parametrize('target', [3.5, 0.5, -1.])
def test_interpolate_final_outside_bracket(target):
    with pytest.raises(InvalidTargetLambdaError):
        _path().interpolate_final(target)


def test_interpolate_final_needs_two_entries():
    path = SolutionPath(1)
    with pytest.raises(InvalidTargetLambdaError):
        path.interpolate_final(0.)
    path.record([0.], 1.)
    with pytest.raises(InvalidTargetLambdaError):
        path.interpolate_final(1.)


def test_clear():
    path = _path()
    path.clear()
    assert len(path) == 0
    assert path.coefs.shape == (0, 3)


def test_settle_final_lowers_last_lambda():
    path = _path()
    path.settle_final(0.999, atol=1e-3)
    assert path.lambdas[-1] == 0.999
    assert_array_equal(path.coefs[-1], [2., -1., 0.])
    assert len(path) == 3


@pytest.mark.parametrize('target', [0.5, 1.5])
def test_settle_final_rejects_gap_outside_tolerance(target):
    path = _path()
    with pytest.raises(InvalidTargetLambdaError):
        path.settle_final(target, atol=1e-3)
    assert path.lambdas[-1] == 1.


def test_settle_final_needs_a_knot():
    with pytest.raises(InvalidTargetLambdaError):
        SolutionPath(2).settle_final(0., atol=1.)
