import numpy as np
import pytest
from numpy.testing import assert_array_equal

from larsen_lm import ActiveSet, IndexOutOfRangeError


def test_activate_keeps_order_and_mask():
    active = ActiveSet(5)
    for j in (3, 0, 4):
        active.activate(j)
    assert active.indices == [3, 0, 4]
    assert_array_equal(active.mask, [True, False, False, True, True])
    assert len(active) == 3
    assert 4 in active and 1 not in active
    assert_array_equal(active.inactive(), [1, 2])


def test_deactivate_shifts_positions():
    active = ActiveSet(4)
    for j in (2, 1, 3):
        active.activate(j)
    assert active.deactivate(0) == 2
    assert active.indices == [1, 3]
    assert not active.mask[2]
    assert_array_equal(active.inactive(), [0, 2])


def test_membership_invariant_after_mixed_updates():
    rng = np.random.RandomState(0)
    active = ActiveSet(8)
    for _ in range(50):
        inactive = active.inactive()
        if inactive.size and (not len(active) or rng.rand() < 0.6):
            active.activate(int(rng.choice(inactive)))
        else:
            active.deactivate(rng.randint(len(active)))
        assert sorted(active.indices) == list(np.flatnonzero(active.mask))
        assert len(set(active.indices)) == len(active)


def test_is_full():
    active = ActiveSet(2)
    active.activate(1)
    assert not active.is_full()
    active.activate(0)
    assert active.is_full()
    assert active.inactive().size == 0


def test_errors():
    active = ActiveSet(3)
    with pytest.raises(IndexOutOfRangeError):
        active.activate(3)
    with pytest.raises(IndexOutOfRangeError):
        active.activate(-1)
    active.activate(1)
    with pytest.raises(ValueError):
        active.activate(1)
    with pytest.raises(IndexOutOfRangeError):
        active.deactivate(1)
