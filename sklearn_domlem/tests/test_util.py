"""Tests for `sklearn_domlem.util`."""
import functools

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from sklearn_domlem import util
from sklearn_domlem.data import PreferenceType
from sklearn_domlem.measures import SupportMeasure


def test_preference_codes():
    build_codes = functools.partial(util.build_preference_codes, n_features=3)
    assert_array_equal(build_codes(None), [0, 0, 0])
    assert_array_equal(build_codes('cost'), [1, 1, 1])
    assert_array_equal(build_codes('none'), [2, 2, 2])
    assert_array_equal(build_codes(['gain', 'COST', 'none']), [0, 1, 2])
    assert_array_equal(build_codes([PreferenceType.COST, PreferenceType.GAIN,
                                    PreferenceType.NONE]), [1, 0, 2])
    assert build_codes('ordinal') is None
    assert build_codes(['gain', 'cost']) is None
    assert build_codes(['gain', 'cost', 3]) is None


def test_as_mask():
    assert_array_equal(util.as_mask([0, 2], 4), [True, False, True, False])
    assert_array_equal(util.as_mask((), 3), [False, False, False])
    assert_array_equal(util.as_mask(None, 2), [False, False])
    assert_array_equal(util.as_mask(np.array([True, False]), 2),
                       [True, False])
    assert_array_equal(util.as_mask(np.array([1, 1]), 3),
                       [False, True, False])


def test_as_mask_copies():
    mask = np.array([True, False])
    converted = util.as_mask(mask, 2)
    converted[1] = True
    assert_array_equal(mask, [True, False])


@pytest.mark.parametrize('indices', [[-1], [3], [0, 5],
                                     np.array([True, False])])
def test_as_mask_invalid(indices):
    with pytest.raises(ValueError):
        util.as_mask(indices, 3, 'objects')


def test_as_mask_rejects_float():
    with pytest.raises(ValueError, match='integer'):
        util.as_mask([0.5], 3)


def test_read_only():
    array = np.arange(3)
    view = util.read_only(array)
    with pytest.raises(ValueError):
        view[0] = 7
    array[0] = 7  # original stays writable
    assert view[0] == 7


def test_check_components():
    support = SupportMeasure()
    assert util.check_components([support], 'evaluators',
                                 SupportMeasure) == (support,)
    with pytest.raises(ValueError, match='must not be None'):
        util.check_components(None, 'evaluators', SupportMeasure)
    with pytest.raises(ValueError, match='must not be empty'):
        util.check_components([], 'evaluators', SupportMeasure)
    with pytest.raises(TypeError, match=r'evaluators\[1\] is None'):
        util.check_components([support, None], 'evaluators', SupportMeasure)
    with pytest.raises(TypeError, match=r'evaluators\[0\] must be'):
        util.check_components(['support'], 'evaluators', SupportMeasure)
