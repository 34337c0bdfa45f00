import math
import numpy as np
import pytest

from spheremd.vector import (vec_add, vec_dec, vec_dot, vec_inc, vec_load, vec_magnitude,
                             vec_magnitude2, vec_scale, vec_store, vec_sub)

def test_componentwise_arithmetic():
    a = (1.0, 2.0, 3.0)
    b = (0.5, -1.0, 4.0)
    assert vec_add(a, b) == (1.5, 1.0, 7.0)
    assert vec_sub(a, b) == (0.5, 3.0, -1.0)
    assert vec_scale(2.0, a) == (2.0, 4.0, 6.0)

def test_dot_and_magnitude():
    a = (1.0, 2.0, 2.0)
    assert vec_dot(a, (2.0, 0.0, -1.0)) == 0.0
    assert vec_magnitude2(a) == 9.0
    assert vec_magnitude(a) == pytest.approx(3.0)
    assert vec_magnitude((math.cos(0.3), math.sin(0.3), 0.0)) == pytest.approx(1.0, abs=1e-15)

def test_load_store_inc_dec_on_arrays():
    arr = np.zeros(3)
    vec_store(arr, (1.0, 2.0, 3.0))
    assert vec_load(arr) == (1.0, 2.0, 3.0)

    vec_inc(arr, (1.0, 1.0, 1.0))
    np.testing.assert_array_equal(arr, [2.0, 3.0, 4.0])

    vec_dec(arr, (2.0, 3.0, 4.0))
    np.testing.assert_array_equal(arr, [0.0, 0.0, 0.0])
