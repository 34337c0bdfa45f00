import numpy as np

from spheremd.util import (generate_fibonacci_sphere, project_to_sphere, project_to_tangent,
                           random_tangent_velocities)
from tests.spheremd.test_helpers import check_on_sphere, check_tangent

def test_fibonacci_points_are_distinct_and_on_sphere():
    pos = generate_fibonacci_sphere(100)
    assert pos.shape == (100, 3)
    check_on_sphere(pos, 1e-14)

    diff = pos[:, None, :] - pos[None, :, :]
    dist = np.sqrt(np.sum(diff**2, axis=-1))
    np.fill_diagonal(dist, np.inf)
    assert np.min(dist) > 0.1

def test_fibonacci_points_are_balanced():
    pos = generate_fibonacci_sphere(1000)
    np.testing.assert_allclose(pos.mean(axis=0), 0.0, atol=1e-2)

def test_random_velocities_are_tangent_and_reproducible():
    pos = generate_fibonacci_sphere(50)
    vel = random_tangent_velocities(pos, scale=0.3, seed=5)
    check_tangent(pos, vel, 1e-14)
    np.testing.assert_array_equal(vel, random_tangent_velocities(pos, scale=0.3, seed=5))
    assert np.any(vel != 0.0)

def test_projections():
    pos = project_to_sphere(np.array([[2.0, 0.0, 0.0], [0.0, 3.0, 4.0]]))
    np.testing.assert_allclose(pos, [[1.0, 0.0, 0.0], [0.0, 0.6, 0.8]])

    vel = project_to_tangent(pos, np.array([[1.0, 1.0, 0.0], [0.0, 0.6, 0.8]]))
    np.testing.assert_allclose(vel, [[0.0, 1.0, 0.0], [0.0, 0.0, 0.0]], atol=1e-15)
