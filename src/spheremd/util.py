import numpy as np

GOLDEN_ANGLE = np.pi * (3.0 - np.sqrt(5.0))

def generate_fibonacci_sphere(n_particles):
    """Spreads n_particles almost evenly on the unit sphere along a Fibonacci spiral."""
    k = np.arange(n_particles, dtype=np.float64)
    z = 1.0 - (2.0 * k + 1.0) / n_particles
    rho = np.sqrt(1.0 - z * z)
    theta = GOLDEN_ANGLE * k
    initial_positions = np.stack((rho * np.cos(theta), rho * np.sin(theta), z), axis=1)

    return initial_positions

def project_to_sphere(positions):
    return positions / np.linalg.norm(positions, axis=1, keepdims=True)

def project_to_tangent(positions, velocities):
    """Removes the radial component of each velocity (positions on the unit sphere)."""
    radial = np.sum(positions * velocities, axis=1, keepdims=True)
    return velocities - radial * positions

def random_tangent_velocities(positions, scale=0.1, seed=None):
    rng = np.random.default_rng(seed)
    velocities = (rng.random(positions.shape) - 0.5) * 2.0 * scale

    return project_to_tangent(positions, velocities)
