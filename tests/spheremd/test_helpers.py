import numpy as np

from spheremd.cells import cells_new, populate_cells
from spheremd.forces import calc_brute_forces, calc_forces
from spheremd.particles import new_particles, new_stats
from spheremd.util import generate_fibonacci_sphere, random_tangent_velocities

def make_particles(n, scale=0.0, seed=42):
    """Fibonacci spiral on the sphere with optional random tangent velocities."""
    pos = generate_fibonacci_sphere(n)
    if scale > 0.0:
        vel = random_tangent_velocities(pos, scale=scale, seed=seed)
    else:
        vel = np.zeros_like(pos)
    return new_particles(pos, vel)

def walk_cells(ps, cells):
    """Returns every particle index reachable from the cell heads."""
    visited = []
    for head in cells.heads:
        i = head
        while i != -1:
            visited.append(int(i))
            i = ps[i]['next']
    return visited

def cell_sweep(ps, binning, cutoff, gamma=0.0, cell_range=None):
    """Populates a grid and runs the cell list sweep on `ps` in place."""
    n = ps.shape[0]
    cells = cells_new(binning, n)
    populate_cells(n, ps, cells)
    stats = new_stats()
    cell0, cell1 = cell_range if cell_range is not None else (0, cells.num_cells)
    calc_forces(ps, cells, cell0, cell1, cutoff, gamma, stats)
    return stats

def brute_sweep(ps, cutoff, gamma=0.0, particle_range=None):
    n = ps.shape[0]
    stats = new_stats()
    first, last = particle_range if particle_range is not None else (0, n)
    calc_brute_forces(n, ps, first, last, cutoff, gamma, stats)
    return stats

def check_on_sphere(positions, tol):
    radii = np.linalg.norm(positions.reshape(-1, 3), axis=-1)
    assert np.max(np.abs(radii - 1.0)) <= tol, f"Max deviation from the sphere: {np.max(np.abs(radii - 1.0))}"

def check_tangent(positions, velocities, tol):
    radial = np.abs(np.sum(positions * velocities, axis=-1))
    speed = np.linalg.norm(velocities, axis=-1)
    assert np.all(radial <= tol * np.maximum(speed, 1.0)), f"Max radial velocity: {np.max(radial)}"
