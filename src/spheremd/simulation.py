import argparse
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from spheremd.cells import BOX_LENGTH, cells_free, cells_new, populate_cells
from spheremd.forces import calc_brute_forces, calc_forces
from spheremd.integrator import advance, correct
from spheremd.particles import (collect_forces, collect_stats, copy_particles, kinetic_energy,
                                new_particles, new_stats, reset_stats, visualise_positions)
from spheremd.util import (generate_fibonacci_sphere, project_to_sphere, project_to_tangent,
                           random_tangent_velocities)

# --- Defaults ---
DEFAULT_CUTOFF = 0.3
DEFAULT_GAMMA = 0.1
DEFAULT_DT = 1e-3
METHODS = ("cells", "brute")

def choose_binning(cutoff):
    """Finest binning whose cell edge 2/L is still at least the cutoff."""
    binning = max(1, int(BOX_LENGTH / cutoff))
    # int() can round up when BOX_LENGTH / cutoff is just below an integer
    while binning > 1 and BOX_LENGTH / binning < cutoff:
        binning -= 1
    return binning

def check_binning(binning, cutoff):
    """Raises if the grid is too fine for the cell list to see every pair inside the cutoff."""
    if binning < 1:
        raise ValueError(f"binning must be at least 1, got {binning}")
    if BOX_LENGTH / binning < cutoff:
        raise ValueError(f"Cell edge {BOX_LENGTH / binning:.4f} (binning={binning}) is smaller than "
                         f"the cutoff {cutoff}, pairs would be missed")

def partition_range(total, parts):
    """Splits [0, total) into `parts` contiguous half-open ranges without gaps."""
    chunk = total // parts
    rest = total % parts
    ranges = []
    start = 0
    for k in range(parts):
        end = start + chunk + (1 if k < rest else 0)
        ranges.append((start, end))
        start = end
    return ranges

def _force_sweep(ps, cells, first, last, cutoff, gamma, stats, method):
    if method == "cells":
        calc_forces(ps, cells, first, last, cutoff, gamma, stats)
    else:
        calc_brute_forces(ps.shape[0], ps, first, last, cutoff, gamma, stats)

def compute_forces(ps, cells, cutoff, gamma, stats, method="cells", workers=1, buffers=None, executor=None):
    """
    Fills the accelerations of `ps` (cleared by `advance`, grid populated for cell lists).
    With several workers every worker sweeps its own slice of cells (or particles) into a
    private copy of the particle array, the copies are folded back afterwards.
    Without `buffers` or `executor` they are created for this call only.
    """
    n = ps.shape[0]
    total = cells.num_cells if method == "cells" else n

    if workers == 1:
        _force_sweep(ps, cells, 0, total, cutoff, gamma, stats, method)
        return

    if buffers is None:
        buffers = [np.empty_like(ps) for _ in range(workers)]
    if executor is None:
        with ThreadPoolExecutor(max_workers=workers) as own_executor:
            compute_forces(ps, cells, cutoff, gamma, stats, method, workers, buffers, own_executor)
        return

    ranges = partition_range(total, workers)
    worker_stats = [new_stats() for _ in range(workers)]
    for buf in buffers:
        # The copy carries the cleared accelerations and the cell list links
        copy_particles(n, ps, buf)

    futures = [executor.submit(_force_sweep, buffers[k], cells, ranges[k][0], ranges[k][1],
                               cutoff, gamma, worker_stats[k], method)
               for k in range(workers)]
    for future in futures:
        future.result()

    for k in range(workers):
        collect_forces(n, ps, buffers[k])
        collect_stats(stats, worker_stats[k])

def step(ps, cells, dt, cutoff, gamma, stats, method="cells", workers=1, buffers=None, executor=None):
    """One time step: advance -> populate -> forces -> correct."""
    n = ps.shape[0]
    advance(n, ps, dt)
    if method == "cells":
        populate_cells(n, ps, cells)
    compute_forces(ps, cells, cutoff, gamma, stats, method, workers, buffers, executor)
    correct(n, ps, dt)

def _validate(positions, velocities, cutoff, binning, method, workers):
    if positions.ndim != 2 or positions.shape[1] != 3:
        raise ValueError(f"positions must have shape (N, 3), got {positions.shape}")
    if velocities.shape != positions.shape:
        raise ValueError(f"velocities must have shape {positions.shape}, got {velocities.shape}")
    if method not in METHODS:
        raise ValueError(f"Unknown force method '{method}', expected one of {METHODS}")
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")
    if binning < 1:
        raise ValueError(f"binning must be at least 1, got {binning}")
    # The brute sweep never reads the grid
    if method == "cells":
        check_binning(binning, cutoff)

def run_simulation_sphere(positions, velocities, dt=DEFAULT_DT, steps=100, cutoff=DEFAULT_CUTOFF,
                          gamma=DEFAULT_GAMMA, binning=None, method="cells", workers=1, store_history=True):
    """
    Run the particles-on-a-sphere simulation.

    Args:
        method (str): "cells" for the cell list, "brute" for the O(N^2) sweep.
        workers (int): Number of concurrent force sweeps per step.
        store_history (bool): If True, returns (pos_history, vel_history, energy_history)
                              with shapes (steps+1, N, 3), (steps+1, N, 3) and (steps+1, 2),
                              energy rows are (E_kin, E_pot).
                              If False, returns final state (pos, vel).
    """
    positions = np.asarray(positions, dtype=np.float64)
    velocities = np.asarray(velocities, dtype=np.float64)
    if binning is None:
        binning = choose_binning(cutoff)
    _validate(positions, velocities, cutoff, binning, method, workers)

    # The core expects |r| = 1 and tangent velocities
    positions = project_to_sphere(positions)
    velocities = project_to_tangent(positions, velocities)

    N = positions.shape[0]
    ps = new_particles(positions, velocities)
    cells = cells_new(binning, N)
    stats = new_stats()
    buffers = [np.empty_like(ps) for _ in range(workers)] if workers > 1 else None
    executor = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None

    if store_history:
        pos_history = np.zeros((steps + 1, N, 3), dtype=np.float64)
        vel_history = np.zeros((steps + 1, N, 3), dtype=np.float64)
        energy_history = np.zeros((steps + 1, 2), dtype=np.float64)
        flat = np.zeros(3 * N, dtype=np.float64)

    print(f"Running on CPU (Numba). N={N}, Steps={steps}, Method={method}, Workers={workers}, {cells}")

    try:
        # Initial forces a(t=0)
        if method == "cells":
            populate_cells(N, ps, cells)
        compute_forces(ps, cells, cutoff, gamma, stats, method, workers, buffers, executor)

        if store_history:
            visualise_positions(N, ps, flat)
            pos_history[0] = flat.reshape(N, 3)
            vel_history[0] = ps['v']
            energy_history[0] = (kinetic_energy(ps), stats['E_pot'][0])

        for k in range(steps):
            reset_stats(stats)
            step(ps, cells, dt, cutoff, gamma, stats, method, workers, buffers, executor)

            if store_history:
                visualise_positions(N, ps, flat)
                pos_history[k + 1] = flat.reshape(N, 3)
                vel_history[k + 1] = ps['v']
                energy_history[k + 1] = (kinetic_energy(ps), stats['E_pot'][0])
    finally:
        if executor is not None:
            executor.shutdown()
        cells_free(cells)

    print("Simulation finished.")

    if store_history:
        return pos_history, vel_history, energy_history
    else:
        return ps['r'].copy(), ps['v'].copy()

# --- EXAMPLE USAGE ---
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Particles on a unit sphere")
    parser.add_argument("-n", "--num-particles", type=int, default=500, help="Number of particles")
    parser.add_argument("-s", "--steps", type=int, default=1000, help="Number of time steps")
    parser.add_argument("-dt", "--dt", type=float, default=DEFAULT_DT, help="Time step size")
    parser.add_argument("-c", "--cutoff", type=float, default=DEFAULT_CUTOFF, help="Cutoff distance of the pair interaction")
    parser.add_argument("-g", "--gamma", type=float, default=DEFAULT_GAMMA, help="Damping coefficient")
    parser.add_argument("-b", "--binning", type=int, default=None, help="Cells per box edge (default: finest allowed by the cutoff)")
    parser.add_argument("-m", "--method", type=str, choices=METHODS, default="cells", help="Force method")
    parser.add_argument("-w", "--workers", type=int, default=1, help="Concurrent force sweeps")
    parser.add_argument("--temperature", type=float, default=0.5, help="Scale of the random initial velocities")
    parser.add_argument("--animate", action="store_true", help="Show an animation of the run")
    args = parser.parse_args()

    pos = generate_fibonacci_sphere(args.num_particles)
    vel = random_tangent_velocities(pos, scale=args.temperature, seed=42)

    pos_hist, vel_hist, energies = run_simulation_sphere(
        pos, vel,
        dt=args.dt,
        steps=args.steps,
        cutoff=args.cutoff,
        gamma=args.gamma,
        binning=args.binning,
        method=args.method,
        workers=args.workers,
    )
    print(f"E_kin: {energies[0, 0]:.6f} -> {energies[-1, 0]:.6f}")
    print(f"E_pot: {energies[0, 1]:.6f} -> {energies[-1, 1]:.6f}")

    if args.animate:
        from spheremd.visualization import animate_simulation
        animate_simulation(pos_hist)
