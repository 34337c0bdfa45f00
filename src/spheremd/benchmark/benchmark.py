import time
import argparse
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from spheremd.cells import cells_new, populate_cells
from spheremd.particles import new_particles, new_stats
from spheremd.simulation import DEFAULT_CUTOFF, DEFAULT_GAMMA, check_binning, choose_binning, compute_forces, step
from spheremd.util import generate_fibonacci_sphere, random_tangent_velocities
from spheremd.benchmark.util import print_results, create_report, store_results, plot_results

WARM_UP_ITER = 5

def _measure_time(pos_host, vel_host, dt, steps, cutoff, gamma, binning, method, workers):
    N = pos_host.shape[0]
    if binning is None:
        binning = choose_binning(cutoff)
    if method == "cells":
        check_binning(binning, cutoff)
    print(f"Running on CPU (Numba). N={N}, Steps={steps}, Method={method}, Binning={binning}, Workers={workers}")

    ps = new_particles(pos_host, vel_host)
    cells = cells_new(binning, N)
    buffers = [np.empty_like(ps) for _ in range(workers)] if workers > 1 else None
    executor = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None

    try:
        # Warm-Up, includes the numba compilation
        warm_up_stats = new_stats()
        populate_cells(N, ps, cells)
        compute_forces(ps, cells, cutoff, gamma, warm_up_stats, method, workers, buffers, executor)
        for _ in range(WARM_UP_ITER):
            step(ps, cells, dt, cutoff, gamma, warm_up_stats, method, workers, buffers, executor)

        stats = new_stats()
        start_time = time.perf_counter()

        # The computation that is being measured
        for _ in range(steps):
            step(ps, cells, dt, cutoff, gamma, stats, method, workers, buffers, executor)

        end_time = time.perf_counter()
    finally:
        if executor is not None:
            executor.shutdown()

    total_time = end_time - start_time
    steps_per_second = steps / total_time
    # Candidate pairs handed to the pair kernel, N(N-1)/2 per step for brute force
    interactions_per_second = stats['ww_counter'][0] / total_time
    print_results(total_time, steps_per_second, interactions_per_second)

    return steps, total_time, steps_per_second, interactions_per_second

def measure_time_cells(pos_host, vel_host, dt, steps, cutoff=DEFAULT_CUTOFF, gamma=DEFAULT_GAMMA, binning=None, workers=1):
    return _measure_time(pos_host, vel_host, dt, steps, cutoff, gamma, binning, "cells", workers)

def measure_time_brute(pos_host, vel_host, dt, steps, cutoff=DEFAULT_CUTOFF, gamma=DEFAULT_GAMMA, binning=None, workers=1):
    return _measure_time(pos_host, vel_host, dt, steps, cutoff, gamma, binning, "brute", workers)

def run_scaling_benchmark(measure_time_func, n_particles, **kwargs):
    results = {
        "num_particles": [],
        "total_time": [],
        "steps_per_second": [],
        "interactions_per_second": []}
    max_wait_time = 60.0 # Don't run a size if 1 step takes more than max_wait_time

    for n in n_particles:
        pos = generate_fibonacci_sphere(n)
        vel = random_tangent_velocities(pos, scale=0.5, seed=42)

        steps, total_time, steps_per_second, interactions_per_second = measure_time_func(pos, vel, **kwargs)
        results["num_particles"].append(n)
        results["total_time"].append(total_time)
        results["steps_per_second"].append(steps_per_second)
        results["interactions_per_second"].append(interactions_per_second)

        time_per_step = total_time / steps
        if time_per_step > max_wait_time:
            print(f"Step time is on average {time_per_step:.2f}, which is longer than the maximum waiting time {max_wait_time:.2f}.\n")
            print("Ending the scaling benchmark now.")
            break

    return results

if __name__== "__main__":
    parser = argparse.ArgumentParser(description="Sphere Simulation Benchmark")
    parser.add_argument("--n-start", type=int, default=1, help="The number of particles are calculated like: `n_i = 1000 * i for i in (n_start, ..., n_end)`.")
    parser.add_argument("--n-end", type=int, default=8, help="The number of particles are calculated like: `n_i = 1000 * i for i in (n_start, ..., n_end)`.")
    parser.add_argument("-s", "--steps", type=int, default=20, help="Number of steps per run")
    parser.add_argument("-dt", "--dt", type=float, default=1e-3, help="Time step size")
    parser.add_argument("-c", "--cutoff", type=float, default=0.05, help="Cutoff distance of the pair interaction")
    parser.add_argument("-w", "--workers", type=int, default=1, help="Concurrent force sweeps")
    parser.add_argument("-m", "--method", type=str, choices=["cells", "brute", "all"], default="cells", help="Force method")
    parser.add_argument("--store-results", action="store_true", help="Store the results.")
    parser.add_argument("--store-plot", action="store_true", help="Store the performance plot.")
    args = parser.parse_args()

    MEASURE = {"cells": measure_time_cells, "brute": measure_time_brute}
    methods_to_run = MEASURE.keys() if args.method == "all" else [args.method]
    n_particles = [1000 * i for i in range(args.n_start, args.n_end + 1)]

    print("START SCALING BENCHMARK")
    print("-" * 40 + "\n" + "-" * 40 + "\n")

    for method in methods_to_run:
        print(f"Measure {method}...")
        results = run_scaling_benchmark(MEASURE[method], n_particles, dt=args.dt, steps=args.steps,
                                        cutoff=args.cutoff, workers=args.workers)

        if args.store_results or args.store_plot: report_folder = create_report(method)
        if args.store_results: store_results(report_folder, results["num_particles"], results["interactions_per_second"])
        if args.store_plot: plot_results(method, results["num_particles"], results["interactions_per_second"], report_folder)
        print("-" * 20 + "\n")

    print("END SCALING BENCHMARK")
    print("-" * 40 + "\n" + "-" * 40 + "\n")
