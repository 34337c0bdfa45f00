import csv
import matplotlib
matplotlib.use("Agg")
import pytest

from spheremd.benchmark.benchmark import measure_time_brute, measure_time_cells, run_scaling_benchmark
from spheremd.benchmark.util import create_report, plot_results, store_results
from spheremd.util import generate_fibonacci_sphere, random_tangent_velocities

def test_measure_time_cells():
    pos = generate_fibonacci_sphere(200)
    vel = random_tangent_velocities(pos, scale=0.5, seed=1)

    steps, total_time, steps_per_second, interactions_per_second = measure_time_cells(pos, vel, dt=1e-3, steps=3, workers=2)

    assert steps == 3
    assert total_time > 0.0
    assert steps_per_second == pytest.approx(3 / total_time)
    assert interactions_per_second > 0.0

def test_measure_time_brute_counts_all_pairs():
    n = 100
    pos = generate_fibonacci_sphere(n)
    vel = random_tangent_velocities(pos, scale=0.5, seed=1)

    steps, total_time, _, interactions_per_second = measure_time_brute(pos, vel, dt=1e-3, steps=2)

    assert interactions_per_second * total_time == pytest.approx(steps * n * (n - 1) / 2)

def test_run_scaling_benchmark():
    results = run_scaling_benchmark(measure_time_cells, [50, 100], dt=1e-3, steps=2)
    assert results["num_particles"] == [50, 100]
    assert len(results["interactions_per_second"]) == 2

def test_reports(tmp_path):
    report_folder = create_report("cells", report_base_dir=tmp_path)
    assert report_folder.is_dir()

    csv_path = store_results(report_folder, [100, 200], [1.0e6, 2.0e6])
    with csv_path.open() as f:
        rows = list(csv.reader(f))
    assert rows == [["N", "Interactions_Per_Sec"], ["100", "1000000.0"], ["200", "2000000.0"]]

    img_path = plot_results("cells", [100, 200], [1.0e6, 2.0e6], report_folder)
    assert img_path.exists()

def test_measure_time_cells_rejects_too_fine_grid():
    pos = generate_fibonacci_sphere(500)
    vel = random_tangent_velocities(pos, scale=0.5, seed=1)

    with pytest.raises(ValueError, match="smaller than the cutoff"):
        measure_time_cells(pos, vel, dt=1e-3, steps=1, cutoff=0.3, binning=10)

def test_measure_time_brute_ignores_grid():
    pos = generate_fibonacci_sphere(50)
    vel = random_tangent_velocities(pos, scale=0.5, seed=1)

    steps, _, _, _ = measure_time_brute(pos, vel, dt=1e-3, steps=1, cutoff=0.3, binning=10)
    assert steps == 1
