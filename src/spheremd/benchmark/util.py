import csv
from datetime import datetime
import matplotlib.pyplot as plt

from pathlib import Path

def print_results(total_time, steps_per_second, interactions_per_second):
    print("-" * 30)
    print(f"Total Runtime:            {total_time:.4f} seconds")
    print(f"Performance Steps:        {steps_per_second:.2f} steps/second")
    print(f"Performance Interactions: {interactions_per_second:.2f} interactions/second")
    print("-" * 30, "\n")

def create_report(method, report_base_dir="scaling_reports"):
    """
    Creates a timestamped folder for the benchmark data.
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M")
    report_folder = Path(report_base_dir) / f"{method}_{timestamp}"
    report_folder.mkdir(parents=True, exist_ok=True)

    return report_folder

def store_results(report_folder, n_values, interactions_values):
    file_path = Path(report_folder) / "scaling_results.csv"
    with file_path.open(mode='w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(["N", "Interactions_Per_Sec"])
        for n, interaction in zip(n_values, interactions_values):
            writer.writerow([n, interaction])
    print(f"\nBenchmark data saved to: {file_path.resolve()}")

    return file_path

def plot_results(method, n_values, interactions_values, report_folder):
    """
    Plots N vs Interactions Per Second.
    """
    fig = plt.figure(figsize=(10, 6))

    plt.plot(n_values, interactions_values, marker='o', linestyle='-', color='b', label=method)

    plt.title('Sphere Simulation Performance: Scaling with N', fontsize=14)
    plt.xlabel('Number of Particles (N)', fontsize=12)
    plt.ylabel('Pair Candidates per Second', fontsize=12)
    plt.grid(True, which="both", ls="--", alpha=0.5)
    plt.legend()

    # Use Scientific Notation for Y-axis if numbers are huge
    plt.ticklabel_format(style='sci', axis='y', scilimits=(0,0))

    img_path = Path(report_folder) / f'sphere_scaling_{method}.png'
    plt.savefig(img_path)
    plt.close(fig)
    print(f"\nPlot saved to {img_path}")

    return img_path
