import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.animation import FuncAnimation

from spheremd.particles import new_particles, visualise_positions
from spheremd.util import generate_fibonacci_sphere
from spheremd.visualization import animate_simulation, plot_snapshot

def test_plot_snapshot_from_flat_buffer():
    n = 30
    ps = new_particles(generate_fibonacci_sphere(n))
    flat = np.zeros(3 * n)
    visualise_positions(n, ps, flat)

    fig = plot_snapshot(flat, title="snapshot", show=False)

    ax = fig.axes[0]
    assert ax.get_title() == "snapshot"
    plt.close(fig)

def test_animate_simulation():
    history = np.stack([generate_fibonacci_sphere(20)] * 5)

    anim = animate_simulation(history, interval=10, show=False)

    assert isinstance(anim, FuncAnimation)
    plt.close("all")
