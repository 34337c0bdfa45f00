import numpy as np
import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation


def _draw_unit_sphere(ax, n_lines=24):
    u = np.linspace(0, 2 * np.pi, n_lines)
    v = np.linspace(0, np.pi, n_lines // 2)
    x = np.outer(np.cos(u), np.sin(v))
    y = np.outer(np.sin(u), np.sin(v))
    z = np.outer(np.ones_like(u), np.cos(v))
    ax.plot_wireframe(x, y, z, color='grey', lw=0.3, alpha=0.3)

def _setup_axes(ax):
    ax.set_xlim([-1.1, 1.1])
    ax.set_ylim([-1.1, 1.1])
    ax.set_zlim([-1.1, 1.1])
    ax.set_xlabel("X Position")
    ax.set_ylabel("Y Position")
    ax.set_zlabel("Z Position")
    ax.set_box_aspect((1, 1, 1))

def _as_points(positions):
    # Accepts both (N, 3) arrays and the flat xyz buffers of `visualise_positions`
    return np.asarray(positions, dtype=np.float64).reshape(-1, 3)

def plot_snapshot(positions, title="Particles on a Sphere", show=True):
    """
    Creates a static 3D scatter plot of the particles on the unit sphere.

    Args:
        positions (np.ndarray): (N, 3) array or flat (3N,) xyz buffer.
        title (str): The title for the plot.
    """
    points = _as_points(positions)

    fig = plt.figure(figsize=(10, 8))
    ax = fig.add_subplot(111, projection='3d')
    _draw_unit_sphere(ax)
    ax.scatter(points[:, 0], points[:, 1], points[:, 2], s=20)
    _setup_axes(ax)
    ax.set_title(title)

    if show:
        plt.show()
    return fig

def animate_simulation(positions_history, interval=30, show=True):
    """
    Creates a 3D animation of a run.

    Args:
        positions_history (np.ndarray): Shape (n_steps, n_particles, 3)
    """
    n_steps = positions_history.shape[0]

    fig = plt.figure(figsize=(10, 8))
    ax = fig.add_subplot(111, projection='3d')
    _draw_unit_sphere(ax)
    _setup_axes(ax)

    initial_data = _as_points(positions_history[0])
    scatter = ax.scatter(initial_data[:, 0], initial_data[:, 1], initial_data[:, 2], s=10)

    def update(frame):
        data = _as_points(positions_history[frame])
        scatter._offsets3d = (data[:, 0], data[:, 1], data[:, 2])
        ax.set_title(f"Sphere Simulation: Timestep {frame}")
        return scatter,

    anim = FuncAnimation(fig, update, frames=n_steps, interval=interval, blit=False, repeat=True)

    if show:
        plt.show()
    return anim
