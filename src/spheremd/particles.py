"""
Particle storage and array utilities
=======================================
Particles live in a numpy structured array so that the numba kernels can walk
them as records. The layout of one record (``PARTICLE_DTYPE``, aligned, 80 bytes):

    offset  0: r    float64[3]   position on the unit sphere
    offset 24: v    float64[3]   velocity, tangent to the sphere
    offset 48: a    float64[3]   acceleration accumulated by the force sweep
    offset 72: next int64        linked-list scratch used by the cell grid

Embedders that share the buffer across an ABI boundary can rely on this layout,
``PARTICLE_DTYPE.itemsize`` and ``PARTICLE_DTYPE.fields`` give the same numbers.

Statistics of a force sweep are collected in a one-element array of ``STATS_DTYPE``
which the caller owns and zeroes with ``reset_stats`` at the start of a measurement.
"""

import numpy as np
from numba import njit

from spheremd.vector import vec_inc, vec_load, vec_magnitude2

PARTICLE_DTYPE = np.dtype([
    ('r', np.float64, (3,)),
    ('v', np.float64, (3,)),
    ('a', np.float64, (3,)),
    ('next', np.int64),
], align=True)

STATS_DTYPE = np.dtype([
    ('ww_counter', np.int64),       # candidate pairs handed to the kernel
    ('real_ww_counter', np.int64),  # pairs inside the cutoff
    ('E_pot', np.float64),
], align=True)


def new_particles(positions, velocities=None):
    """Builds a particle array from (N, 3) positions and optional (N, 3) velocities."""
    positions = np.asarray(positions, dtype=np.float64)
    ps = np.zeros(positions.shape[0], dtype=PARTICLE_DTYPE)
    ps['r'] = positions
    if velocities is not None:
        ps['v'] = np.asarray(velocities, dtype=np.float64)
    ps['next'] = -1
    return ps

def new_stats():
    return np.zeros(1, dtype=STATS_DTYPE)

def reset_stats(stats):
    stats[0] = (0, 0, 0.0)

def collect_stats(accu, part):
    """Adds the counters and energy of `part` into `accu`."""
    accu['ww_counter'][0] += part['ww_counter'][0]
    accu['real_ww_counter'][0] += part['real_ww_counter'][0]
    accu['E_pot'][0] += part['E_pot'][0]


def copy_particles(n, src, dst):
    """Bulk copy of the first n particle records, including `next`."""
    dst[:n] = src[:n]

@njit(cache=True, nogil=True)
def collect_forces(n, accu, part):
    """Adds the accelerations of a partial sweep into the authoritative array.
    Positions, velocities and `next` of `part` are ignored.
    """
    for i in range(n):
        vec_inc(accu[i]['a'], vec_load(part[i]['a']))

@njit(cache=True, nogil=True)
def visualise_positions(n, ps, out):
    """Writes the positions as 3n interleaved doubles (x0, y0, z0, x1, ...) into `out`."""
    for i in range(n):
        r = ps[i]['r']
        out[3 * i] = r[0]
        out[3 * i + 1] = r[1]
        out[3 * i + 2] = r[2]

@njit(cache=True)
def kinetic_energy(ps):
    """E_kin = 1/2 sum |v|^2, all particles have unit mass."""
    e_kin = 0.0
    for i in range(ps.shape[0]):
        e_kin += 0.5 * vec_magnitude2(vec_load(ps[i]['v']))
    return e_kin
