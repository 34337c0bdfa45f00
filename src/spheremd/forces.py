import math
from numba import njit

from spheremd.vector import vec_add, vec_dec, vec_inc, vec_load, vec_magnitude2, vec_scale, vec_sub

# --- PAIR INTERACTION ---
@njit(cache=True)
def pair_potential(r, cutoff):
    """Shifted Coulomb potential U(r) = 1/r + r/rc^2 - 2/rc, zero with zero slope at rc."""
    return 1.0 / r + r / (cutoff * cutoff) - 2.0 / cutoff

@njit(cache=True)
def pair_force_magnitude(r, cutoff):
    """Repulsive force F(r) = -dU/dr = 1/r^2 - 1/rc^2."""
    return 1.0 / (r * r) - 1.0 / (cutoff * cutoff)

@njit(cache=True, nogil=True)
def pair_force(ps, i, j, cutoff, gamma, stats):
    """
    Adds the interaction of particles i and j to their accelerations and to `stats`.
    Coincident particles (r = 0) are not guarded against and give non-finite results.
    """
    p = ps[i]
    q = ps[j]
    dr = vec_sub(vec_load(p['r']), vec_load(q['r']))
    r2 = vec_magnitude2(dr)
    stats[0]['ww_counter'] += 1
    if r2 >= cutoff * cutoff:
        return

    r = math.sqrt(r2)
    stats[0]['real_ww_counter'] += 1
    stats[0]['E_pot'] += pair_potential(r, cutoff)
    force = vec_scale(pair_force_magnitude(r, cutoff) / r, dr)

    # Damping uses v(t + dt/2), v(t + dt) is not known yet. It only serves to
    # cool the system down and is not a thermostat.
    dv = vec_sub(vec_load(p['v']), vec_load(q['v']))
    force = vec_add(force, vec_scale(-gamma, dv))

    # Still the full 3d force, the integrator removes the normal component
    vec_inc(p['a'], force)
    vec_dec(q['a'], force)


# --- CELL LIST SWEEP ---
@njit(cache=True, nogil=True)
def calc_forces_kernel(ps, heads, binning, cell0, cell1, cutoff, gamma, stats):
    L = binning
    L2 = L * L

    # No periodic boundary conditions
    for z in range(L):
        for y in range(L):
            for x in range(L):
                this_cell = x + L * y + L2 * z
                if heads[this_cell] == -1:
                    continue
                if this_cell < cell0 or this_cell >= cell1:
                    continue
                for nz in range(max(0, z - 1), min(L, z + 2)):
                    for ny in range(max(0, y - 1), min(L, y + 2)):
                        for nx in range(max(0, x - 1), min(L, x + 2)):
                            other_cell = nx + L * ny + L2 * nz
                            # each cell pair only once
                            if this_cell > other_cell:
                                continue
                            if this_cell == other_cell:
                                i = heads[this_cell]
                                while i != -1:
                                    j = ps[i]['next']
                                    while j != -1:
                                        pair_force(ps, i, j, cutoff, gamma, stats)
                                        j = ps[j]['next']
                                    i = ps[i]['next']
                            else:
                                i = heads[this_cell]
                                while i != -1:
                                    j = heads[other_cell]
                                    while j != -1:
                                        pair_force(ps, i, j, cutoff, gamma, stats)
                                        j = ps[j]['next']
                                    i = ps[i]['next']

def calc_forces(ps, cells, cell0, cell1, cutoff, gamma, stats):
    """
    Accumulates pair forces for all pairs whose primary (lower-index) cell lies in
    [cell0, cell1). The grid must have been populated from the same positions and
    its cell edge must be at least the cutoff, otherwise pairs are silently missed.
    """
    calc_forces_kernel(ps, cells.heads, cells.binning, cell0, cell1, cutoff, gamma, stats)


# --- BRUTE FORCE SWEEP ---
@njit(cache=True, nogil=True)
def calc_brute_forces(n, ps, first, last, cutoff, gamma, stats):
    """
    O(N^2) upper-triangle sweep over pairs (i, j) with first <= i < last and i < j < n.
    Reference for the cell list and fallback for tiny systems.
    """
    for i in range(first, last):
        for j in range(i + 1, n):
            pair_force(ps, i, j, cutoff, gamma, stats)
