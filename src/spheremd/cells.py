"""
Cell grid for the neighbor search.

The box [-1, 1]^3 that embeds the unit sphere is divided into binning^3 equally
spaced cells. Each cell holds the index of its first particle, or -1 if it is
empty; further particles of the same cell are chained through the `next` field
of the particle records and the chain ends with -1:

    i = cells.heads[x + L*y + L*L*z]
    while i != -1:
        ...
        i = ps[i]['next']

See: https://en.wikipedia.org/wiki/Cell_lists
"""

import math
import numpy as np
from numba import njit

# Edge length of the box that embeds the sphere with R = 1
BOX_LENGTH = 2.0


class Cells:
    def __init__(self, binning, num_particles):
        self.binning = binning
        self.num_particles = num_particles
        self.dr = BOX_LENGTH / binning
        self.num_cells = binning * binning * binning
        self.heads = np.empty(self.num_cells, dtype=np.int64)

    def __repr__(self):
        return f"Cells(binning={self.binning}, num_cells={self.num_cells}, dr={self.dr:.4f})"


def cells_new(binning, num_particles):
    return Cells(binning, num_particles)

def cells_free(cells):
    cells.heads = None

def cells_clear(cells):
    cells.heads[:] = -1


@njit(cache=True)
def populate_cells_kernel(n, ps, heads, binning, dr):
    L = binning
    L2 = L * L
    for i in range(n):
        r = ps[i]['r']
        # A coordinate of exactly +1.0 would land in bin L, clamp it back into the box
        bin_x = max(0, min(int(math.floor((r[0] + 1.0) / dr)), L - 1))
        bin_y = max(0, min(int(math.floor((r[1] + 1.0) / dr)), L - 1))
        bin_z = max(0, min(int(math.floor((r[2] + 1.0) / dr)), L - 1))
        cell = bin_x + bin_y * L + bin_z * L2
        ps[i]['next'] = heads[cell]
        heads[cell] = i

def populate_cells(n, ps, cells):
    """Clears the grid and threads particles 0..n-1 into their cells.
    Within a cell the list runs in reverse insertion order.
    """
    cells_clear(cells)
    populate_cells_kernel(n, ps, cells.heads, cells.binning, cells.dr)
