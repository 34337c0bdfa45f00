import math
from numba import njit

# 3-vectors are plain (x, y, z) tuples of float64 inside the kernels.
VEC_ZERO = (0.0, 0.0, 0.0)

@njit(cache=True)
def vec_add(a, b):
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])

@njit(cache=True)
def vec_sub(a, b):
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])

@njit(cache=True)
def vec_scale(s, a):
    return (s * a[0], s * a[1], s * a[2])

@njit(cache=True)
def vec_dot(a, b):
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]

@njit(cache=True)
def vec_magnitude2(a):
    return a[0] * a[0] + a[1] * a[1] + a[2] * a[2]

@njit(cache=True)
def vec_magnitude(a):
    return math.sqrt(vec_magnitude2(a))

@njit(cache=True)
def vec_load(arr):
    """Reads a length-3 array field (e.g. ps[i]['r']) into a tuple."""
    return (arr[0], arr[1], arr[2])

@njit(cache=True)
def vec_store(arr, a):
    """Writes a tuple back into a length-3 array field."""
    arr[0] = a[0]
    arr[1] = a[1]
    arr[2] = a[2]

@njit(cache=True)
def vec_inc(arr, a):
    arr[0] += a[0]
    arr[1] += a[1]
    arr[2] += a[2]

@njit(cache=True)
def vec_dec(arr, a):
    arr[0] -= a[0]
    arr[1] -= a[1]
    arr[2] -= a[2]
