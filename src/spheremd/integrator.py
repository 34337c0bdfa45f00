import math
from numba import njit

from spheremd.vector import VEC_ZERO, vec_add, vec_dot, vec_inc, vec_load, vec_magnitude2, vec_scale, vec_store

@njit(cache=True)
def advance(n, ps, dt):
    """
    Velocity Verlet predictor with RATTLE position constraint (sphere with R = 1).
    v(t+dt/2) = v(t) + 0.5 * a(t) * dt
    r(t+dt)   = r(t) + v(t+dt/2) * dt, then projected back along r(t)
    Clears the accelerations for the following force sweep.
    """
    dt_half = 0.5 * dt
    for i in range(n):
        p = ps[i]
        old_r = vec_load(p['r'])
        v = vec_add(vec_load(p['v']), vec_scale(dt_half, vec_load(p['a'])))
        r = vec_add(old_r, vec_scale(dt, v))
        vec_store(p['a'], VEC_ZERO)

        # RATTLE_r: solve (r + lambda * old_r)^2 = 1 for the root closest to old_r.
        # The sqrt argument only goes negative if dt is far too large.
        r0_dot_r = vec_dot(old_r, r)
        r_sqr = vec_magnitude2(r)
        lam = -r0_dot_r + math.sqrt(1.0 - r_sqr + r0_dot_r * r0_dot_r)

        vec_store(p['r'], vec_add(r, vec_scale(lam, old_r)))
        vec_store(p['v'], vec_add(v, vec_scale(lam / dt, old_r)))

@njit(cache=True)
def correct(n, ps, dt):
    """
    Velocity Verlet corrector with RATTLE velocity constraint.
    v(t+dt) = v(t+dt/2) + 0.5 * a(t+dt) * dt, then made tangent to the sphere.
    """
    dt_half = 0.5 * dt
    for i in range(n):
        p = ps[i]
        vec_inc(p['v'], vec_scale(dt_half, vec_load(p['a'])))
        # RATTLE_v
        r = vec_load(p['r'])
        lam = -vec_dot(vec_load(p['v']), r)
        vec_inc(p['v'], vec_scale(lam, r))
