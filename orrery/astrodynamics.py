"""
Two-body orbital geometry for the planet ephemeris.

Every function here takes an array namespace ``xp`` (``numpy`` or
``jax.numpy``) so that the interpreted and the compiled ephemeris share one
implementation. Only the Kepler iteration driver differs between the two,
because a Python loop cannot be traced by ``jax.jit``.
"""
import jax
import jax.numpy as jnp
import numpy as np

from orrery.constants import J2000_JD, KEPLER_MAX_ITER, KEPLER_TOL
from orrery.exceptions import ConvergenceError
from orrery.orbital_elements import OrbitalElements


def normalize_degrees(angle, xp=np):
    """
    Wrap an angle in degrees into [0, 360).

    The outer modulo catches the case where a tiny negative input rounds
    ``angle % 360`` up to exactly 360.
    """
    return xp.mod(xp.mod(angle, 360.0) + 360.0, 360.0)


def mean_anomaly(M0, period, julian_date, xp=np):
    """
    Mean anomaly in radians at a Julian Date.

    Args:
        M0: Mean anomaly at J2000.0 (deg)
        period: Sidereal orbital period (days)
        julian_date: Julian Date (days)

    Returns:
        Mean anomaly in [0, 2*pi).

    Note:
        M = M0 + n * dt with n = 360 / period, evaluated as
        M0 + 360 * frac(dt / period) so that the phase never overflows for
        dates far from the epoch.
    """
    dt = julian_date - J2000_JD
    revolutions = xp.mod(dt / period, 1.0)
    return xp.deg2rad(normalize_degrees(M0 + 360.0 * revolutions, xp))


def kepler_newton_step(E, M, e, xp=np):
    """
    Newton-Raphson correction for Kepler's equation M = E - e*sin(E).

    Returns the amount to subtract from E.
    """
    f = E - e * xp.sin(E) - M
    fp = 1.0 - e * xp.cos(E)
    return f / fp


def kepler_iterate(M, e, tol=KEPLER_TOL, max_iter=KEPLER_MAX_ITER):
    """
    Iterate Kepler's equation with NumPy.

    Entries whose correction fell below ``tol`` are frozen, and iteration
    stops once every entry has converged or ``max_iter`` is reached.

    Returns:
        (E, converged) arrays with the shape of M.
    """
    M = np.asarray(M, dtype=np.float64)
    e = np.broadcast_to(np.asarray(e, dtype=np.float64), M.shape)

    E = M
    converged = np.zeros(M.shape, dtype=bool)
    with np.errstate(divide='ignore', invalid='ignore'):
        for _ in range(max_iter):
            delta = kepler_newton_step(E, M, e)
            E = np.where(converged, E, E - delta)
            converged = converged | (np.abs(delta) < tol)
            if converged.all():
                break
    return E, converged


def kepler_iterate_jax(M, e, tol=KEPLER_TOL, max_iter=KEPLER_MAX_ITER):
    """
    Iterate Kepler's equation with jax.lax.while_loop (JIT compatible).

    Performs the same per-entry updates and stopping rule as kepler_iterate.
    ``max_iter`` must be a static Python int when traced.

    Returns:
        (E, converged) arrays with the shape of M.
    """
    M = jnp.asarray(M, dtype=jnp.float64)
    e = jnp.broadcast_to(jnp.asarray(e, dtype=jnp.float64), M.shape)

    def cond_fn(carry):
        k, _, converged = carry
        return (k < max_iter) & ~jnp.all(converged)

    def body_fn(carry):
        k, E, converged = carry
        delta = kepler_newton_step(E, M, e, xp=jnp)
        E = jnp.where(converged, E, E - delta)
        return k + 1, E, converged | (jnp.abs(delta) < tol)

    init = (jnp.array(0, dtype=jnp.int32), M, jnp.zeros(M.shape, dtype=bool))
    _, E, converged = jax.lax.while_loop(cond_fn, body_fn, init)
    return E, converged


def solve_kepler(M, e, tol=KEPLER_TOL, max_iter=KEPLER_MAX_ITER, names=None):
    """
    Solve Kepler's equation M = E - e*sin(E) for the eccentric anomaly E.

    Args:
        M: Mean anomaly (rad), scalar or array
        e: Eccentricity, scalar or array broadcastable to M
        tol: Convergence tolerance on |E_{k+1} - E_k| (rad)
        max_iter: Iteration cap
        names: Optional labels for the entries of M, used in the error message

    Returns:
        Eccentric anomaly (rad) with the shape of M.

    Raises:
        ConvergenceError: if any entry has not converged after max_iter iterations.
    """
    E, converged = kepler_iterate(M, e, tol=tol, max_iter=max_iter)
    if not converged.all():
        raise ConvergenceError(unconverged_names(converged, names), max_iter)
    return E[()]


def unconverged_names(converged, names=None):
    flat = np.ravel(converged)
    if names is None:
        names = [f"#{k}" for k in range(flat.size)]
    return [name for name, ok in zip(names, flat) if not ok]


def true_anomaly(E, e, xp=np):
    """True anomaly (rad) from the eccentric anomaly, quadrant-preserving."""
    return 2.0 * xp.arctan2(
        xp.sqrt(1.0 + e) * xp.sin(E / 2.0),
        xp.sqrt(1.0 - e) * xp.cos(E / 2.0)
    )


def orbital_radius(a, e, E, xp=np):
    """Distance from the focus, in the units of a."""
    return a * (1.0 - e * xp.cos(E))


def perifocal_to_ecliptic(x_p, y_p, inc, raan, argp, xp=np):
    """
    Rotate in-plane perifocal coordinates into the heliocentric ecliptic frame.

    Applies R_z(raan) @ R_x(inc) @ R_z(argp) to (x_p, y_p, 0).

    Args:
        x_p, y_p: Perifocal coordinates (x toward periapsis)
        inc: Inclination (rad)
        raan: Longitude of the ascending node (rad)
        argp: Argument of periapsis (rad)

    Returns:
        Array of shape (..., 3).
    """
    cos_raan = xp.cos(raan)
    sin_raan = xp.sin(raan)
    cos_argp = xp.cos(argp)
    sin_argp = xp.sin(argp)
    cos_i = xp.cos(inc)
    sin_i = xp.sin(inc)

    x = (cos_raan * cos_argp - sin_raan * sin_argp * cos_i) * x_p + \
        (-cos_raan * sin_argp - sin_raan * cos_argp * cos_i) * y_p
    y = (sin_raan * cos_argp + cos_raan * sin_argp * cos_i) * x_p + \
        (-sin_raan * sin_argp + cos_raan * cos_argp * cos_i) * y_p
    z = (sin_argp * sin_i) * x_p + (cos_argp * sin_i) * y_p

    return xp.stack([x, y, z], axis=-1)


def heliocentric_positions(elements, julian_date, tol=KEPLER_TOL, max_iter=KEPLER_MAX_ITER,
                           xp=np, kepler=kepler_iterate):
    """
    Heliocentric ecliptic positions of a set of bodies at a Julian Date.

    Parameters
    ----------
    elements : array
        Shape (n, 7); each row is [a, e, i, Omega, omega, M0, period] in AU,
        degrees and days.
    julian_date : float
        The Julian Date at which positions are requested.
    tol, max_iter
        Kepler solver tolerance (rad) and iteration cap.
    xp : module
        Array namespace, ``numpy`` or ``jax.numpy``.
    kepler : callable
        Kepler driver matching ``xp``: kepler_iterate or kepler_iterate_jax.

    Returns
    -------
    r : array
        Positions, shape (n, 3), AU.
    r_mag : array
        Distances from the Sun, shape (n,), AU.
    converged : array
        Boolean convergence flag of the Kepler solve per body, shape (n,).
    """
    a, e = elements[:, 0], elements[:, 1]
    inc = xp.deg2rad(elements[:, 2])
    raan = xp.deg2rad(elements[:, 3])
    argp = xp.deg2rad(elements[:, 4])
    M0, period = elements[:, 5], elements[:, 6]

    M = mean_anomaly(M0, period, julian_date, xp)
    E, converged = kepler(M, e, tol=tol, max_iter=max_iter)

    theta = true_anomaly(E, e, xp)
    r_mag = orbital_radius(a, e, E, xp)

    # Position in orbital plane
    x_p = r_mag * xp.cos(theta)
    y_p = r_mag * xp.sin(theta)

    r = perifocal_to_ecliptic(x_p, y_p, inc, raan, argp, xp)
    return r, r_mag, converged


def elements_to_position(elements: OrbitalElements, julian_date: float,
                         tol: float = KEPLER_TOL, max_iter: int = KEPLER_MAX_ITER) -> np.ndarray:
    """
    Heliocentric ecliptic position (AU) of a single body at a Julian Date.

    Raises:
        ConvergenceError: if Kepler's equation does not converge.
    """
    matrix = np.array([tuple(elements)], dtype=np.float64)
    r, _, converged = heliocentric_positions(matrix, julian_date, tol=tol, max_iter=max_iter)
    if not converged.all():
        raise ConvergenceError(unconverged_names(converged), max_iter)
    return r[0]


def orbit_ring(elements: OrbitalElements, num_points: int = 128) -> np.ndarray:
    """
    Sample the closed orbit ellipse of a body.

    Points are spaced uniformly in eccentric anomaly, and the first and last
    points coincide.

    Returns:
        Array of shape (num_points, 3), AU, heliocentric ecliptic frame.
    """
    if num_points < 2:
        raise ValueError("num_points must be at least 2")
    a, e = elements.a, elements.e
    E = np.linspace(0.0, 2.0 * np.pi, num_points)

    x_p = a * (np.cos(E) - e)
    y_p = a * np.sqrt(1.0 - e**2) * np.sin(E)

    return perifocal_to_ecliptic(x_p, y_p,
                                 np.deg2rad(elements.i),
                                 np.deg2rad(elements.Omega),
                                 np.deg2rad(elements.omega))
