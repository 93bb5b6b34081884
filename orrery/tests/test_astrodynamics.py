import unittest

import numpy as np
import jax.numpy as jnp
from numpy.testing import assert_allclose

from orrery import ConvergenceError, OrbitalElements
from orrery.astrodynamics import (
    elements_to_position,
    kepler_iterate,
    kepler_iterate_jax,
    mean_anomaly,
    normalize_degrees,
    orbit_ring,
    perifocal_to_ecliptic,
    solve_kepler,
    true_anomaly,
)
from orrery.constants import J2000_JD


def rot_z(angle):
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def rot_x(angle):
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


MERCURY_LIKE = OrbitalElements(a=0.387098, e=0.205635, i=7.004, Omega=48.331,
                               omega=29.124, M0=174.796, period=87.969)


class TestNormalizeDegrees(unittest.TestCase):

    def test_negative_angles_wrap_positive(self):
        assert_allclose(normalize_degrees(-30.0), 330.0)
        assert_allclose(normalize_degrees(-750.0), 330.0)

    def test_large_angles(self):
        assert_allclose(normalize_degrees(720.5), 0.5, atol=1e-12)
        assert_allclose(normalize_degrees(360.0), 0.0)

    def test_tiny_negative_never_returns_360(self):
        result = normalize_degrees(-1e-20)
        self.assertGreaterEqual(result, 0.0)
        self.assertLess(result, 360.0)

    def test_vectorized_jax(self):
        angles = np.array([-450.0, -1.0, 0.0, 359.5, 1e6])
        assert_allclose(np.asarray(normalize_degrees(jnp.asarray(angles), xp=jnp)),
                        normalize_degrees(angles), atol=1e-9)


class TestMeanAnomaly(unittest.TestCase):

    def test_at_epoch(self):
        assert_allclose(mean_anomaly(174.796, 87.969, J2000_JD), np.deg2rad(174.796))

    def test_after_whole_periods(self):
        M0 = 100.464
        period = 365.256
        assert_allclose(mean_anomaly(M0, period, J2000_JD + period), np.deg2rad(M0), atol=1e-9)
        assert_allclose(mean_anomaly(M0, period, J2000_JD - 3 * period), np.deg2rad(M0), atol=1e-9)

    def test_before_epoch_is_in_range(self):
        M = mean_anomaly(20.0, 686.98, J2000_JD - 12345.6)
        self.assertGreaterEqual(M, 0.0)
        self.assertLess(M, 2.0 * np.pi)

    def test_extreme_dates_are_finite(self):
        for jd in (1e300, -1e300, 1.7e308):
            M = mean_anomaly(256.228, 60189.0, jd)
            self.assertTrue(np.isfinite(M))
            self.assertGreaterEqual(M, 0.0)
            self.assertLess(M, 2.0 * np.pi)


class TestSolveKepler(unittest.TestCase):

    def test_circular_orbit(self):
        M = np.linspace(0.0, 2.0 * np.pi, 13)
        assert_allclose(solve_kepler(M, 0.0), M)

    def test_residual(self):
        M = np.linspace(0.0, 2.0 * np.pi, 37)
        for e in (0.0167, 0.0939, 0.205635, 0.25):
            E = solve_kepler(M, e)
            assert_allclose(E - e * np.sin(E), M, atol=1e-9,
                            err_msg=f"Kepler's equation not satisfied for e={e}")

    def test_scalar_input(self):
        E = solve_kepler(1.0, 0.1)
        self.assertEqual(np.shape(E), ())
        assert_allclose(E - 0.1 * np.sin(E), 1.0, atol=1e-12)

    def test_iteration_cap_raises(self):
        with self.assertRaises(ConvergenceError) as cm:
            solve_kepler(1.0, 0.2, max_iter=1)
        self.assertEqual(cm.exception.max_iter, 1)

    def test_nan_raises_with_names(self):
        with self.assertRaises(ConvergenceError) as cm:
            solve_kepler(np.array([1.0, np.nan]), 0.1, names=["Good", "Bad"])
        self.assertEqual(cm.exception.names, ("Bad",))
        self.assertIn("Bad", str(cm.exception))

    def test_converged_entries_are_frozen(self):
        # A circular entry converges on the first step and must not move afterward.
        M = np.array([0.5, 2.0])
        E, converged = kepler_iterate(M, np.array([0.0, 0.25]))
        self.assertTrue(converged.all())
        self.assertEqual(E[0], M[0])

    def test_jax_driver_matches_numpy(self):
        M = np.linspace(0.0, 2.0 * np.pi, 25)
        e = np.full_like(M, 0.205635)
        E_np, conv_np = kepler_iterate(M, e)
        E_jax, conv_jax = kepler_iterate_jax(jnp.asarray(M), jnp.asarray(e))
        assert_allclose(np.asarray(E_jax), E_np, atol=1e-12)
        self.assertTrue(np.all(np.asarray(conv_jax)))
        self.assertTrue(conv_np.all())

    def test_jax_driver_reports_nonconvergence(self):
        _, converged = kepler_iterate_jax(jnp.asarray([1.0]), jnp.asarray([0.2]), max_iter=1)
        self.assertFalse(bool(np.asarray(converged)[0]))


class TestTrueAnomaly(unittest.TestCase):

    def test_circular_equals_eccentric(self):
        E = np.linspace(-3.0, 3.0, 11)
        assert_allclose(true_anomaly(E, 0.0), E, atol=1e-12)

    def test_apsides(self):
        assert_allclose(true_anomaly(0.0, 0.2), 0.0, atol=1e-15)
        assert_allclose(true_anomaly(np.pi, 0.2), np.pi, atol=1e-12)

    def test_quadrant_preserved(self):
        # Past apoapsis the true anomaly keeps increasing through pi.
        nu = true_anomaly(np.array([3.0, 3.2]), 0.1)
        self.assertLess(nu[0], np.pi)
        self.assertGreater(nu[1], np.pi)


class TestPerifocalToEcliptic(unittest.TestCase):

    def test_zero_angles_is_identity(self):
        assert_allclose(perifocal_to_ecliptic(1.0, 2.0, 0.0, 0.0, 0.0), [1.0, 2.0, 0.0])

    def test_node_rotation(self):
        r = perifocal_to_ecliptic(1.0, 0.0, 0.0, np.pi / 2.0, 0.0)
        assert_allclose(r, [0.0, 1.0, 0.0], atol=1e-15)

    def test_inclination_tilts_y_into_z(self):
        r = perifocal_to_ecliptic(0.0, 1.0, np.pi / 2.0, 0.0, 0.0)
        assert_allclose(r, [0.0, 0.0, 1.0], atol=1e-15)

    def test_matches_euler_matrices(self):
        inc, raan, argp = np.deg2rad([7.004, 48.331, 29.124])
        x_p, y_p = 0.31, -0.22
        expected = rot_z(raan) @ rot_x(inc) @ rot_z(argp) @ np.array([x_p, y_p, 0.0])
        assert_allclose(perifocal_to_ecliptic(x_p, y_p, inc, raan, argp), expected, atol=1e-15)

    def test_preserves_length(self):
        x_p = np.array([0.3, -1.2, 5.0])
        y_p = np.array([0.4, 0.7, -2.0])
        r = perifocal_to_ecliptic(x_p, y_p, 0.3, 1.1, 2.5)
        assert_allclose(np.linalg.norm(r, axis=-1), np.hypot(x_p, y_p))


class TestElementsToPosition(unittest.TestCase):

    def test_distance_within_apsides(self):
        a, e = MERCURY_LIKE.a, MERCURY_LIKE.e
        for jd in np.linspace(J2000_JD - 200.0, J2000_JD + 200.0, 17):
            d = np.linalg.norm(elements_to_position(MERCURY_LIKE, jd))
            self.assertGreaterEqual(d, a * (1.0 - e) - 1e-12)
            self.assertLessEqual(d, a * (1.0 + e) + 1e-12)

    def test_periodic(self):
        r0 = elements_to_position(MERCURY_LIKE, J2000_JD)
        r1 = elements_to_position(MERCURY_LIKE, J2000_JD + MERCURY_LIKE.period)
        assert_allclose(r1, r0, atol=1e-9)

    def test_iteration_cap_raises(self):
        with self.assertRaises(ConvergenceError):
            elements_to_position(MERCURY_LIKE, J2000_JD, max_iter=1)


class TestOrbitRing(unittest.TestCase):

    def test_closed_ring_within_apsides(self):
        ring = orbit_ring(MERCURY_LIKE, num_points=64)
        self.assertEqual(ring.shape, (64, 3))
        assert_allclose(ring[-1], ring[0], atol=1e-12)

        d = np.linalg.norm(ring, axis=1)
        assert_allclose(d.min(), MERCURY_LIKE.a * (1.0 - MERCURY_LIKE.e), rtol=1e-12)
        self.assertLessEqual(d.max(), MERCURY_LIKE.a * (1.0 + MERCURY_LIKE.e) + 1e-12)

    def test_ring_passes_through_current_position(self):
        ring = orbit_ring(MERCURY_LIKE, num_points=4001)
        r = elements_to_position(MERCURY_LIKE, J2000_JD + 10.0)
        self.assertLess(np.min(np.linalg.norm(ring - r, axis=1)), 1e-3)

    def test_too_few_points(self):
        with self.assertRaises(ValueError):
            orbit_ring(MERCURY_LIKE, num_points=1)


if __name__ == '__main__':
    unittest.main()
