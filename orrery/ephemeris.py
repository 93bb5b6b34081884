"""
Planet ephemeris: positions of the eight major planets at a Julian Date.

Two entry points evaluate the same kernel (astrodynamics.heliocentric_positions):

* compute_positions: interpreted NumPy evaluation.
* compute_positions_compiled: the kernel traced with jax.numpy and compiled
  by jax.jit into an XLA executable.

Both return identical planet states to within floating-point round-off.
"""
import functools
import logging
import math

import jax
import jax.numpy as jnp
import numpy as np

from orrery.astrodynamics import (
    heliocentric_positions,
    kepler_iterate,
    kepler_iterate_jax,
    orbit_ring,
    unconverged_names,
)
from orrery.bodies import elements_matrix, planets_data, validate_catalog
from orrery.config import (
    SCALE_DESCRIPTIONS,
    DistanceInfo,
    EngineConfig,
    make_engine_config,
)
from orrery.exceptions import ConvergenceError
from orrery.planet_state import PlanetState, Vector3

logger = logging.getLogger(__name__)


def _positions_native(elements, julian_date, tol, max_iter):
    return heliocentric_positions(elements, julian_date, tol, max_iter, xp=np, kepler=kepler_iterate)


@functools.partial(jax.jit, static_argnames=('max_iter',))
def _positions_compiled(elements, julian_date, tol, max_iter):
    return heliocentric_positions(elements, julian_date, tol, max_iter, xp=jnp, kepler=kepler_iterate_jax)


@functools.partial(jax.jit, static_argnames=('max_iter',))
def _positions_grid_compiled(elements, julian_dates, tol, max_iter):
    def at_date(julian_date):
        return heliocentric_positions(elements, julian_date, tol, max_iter, xp=jnp, kepler=kepler_iterate_jax)
    return jax.vmap(at_date)(julian_dates)


def _check_julian_date(julian_date) -> float:
    julian_date = float(julian_date)
    if not math.isfinite(julian_date):
        raise ValueError(f"julian_date must be finite, got {julian_date}")
    return julian_date


class Ephemeris:
    """
    Stateless position engine over a validated planet catalog.

    Parameters
    ----------
    planets : sequence of Planet, optional
        The catalog. Defaults to the packaged eight-planet catalog.
    config : EngineConfig, optional
        Scale mode and Kepler solver settings.

    Raises
    ------
    ConfigurationError
        If the catalog violates its invariants.

    Examples
    --------
    >>> eph = Ephemeris()
    >>> [p.name for p in eph.compute_positions(2451545.0)][:3]
    ['Mercury', 'Venus', 'Earth']
    """

    def __init__(self, planets=None, config=None):
        self.planets = validate_catalog(planets_data if planets is None else planets)
        self.config = EngineConfig() if config is None else config
        self.names = tuple(p.name for p in self.planets)
        self._elements = elements_matrix(self.planets)
        self._elements_jax = jnp.asarray(self._elements)
        logger.debug("Ephemeris constructed: %d planets, scale=%s (%.1f units/AU)",
                     len(self.planets), self.config.scale_mode.value, self.config.scale_factor)

    @property
    def scale_factor(self) -> float:
        return self.config.scale_factor

    def compute_positions(self, julian_date: float) -> list:
        """
        Planet states at a Julian Date, evaluated with NumPy.

        Args:
            julian_date: Any finite Julian Date (days).

        Returns:
            Eight PlanetState objects ordered Mercury to Neptune.

        Raises:
            ConvergenceError: if Kepler's equation fails to converge.
        """
        julian_date = _check_julian_date(julian_date)
        r, r_mag, converged = _positions_native(self._elements, julian_date,
                                                self.config.kepler_tol, self.config.kepler_max_iter)
        return self._build_states(r, r_mag, converged)

    def compute_positions_compiled(self, julian_date: float) -> list:
        """
        Planet states at a Julian Date, evaluated by the jax.jit compiled kernel.

        Behaves identically to compute_positions.
        """
        julian_date = _check_julian_date(julian_date)
        logger.debug("Evaluating compiled JAX kernel at JD %.6f", julian_date)
        r, r_mag, converged = _positions_compiled(self._elements_jax, julian_date,
                                                  self.config.kepler_tol, self.config.kepler_max_iter)
        return self._build_states(np.asarray(r), np.asarray(r_mag), np.asarray(converged))

    def compute_position_grid(self, julian_dates) -> np.ndarray:
        """
        Positions of every planet at many dates in one compiled call.

        Args:
            julian_dates: 1-D sequence of finite Julian Dates.

        Returns:
            Array of shape (n_dates, 8, 3) in scene units.
        """
        julian_dates = np.atleast_1d(np.asarray(julian_dates, dtype=np.float64))
        if julian_dates.ndim != 1:
            raise ValueError("julian_dates must be one-dimensional")
        if not np.all(np.isfinite(julian_dates)):
            raise ValueError("julian_dates must all be finite")

        logger.debug("Evaluating compiled JAX kernel over %d dates", julian_dates.size)
        r, _, converged = _positions_grid_compiled(self._elements_jax, jnp.asarray(julian_dates),
                                                   self.config.kepler_tol, self.config.kepler_max_iter)
        converged = np.asarray(converged)
        if not converged.all():
            self._raise_unconverged(converged.all(axis=0))
        return np.asarray(r) * self.scale_factor

    def orbit_path(self, name: str, num_points: int = 128) -> np.ndarray:
        """
        Closed orbit ring of a planet in scene units, shape (num_points, 3).
        """
        planet = next((p for p in self.planets if p.name.lower() == name.lower()), None)
        if planet is None:
            raise ValueError(f"Unknown planet '{name}'. Must be one of: {', '.join(self.names)}")
        return orbit_ring(planet.elements, num_points) * self.scale_factor

    def distance_info(self) -> DistanceInfo:
        """Scale in use and the outermost aphelion distance in scene units."""
        aphelion = max(p.elements.a * (1.0 + p.elements.e) for p in self.planets)
        return DistanceInfo(
            scale_mode=self.config.scale_mode,
            scale_factor=self.scale_factor,
            description=SCALE_DESCRIPTIONS[self.config.scale_mode],
            max_distance=aphelion * self.scale_factor,
        )

    def _raise_unconverged(self, converged):
        names = unconverged_names(converged, self.names)
        logger.error("Kepler solve did not converge in %d iterations for %s",
                     self.config.kepler_max_iter, ", ".join(names))
        raise ConvergenceError(names, self.config.kepler_max_iter)

    def _build_states(self, r, r_mag, converged) -> list:
        if not np.all(converged):
            self._raise_unconverged(converged)

        scale = self.scale_factor
        states = []
        for planet, pos, dist in zip(self.planets, r * scale, r_mag):
            states.append(PlanetState(
                name=planet.name,
                position=Vector3(x=float(pos[0]), y=float(pos[1]), z=float(pos[2])),
                radius=planet.visual_radius,
                orbit_radius=planet.elements.a * scale,
                color=planet.color,
                year_length_days=planet.year_length_days,
                moon_count=planet.moon_count,
                distance_from_sun_au=float(dist),
                orbit_speed=planet.orbit_speed,
                axial_tilt_deg=planet.axial_tilt_deg,
                day_length_hours=planet.day_length_hours,
                temperature_k=planet.temperature_k,
                mass_earths=planet.mass_earths,
                density_g_cm3=planet.density_g_cm3,
            ))
        return states


@functools.lru_cache(maxsize=None)
def _ephemeris_for(config: EngineConfig) -> Ephemeris:
    return Ephemeris(config=config)


def get_ephemeris(scale_mode=None) -> Ephemeris:
    """Shared engine over the packaged catalog for a scale mode."""
    return _ephemeris_for(make_engine_config(scale_mode))


def compute_positions(julian_date: float, scale_mode=None) -> list:
    """Planet states at a Julian Date (NumPy path). See Ephemeris.compute_positions."""
    return get_ephemeris(scale_mode).compute_positions(julian_date)


def compute_positions_compiled(julian_date: float, scale_mode=None) -> list:
    """Planet states at a Julian Date (compiled JAX path). See Ephemeris.compute_positions_compiled."""
    return get_ephemeris(scale_mode).compute_positions_compiled(julian_date)


def compute_position_grid(julian_dates, scale_mode=None) -> np.ndarray:
    """Positions at many dates, shape (n_dates, 8, 3). See Ephemeris.compute_position_grid."""
    return get_ephemeris(scale_mode).compute_position_grid(julian_dates)


def distance_info(scale_mode=None) -> DistanceInfo:
    return get_ephemeris(scale_mode).distance_info()
