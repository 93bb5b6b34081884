"""
Orbital elements representation for the planets.
"""
from typing import NamedTuple


class OrbitalElements(NamedTuple):
    """
    Keplerian orbital elements of a planet about the Sun at J2000.0.

    Angles are stored in degrees as tabulated; the engine converts to radians
    internally.

    Attributes:
        a: Semi-major axis (AU)
        e: Eccentricity (dimensionless, 0 ≤ e < 1)
        i: Inclination to the ecliptic (deg)
        Omega: Longitude of the ascending node (deg)
        omega: Argument of periapsis (deg)
        M0: Mean anomaly at J2000.0 (deg)
        period: Sidereal orbital period (days)
    """
    a: float  # semi-major axis (AU)
    e: float  # eccentricity
    i: float  # inclination (deg)
    Omega: float  # longitude of ascending node (deg)
    omega: float  # argument of periapsis (deg)
    M0: float  # mean anomaly at J2000.0 (deg)
    period: float  # sidereal period (days)

    @property
    def mean_motion(self) -> float:
        """Mean motion in degrees per day."""
        return 360.0 / self.period
