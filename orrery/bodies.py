import csv
import logging
import math
import re
from pathlib import Path

import numpy as np
import pydantic
from pydantic import ConfigDict, field_validator

from orrery.constants import DAYS_PER_YEAR, NUM_PLANETS, PLANET_NAMES
from orrery.exceptions import ConfigurationError
from orrery.orbital_elements import OrbitalElements

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#[0-9a-f]{6}$")


def check_elements(elements: OrbitalElements) -> OrbitalElements:
    """
    Check that a set of orbital elements describes a closed orbit.

    Raises:
        ValueError: if an element is non-finite, a <= 0, e is outside
            [0, 1), or the period is not positive.
    """
    if not all(math.isfinite(x) for x in elements):
        raise ValueError("orbital elements must be finite")
    if elements.a <= 0.0:
        raise ValueError("semi-major axis must be positive")
    if not 0.0 <= elements.e < 1.0:
        raise ValueError("eccentricity must satisfy 0 <= e < 1")
    if elements.period <= 0.0:
        raise ValueError("orbital period must be positive")
    return elements


class Planet(pydantic.BaseModel):
    """
    Represents one of the eight major planets in the catalog.

    Attributes:
        name: Name of the planet (e.g., "Mercury")
        elements: Orbital elements of the planet at J2000.0
        visual_radius: Display radius in scene units (Earth = 1.0, exaggerated)
        color: Display color as lowercase "#rrggbb"
        moon_count: Number of known moons
        year_length_days: Length of the planet's year in Earth days
        axial_tilt_deg: Obliquity of the rotation axis (deg)
        day_length_hours: Length of a solar day (hours)
        temperature_k: Mean surface temperature (K)
        mass_earths: Mass in Earth masses
        density_g_cm3: Mean density (g/cm^3)
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)  # Allow OrbitalElements (NamedTuple)

    name: str
    elements: OrbitalElements
    visual_radius: float = pydantic.Field(..., gt=0.0)
    color: str
    moon_count: int = pydantic.Field(..., ge=0)
    year_length_days: float = pydantic.Field(..., gt=0.0)
    axial_tilt_deg: float = 0.0
    day_length_hours: float = 0.0
    temperature_k: float = 0.0
    mass_earths: float = 0.0
    density_g_cm3: float = 0.0

    @field_validator('elements')
    @classmethod
    def validate_elements(cls, v):
        return check_elements(v)

    @field_validator('color')
    @classmethod
    def validate_color(cls, v):
        if not _HEX_COLOR.match(v):
            raise ValueError(f"color must be a lowercase #rrggbb hex string, got {v!r}")
        return v

    @property
    def orbit_speed(self) -> float:
        """Orbital angular speed relative to Earth's."""
        return DAYS_PER_YEAR / self.year_length_days

    def get_period(self, units: str = 'days') -> float:
        """
        Return the sidereal orbital period.

        Args:
            units: 'days' (default) or 'years' (Julian years)
        """
        units_lower = units.lower()
        if units_lower in ('d', 'day', 'days'):
            return self.elements.period
        elif units_lower in ('year', 'years'):
            return self.elements.period / DAYS_PER_YEAR
        else:
            raise ValueError(f"Invalid units '{units}'. Must be one of: 'days', 'years'")

    def get_position(self, julian_date: float) -> np.ndarray:
        """
        Heliocentric ecliptic position of the planet in AU at a Julian Date.

        Examples:
            >>> earth = planets_by_name['Earth']
            >>> r = earth.get_position(2451545.0)
            >>> r.shape
            (3,)
        """
        from orrery.astrodynamics import elements_to_position

        return elements_to_position(self.elements, julian_date)

    def __repr__(self) -> str:
        return f"Planet(name='{self.name}', a={self.elements.a})"

    def __str__(self) -> str:
        return self.name


def validate_catalog(planets) -> tuple:
    """
    Check the catalog-level invariants and return the planets as a tuple.

    The catalog must hold exactly the eight major planets, each named once,
    in strictly increasing order of semi-major axis. Each planet's elements
    are checked again here, since copies made with model_copy(update=...)
    skip the field validators.

    Raises:
        ConfigurationError: if any invariant is violated.
    """
    planets = tuple(planets)
    if len(planets) != NUM_PLANETS:
        raise ConfigurationError(f"Expected {NUM_PLANETS} planets, got {len(planets)}")

    for planet in planets:
        try:
            check_elements(planet.elements)
        except ValueError as err:
            raise ConfigurationError(f"Invalid orbital elements for {planet.name}: {err}") from err

    names = [p.name for p in planets]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate planet names: {', '.join(duplicates)}")

    missing = [n for n in PLANET_NAMES if n not in names]
    if missing:
        raise ConfigurationError(f"Missing planets: {', '.join(missing)}")

    for inner, outer in zip(planets[:-1], planets[1:]):
        if not inner.elements.a < outer.elements.a:
            raise ConfigurationError(
                f"Planets must be ordered by semi-major axis: {inner.name} "
                f"(a={inner.elements.a}) is not inside {outer.name} (a={outer.elements.a})"
            )

    return planets


def elements_matrix(planets) -> np.ndarray:
    """
    Stack the orbital elements of each planet into a read-only array.

    Returns:
        Array of shape (n, 7); each row is [a, e, i, Omega, omega, M0, period]
        in AU, degrees and days.
    """
    matrix = np.array([tuple(p.elements) for p in planets], dtype=np.float64)
    matrix.setflags(write=False)
    return matrix


def load_planets_data(filepath=None) -> tuple:
    """
    Load the planet catalog from CSV.

    Args:
        filepath: CSV file to read. Defaults to the catalog shipped in the
            package's data directory.

    Returns:
        Tuple of Planet objects ordered by distance from the Sun.

    Raises:
        ConfigurationError: if a row is malformed or the catalog is invalid.
    """
    if filepath is None:
        filepath = Path(__file__).parent / 'data' / 'planets.csv'
    filepath = Path(filepath)

    planets = []
    with open(filepath, 'r', encoding='utf-8', newline='') as f:
        reader = csv.DictReader(f)
        for row in reader:
            try:
                elements = OrbitalElements(
                    a=float(row['Semi-Major Axis (AU)']),
                    e=float(row['Eccentricity ()']),
                    i=float(row['Inclination (deg)']),
                    Omega=float(row['Longitude of the Ascending Node (deg)']),
                    omega=float(row['Argument of Periapsis (deg)']),
                    M0=float(row['Mean Anomaly at J2000 (deg)']),
                    period=float(row['Orbital Period (days)']),
                )

                planet = Planet(
                    name=row['Name'].strip(),
                    elements=elements,
                    visual_radius=float(row['Visual Radius ()']),
                    color=row['Color'].strip(),
                    moon_count=int(row['Moons']),
                    year_length_days=float(row['Year Length (days)']),
                    axial_tilt_deg=float(row['Axial Tilt (deg)']),
                    day_length_hours=float(row['Day Length (hours)']),
                    temperature_k=float(row['Temperature (K)']),
                    mass_earths=float(row['Mass (Earth masses)']),
                    density_g_cm3=float(row['Density (g/cm3)']),
                )
            except (KeyError, TypeError, ValueError) as err:
                raise ConfigurationError(
                    f"Invalid planet row {reader.line_num} in {filepath.name}: {err}"
                ) from err
            planets.append(planet)

    planets = validate_catalog(planets)
    logger.debug("Loaded %d planets from %s", len(planets), filepath)
    return planets


planets_data = load_planets_data()
planets_by_name = {p.name: p for p in planets_data}
