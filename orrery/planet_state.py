"""
Planet state representation returned by the ephemeris.
"""
import math

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Vector3(BaseModel):
    """
    Cartesian vector in scene units.

    The frame is heliocentric ecliptic: Sun at the origin, x toward the
    vernal equinox, z toward the north ecliptic pole.
    """
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    z: float

    def norm(self) -> float:
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    def as_tuple(self) -> tuple:
        return (self.x, self.y, self.z)


class PlanetState(BaseModel):
    """
    Position and display data of one planet at one instant.

    Produced fresh on every ephemeris query. Dumping with ``by_alias=True``
    yields camelCase keys (``orbitRadius``, ``yearLengthDays``, ``moonCount``, ...)
    for renderers that consume JSON.

    Attributes:
        name: Planet name
        position: Heliocentric ecliptic position (scene units)
        radius: Display radius (scene units)
        orbit_radius: Semi-major axis in the same scene units as position
        color: Display color, "#rrggbb"
        year_length_days: Length of the planet's year in Earth days
        moon_count: Number of known moons
        distance_from_sun_au: Instantaneous distance from the Sun (AU)
        orbit_speed: Orbital angular speed relative to Earth's
        axial_tilt_deg, day_length_hours, temperature_k, mass_earths,
        density_g_cm3: Descriptive data passed through from the catalog
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str
    position: Vector3
    radius: float
    orbit_radius: float
    color: str = Field(..., pattern=r"^#[0-9a-f]{6}$")
    year_length_days: float
    moon_count: int = Field(..., ge=0)
    distance_from_sun_au: float
    orbit_speed: float
    axial_tilt_deg: float
    day_length_hours: float
    temperature_k: float
    mass_earths: float
    density_g_cm3: float

    def to_row(self) -> str:
        """Format the state as a single line of fixed-width text."""
        return (
            f"{self.name:<8s} "
            f"{self.position.x:12.6f} {self.position.y:12.6f} {self.position.z:12.6f} "
            f"{self.distance_from_sun_au:10.6f} {self.orbit_radius:10.4f} {self.radius:6.3f} {self.color}"
        )
