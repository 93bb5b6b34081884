# Configure JAX to use double precision (64-bit floats) throughout the package
import jax
jax.config.update("jax_enable_x64", True)

from .orbital_elements import OrbitalElements
from .planet_state import PlanetState, Vector3

from .constants import (
    # Constants
    J2000_JD,
    UNIX_EPOCH_JD,
    DAYS_PER_YEAR,
    KEPLER_TOL,
    KEPLER_MAX_ITER,
    PLANET_NAMES,
)

from .exceptions import (
    OrreryError,
    ConfigurationError,
    ConvergenceError,
)

from .astrodynamics import (
    # Functions
    normalize_degrees,
    mean_anomaly,
    solve_kepler,
    true_anomaly,
    perifocal_to_ecliptic,
    heliocentric_positions,
    elements_to_position,
    orbit_ring,
)

from .bodies import (
    # Planet catalog
    Planet,
    load_planets_data,
    validate_catalog,
    planets_data,
    planets_by_name,
)

from .config import (
    ScaleMode,
    EngineConfig,
    DistanceInfo,
    make_engine_config,
)

from .ephemeris import (
    # Position engine
    Ephemeris,
    get_ephemeris,
    compute_positions,
    compute_positions_compiled,
    compute_position_grid,
    distance_info,
)

from .timescale import (
    year_to_julian_date,
    julian_date_to_years,
    clamp_simulation_year,
    datetime_to_julian_date,
    julian_date_to_datetime,
    julian_date_to_string,
)

__all__ = [
    # Constants
    "J2000_JD",
    "UNIX_EPOCH_JD",
    "DAYS_PER_YEAR",
    "KEPLER_TOL",
    "KEPLER_MAX_ITER",
    "PLANET_NAMES",

    # Exceptions
    "OrreryError",
    "ConfigurationError",
    "ConvergenceError",

    # Named tuples and models
    "OrbitalElements",
    "PlanetState",
    "Vector3",

    # Functions
    "normalize_degrees",
    "mean_anomaly",
    "solve_kepler",
    "true_anomaly",
    "perifocal_to_ecliptic",
    "heliocentric_positions",
    "elements_to_position",
    "orbit_ring",

    # Planets
    "Planet",
    "load_planets_data",
    "validate_catalog",
    "planets_data",
    "planets_by_name",

    # Configuration
    "ScaleMode",
    "EngineConfig",
    "DistanceInfo",
    "make_engine_config",

    # Position engine
    "Ephemeris",
    "get_ephemeris",
    "compute_positions",
    "compute_positions_compiled",
    "compute_position_grid",
    "distance_info",

    # Time
    "year_to_julian_date",
    "julian_date_to_years",
    "clamp_simulation_year",
    "datetime_to_julian_date",
    "julian_date_to_datetime",
    "julian_date_to_string",
]
