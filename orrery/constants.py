"""
Time, epoch and solver constants for the orbital position engine.
"""

# Epochs (Julian Date, days)
J2000_JD = 2451545.0  # 2000-01-01 12:00 TT
UNIX_EPOCH_JD = 2440587.5  # 1970-01-01 00:00 UTC

# Time units
DAYS_PER_YEAR = 365.25  # Julian year
SECONDS_PER_DAY = 86400.0

# Kepler's equation solver
KEPLER_TOL = 1.0e-9  # radians, |E_{k+1} - E_k|
KEPLER_MAX_ITER = 30

# Simulation time range, years past J2000
MIN_SIMULATION_YEAR = 0.0
MAX_SIMULATION_YEAR = 10000.0

# Catalog
NUM_PLANETS = 8
PLANET_NAMES = (
    "Mercury",
    "Venus",
    "Earth",
    "Mars",
    "Jupiter",
    "Saturn",
    "Uranus",
    "Neptune",
)
