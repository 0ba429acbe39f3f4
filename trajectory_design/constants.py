"""
Default configuration values shared across the toolkit.
"""
import numpy as np

# Ephemeris defaults
DEFAULT_FRAME = 'ECLIPJ2000'
DEFAULT_CENTRAL_BODY = 'SUN'
DEFAULT_KERNEL_DIRECTORY = 'data'
KERNEL_PATTERNS = ('*.bsp', '*.tpc', '*.tls', '*.tf')

# Time
JULIAN_DAY = 86400.0  # [s]

# Solver tolerances
LAMBERT_TOLERANCE = 1e-10
LAMBERT_MAX_ITER = 200
KEPLER_TOLERANCE = 1e-10
KEPLER_MAX_ITER = 100
PERIAPSIS_SOLVER_TOLERANCE = 1e-8  # [km]

# Minimum swingby periapsis radius per body [km], used when a swingby node
# gives no explicit value.
DEFAULT_MINIMUM_PERICENTERS = {
    'MERCURY': 2639.7,
    'VENUS': 6251.8,
    'EARTH': 6578.1,
    'MARS': 3596.2,
    'JUPITER': 72000.0,
    'SATURN': 61000.0,
}

TWO_PI = 2.0 * np.pi


def normalize_body_name(name: str) -> str:
    """Upper case body name with a trailing ' BARYCENTER' removed."""
    key = name.strip().upper()
    if key.endswith(' BARYCENTER'):
        key = key[:-len(' BARYCENTER')]
    return key


def default_minimum_periapsis(body_name: str, table: dict = None):
    """
    Looks up the default minimum swingby periapsis radius for a body.

    Returns:
        float or None: Radius [km], or None if the body is not tabulated.
    """
    if table is None:
        table = DEFAULT_MINIMUM_PERICENTERS
    key = normalize_body_name(body_name)
    for name, value in table.items():
        if normalize_body_name(name) == key:
            return float(value)
    return None
