import os
import sys

import numpy as np
import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
from trajectory_design.constants import JULIAN_DAY
from trajectory_design.environment import CelestialBody, ConstantEphemeris, KeplerEphemeris, SystemOfBodies

MU_SUN = 132712440041.9394  # km^3/s^2
AU = 149597870.7  # km

# name: (semi-major axis [km], mean anomaly at t=0 [rad], GM [km^3/s^2], radius [km])
PLANETS = {
    'EARTH': (AU, 0.0, 398600.4418, 6378.137),
    'MARS': (1.523679 * AU, 0.6, 42828.37, 3396.19),
    'JUPITER': (5.2044 * AU, 3.83, 126686534.0, 71492.0),
    'CERES': (2.7675 * AU, 1.0, 62.6, 469.7),
}

# Epochs used by the Earth -> Mars -> Jupiter chain
EARTH_DEPARTURE = 0.0
MARS_SWINGBY = 250.0 * JULIAN_DAY
JUPITER_ARRIVAL = 1150.0 * JULIAN_DAY


@pytest.fixture
def solar_system():
    """
    Coplanar circular planets about the Sun; no SPICE kernels needed.
    """
    bodies = [CelestialBody('SUN', MU_SUN, 695700.0, ConstantEphemeris())]
    for name, (a, m0, mu, radius) in PLANETS.items():
        bodies.append(CelestialBody(name, mu, radius, KeplerEphemeris(a, 0.0, MU_SUN, mean_anomaly_at_epoch=m0)))
    return SystemOfBodies(bodies)
