"""
Celestial body container and ephemeris providers.
"""
from trajectory_design.environment.bodies import CelestialBody, SystemOfBodies, UnknownBodyError, create_spice_bodies
from trajectory_design.environment.ephemeris import KeplerEphemeris, SpiceEphemeris, ConstantEphemeris
