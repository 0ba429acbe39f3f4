import warnings
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import numpy as np

from trajectory_design.constants import DEFAULT_CENTRAL_BODY, DEFAULT_FRAME, normalize_body_name
from trajectory_design.environment.ephemeris import ConstantEphemeris, SpiceEphemeris
from trajectory_design.spice.manager import SpiceLookupError, spice_manager


class UnknownBodyError(KeyError):
    """Raised when a body name is not present in a SystemOfBodies."""
    pass


@dataclass(frozen=True)
class CelestialBody:
    """
    A named body with the data needed by transfer legs and nodes.

    Attributes:
        name (str): Body name (e.g. 'EARTH').
        gravitational_parameter (float, optional): GM [km^3/s^2].
        radius (float, optional): Mean radius [km].
        ephemeris (callable, optional): epoch [s] -> state [km, km/s] relative to the system's central body.
    """
    name: str
    gravitational_parameter: Optional[float] = None
    radius: Optional[float] = None
    ephemeris: Optional[Callable[[float], np.ndarray]] = None

    def state(self, epoch: float) -> np.ndarray:
        if self.ephemeris is None:
            raise ValueError(f"Body '{self.name}' has no ephemeris.")
        return np.asarray(self.ephemeris(epoch), dtype=float)


class SystemOfBodies:
    """
    Name-keyed container of CelestialBody entries. Lookups are case-insensitive.
    """
    def __init__(self, bodies: List[CelestialBody] = None, frame: str = DEFAULT_FRAME):
        self.frame = frame
        self._bodies: Dict[str, CelestialBody] = {}
        for body in bodies or []:
            self.add_body(body)

    def add_body(self, body: CelestialBody):
        self._bodies[body.name.upper()] = body

    def does_body_exist(self, name: str) -> bool:
        return name.upper() in self._bodies

    def get_body(self, name: str) -> CelestialBody:
        try:
            return self._bodies[name.upper()]
        except KeyError:
            raise UnknownBodyError(f"Body '{name}' is not part of the system of bodies.") from None

    def list_of_bodies(self) -> List[str]:
        return [body.name for body in self._bodies.values()]

    def get_gravitational_parameter(self, name: str) -> Optional[float]:
        return self.get_body(name).gravitational_parameter

    def get_state(self, name: str, epoch: float) -> np.ndarray:
        return self.get_body(name).state(epoch)

    def __contains__(self, name: str) -> bool:
        return self.does_body_exist(name)

    def __len__(self) -> int:
        return len(self._bodies)


def create_spice_bodies(body_names: List[str], central_body: str = DEFAULT_CENTRAL_BODY,
                        frame: str = DEFAULT_FRAME) -> SystemOfBodies:
    """
    Builds a SystemOfBodies from loaded SPICE kernels.

    Args:
        body_names (list[str]): Bodies to include (e.g. ['EARTH', 'MARS BARYCENTER']).
        central_body (str): Body the ephemerides are relative to; always included.
        frame (str): Reference frame of the ephemerides.

    Returns:
        SystemOfBodies: Bodies with GM, mean radius and SPICE ephemerides where available.
    """
    if not spice_manager.kernels_loaded:
        spice_manager.load_standard_kernels()

    system = SystemOfBodies(frame=frame)
    names = [central_body] + [name for name in body_names if name.upper() != central_body.upper()]

    for name in names:
        try:
            mu = spice_manager.get_mu(name)
        except SpiceLookupError as e:
            warnings.warn(f"Could not load GM for {name}, transfer nodes at this body will be rejected. Error: {e}")
            mu = None

        try:
            radius = spice_manager.get_mean_radius(normalize_body_name(name))
        except SpiceLookupError:
            radius = None

        if name.upper() == central_body.upper():
            ephemeris = ConstantEphemeris()
        else:
            ephemeris = SpiceEphemeris(name, observer=central_body, frame=frame)

        system.add_body(CelestialBody(name, mu, radius, ephemeris))

    return system
