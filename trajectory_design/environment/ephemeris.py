import numpy as np

from trajectory_design.constants import DEFAULT_CENTRAL_BODY, DEFAULT_FRAME, TWO_PI
from trajectory_design.spice.manager import spice_manager
from trajectory_design.trajectory.kepler import elements_to_state, solve_kepler_equation


class KeplerEphemeris:
    """
    Analytic two-body ephemeris of a body on a fixed Keplerian orbit about the central body.
    """
    def __init__(self, semi_major_axis: float, eccentricity: float, mu: float,
                 inclination: float = 0.0, raan: float = 0.0, argument_of_periapsis: float = 0.0,
                 mean_anomaly_at_epoch: float = 0.0, reference_epoch: float = 0.0):
        """
        Args:
            semi_major_axis (float): [km]
            eccentricity (float): 0 <= e < 1
            mu (float): Gravitational parameter of the central body [km^3/s^2].
            inclination, raan, argument_of_periapsis (float): Orientation angles [rad].
            mean_anomaly_at_epoch (float): Mean anomaly at reference_epoch [rad].
            reference_epoch (float): [s]
        """
        if semi_major_axis <= 0.0 or not 0.0 <= eccentricity < 1.0:
            raise ValueError("KeplerEphemeris supports closed orbits only (a > 0, 0 <= e < 1).")
        self.semi_major_axis = semi_major_axis
        self.eccentricity = eccentricity
        self.mu = mu
        self.inclination = inclination
        self.raan = raan
        self.argument_of_periapsis = argument_of_periapsis
        self.mean_anomaly_at_epoch = mean_anomaly_at_epoch
        self.reference_epoch = reference_epoch
        self.mean_motion = np.sqrt(mu / semi_major_axis**3)

    @property
    def period(self) -> float:
        return TWO_PI / self.mean_motion

    def __call__(self, epoch: float) -> np.ndarray:
        e = self.eccentricity
        M = np.mod(self.mean_anomaly_at_epoch + self.mean_motion * (epoch - self.reference_epoch), TWO_PI)
        E = solve_kepler_equation(M, e)
        nu = 2.0 * np.arctan2(np.sqrt(1.0 + e) * np.sin(E / 2.0), np.sqrt(1.0 - e) * np.cos(E / 2.0))
        return elements_to_state(self.semi_major_axis, e, self.inclination, self.raan,
                                 self.argument_of_periapsis, nu, self.mu)


class ConstantEphemeris:
    """A body at rest at a fixed state (e.g. the central body itself)."""
    def __init__(self, state=None):
        self.state = np.zeros(6) if state is None else np.asarray(state, dtype=float)

    def __call__(self, epoch: float) -> np.ndarray:
        return self.state.copy()


class SpiceEphemeris:
    """
    Ephemeris read from loaded SPICE kernels.
    """
    def __init__(self, target: str, observer: str = DEFAULT_CENTRAL_BODY, frame: str = DEFAULT_FRAME):
        self.target = target
        self.observer = observer
        self.frame = frame

    def __call__(self, epoch: float) -> np.ndarray:
        return spice_manager.get_body_state(self.target, self.observer, epoch, self.frame)
