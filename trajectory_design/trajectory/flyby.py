import numpy as np
from scipy.optimize import brentq

from trajectory_design.constants import PERIAPSIS_SOLVER_TOLERANCE


def compute_turn_angle(v_inf_mag: float, mu: float, rp: float) -> float:
    """
    Computes the turn angle (delta) for an unpowered hyperbolic flyby.

    Args:
        v_inf_mag (float): Hyperbolic excess velocity magnitude [km/s].
        mu (float): Gravitational parameter of the flyby body [km^3/s^2].
        rp (float): Periapsis radius [km].

    Returns:
        float: Turn angle in radians.
    """
    # delta = 2 * arcsin(1 / e), e = 1 + rp * v_inf^2 / mu
    e = 1.0 + (rp * v_inf_mag**2) / mu
    return 2.0 * np.arcsin(1.0 / e)


def compute_bending_angle(v_inf_in_mag: float, v_inf_out_mag: float, rp: float, mu: float) -> float:
    """
    Bending angle of a swingby whose incoming and outgoing hyperbolae share the
    periapsis radius rp but may differ in excess velocity (powered at periapsis).
    Each branch contributes half of its own unpowered turn angle.
    """
    return 0.5 * (compute_turn_angle(v_inf_in_mag, mu, rp) + compute_turn_angle(v_inf_out_mag, mu, rp))


def rotate_vector(vec: np.ndarray, angle: float, axis: np.ndarray) -> np.ndarray:
    """
    Rotates a vector by a given angle around a specified axis using Rodrigues' rotation formula.

    Args:
        vec (np.ndarray): Vector to rotate.
        angle (float): Rotation angle [radians].
        axis (np.ndarray): Axis of rotation.

    Returns:
        np.ndarray: Rotated vector.
    """
    axis = axis / np.linalg.norm(axis)
    cos_a = np.cos(angle)
    sin_a = np.sin(angle)

    # v_rot = v*cos(a) + (k x v)*sin(a) + k*(k.v)*(1 - cos(a))
    cross_prod = np.cross(axis, vec)
    dot_prod = np.dot(axis, vec)

    return vec * cos_a + cross_prod * sin_a + axis * dot_prod * (1 - cos_a)


def bplane_axes(v_inf_in: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Returns the (S, T, R) B-plane triad for an incoming excess velocity.
    T lies in the reference (ecliptic) plane, R = S x T.
    """
    S = v_inf_in / np.linalg.norm(v_inf_in)
    pole = np.array([0.0, 0.0, 1.0])

    if np.abs(np.dot(S, pole)) > 0.999:
        # S is nearly parallel to the pole, choose another reference
        T = np.cross(S, np.array([1.0, 0.0, 0.0]))
    else:
        T = np.cross(S, pole)

    T = T / np.linalg.norm(T)
    R = np.cross(S, T)
    return S, T, R


def compute_outgoing_v_inf(v_inf_in: np.ndarray, beta: float, rp: float, mu: float,
                           delta_v: float = 0.0) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Computes the outgoing V-infinity vector of a swingby targeted in the B-plane,
    with an optional tangential impulse at periapsis.

    Args:
        v_inf_in (np.ndarray): Incoming V-infinity vector in a body-centered frame [km/s].
        beta (float): B-plane angle, measured from the T axis towards R [radians].
        rp (float): Periapsis radius [km].
        mu (float): Gravitational parameter [km^3/s^2].
        delta_v (float): Impulse applied along the velocity at periapsis [km/s].

    Returns:
        tuple: (v_inf_out, B_vector, S_vector)

    Raises:
        ValueError: If the periapsis impulse leaves the spacecraft on a bound orbit.
    """
    v_inf_in = np.asarray(v_inf_in, dtype=float)
    v_inf_in_mag = np.linalg.norm(v_inf_in)
    S, T, R = bplane_axes(v_inf_in)

    v_inf_out_mag = compute_powered_outgoing_v_inf_magnitude(v_inf_in_mag, rp, mu, delta_v)
    delta = compute_bending_angle(v_inf_in_mag, v_inf_out_mag, rp, mu)

    # Aiming radius of the incoming branch
    b = rp * np.sqrt(1.0 + (2.0 * mu) / (rp * v_inf_in_mag**2))
    B_vec = b * (np.cos(beta) * T + np.sin(beta) * R)

    # Angular momentum at infinity h ~ B x S; the turn is about h
    h_vec = np.cross(B_vec, S)
    v_inf_out = rotate_vector(S, delta, h_vec) * v_inf_out_mag

    return v_inf_out, B_vec, S


def compute_powered_outgoing_v_inf_magnitude(v_inf_in_mag: float, rp: float, mu: float, delta_v: float) -> float:
    """Outgoing excess speed after a tangential impulse delta_v at periapsis."""
    vp_out = np.sqrt(v_inf_in_mag**2 + 2.0 * mu / rp) + delta_v
    v_inf_out_squared = vp_out**2 - 2.0 * mu / rp
    if vp_out <= 0.0 or v_inf_out_squared <= 0.0:
        raise ValueError("Periapsis impulse does not leave the spacecraft on an escape trajectory.")
    return np.sqrt(v_inf_out_squared)


def compute_powered_swingby_delta_v(v_inf_in_mag: float, v_inf_out_mag: float, rp: float, mu: float) -> float:
    """
    Impulse at periapsis linking incoming and outgoing hyperbolae of a common periapsis radius.
    For an infinite periapsis radius this is the difference of the excess speeds.
    """
    if np.isinf(rp):
        return abs(v_inf_out_mag - v_inf_in_mag)
    vp_in = np.sqrt(v_inf_in_mag**2 + 2.0 * mu / rp)
    vp_out = np.sqrt(v_inf_out_mag**2 + 2.0 * mu / rp)
    return abs(vp_out - vp_in)


def compute_required_periapsis(v_inf_in: np.ndarray, v_inf_out: np.ndarray, mu: float,
                               minimum_periapsis: float, tol: float = PERIAPSIS_SOLVER_TOLERANCE):
    """
    Finds the periapsis radius at which a swingby bends v_inf_in onto the direction of v_inf_out.

    Args:
        v_inf_in (np.ndarray): Incoming excess velocity [km/s].
        v_inf_out (np.ndarray): Outgoing excess velocity [km/s].
        mu (float): Gravitational parameter of the swingby body [km^3/s^2].
        minimum_periapsis (float): Lowest admissible periapsis radius [km].

    Returns:
        float or None: Required periapsis radius [km] (np.inf if no bending is needed),
                       or None when the bending exceeds what is reachable above minimum_periapsis.
    """
    v_in = np.linalg.norm(v_inf_in)
    v_out = np.linalg.norm(v_inf_out)
    if v_in == 0.0 or v_out == 0.0:
        raise ValueError("Swingby excess velocities must be non-zero.")

    required_bending = np.arctan2(np.linalg.norm(np.cross(v_inf_in, v_inf_out)), np.dot(v_inf_in, v_inf_out))
    if required_bending == 0.0:
        return np.inf

    def bending_residual(rp):
        return compute_bending_angle(v_in, v_out, rp, mu) - required_bending

    # Bending decreases monotonically with rp
    if bending_residual(minimum_periapsis) < 0.0:
        return None

    rp_upper = 2.0 * minimum_periapsis
    while bending_residual(rp_upper) > 0.0:
        rp_upper *= 2.0

    return brentq(bending_residual, minimum_periapsis, rp_upper, xtol=tol)
