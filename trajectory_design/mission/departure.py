import numpy as np


def compute_escape_or_capture_delta_v(mu: float, semi_major_axis, eccentricity, v_inf_mag: float) -> float:
    """
    Impulsive Delta-V to escape from (or be captured into) a bound orbit, applied at its periapsis.

    Args:
        mu (float): Gravitational parameter of the departure/arrival body [km^3/s^2].
        semi_major_axis (float or None): Semi-major axis of the bound orbit [km].
                                         None means no orbit is imposed.
        eccentricity (float or None): Eccentricity of the bound orbit.
        v_inf_mag (float): Hyperbolic excess velocity magnitude [km/s].

    Returns:
        float: Delta-V magnitude [km/s]. Without an imposed orbit the full excess velocity is charged.
    """
    if semi_major_axis is None or eccentricity is None:
        return abs(v_inf_mag)

    rp = semi_major_axis * (1.0 - eccentricity)

    # Hyperbolic and bound-orbit speeds at the common periapsis
    v_hyperbolic = np.sqrt(v_inf_mag**2 + 2.0 * mu / rp)
    v_orbit = np.sqrt(mu * (2.0 / rp - 1.0 / semi_major_axis))

    return abs(v_hyperbolic - v_orbit)


def body_fixed_axes(body_state: np.ndarray, primary: str = 'velocity') -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Orthonormal axes attached to a body's heliocentric motion.

    Args:
        body_state (np.ndarray): Body state [rx, ry, rz, vx, vy, vz].
        primary (str): 'velocity' for (along-track, cross, normal) or
                       'position' for (radial, along-track, normal).

    Returns:
        tuple: Three unit vectors (e1, e2, e3), e3 along the orbital angular momentum.
    """
    r = body_state[0:3]
    v = body_state[3:6]
    e3 = np.cross(r, v)
    e3 = e3 / np.linalg.norm(e3)

    if primary == 'velocity':
        e1 = v / np.linalg.norm(v)
    elif primary == 'position':
        e1 = r / np.linalg.norm(r)
    else:
        raise ValueError(f"Unknown primary axis '{primary}'.")

    e2 = np.cross(e3, e1)
    return e1, e2, e3


def spherical_to_vector(magnitude: float, in_plane_angle: float, out_of_plane_angle: float,
                        axes: tuple[np.ndarray, np.ndarray, np.ndarray]) -> np.ndarray:
    """
    Builds a vector from a magnitude and two angles in the given axes:
    in_plane_angle rotates from e1 towards e2, out_of_plane_angle tilts towards e3.
    """
    e1, e2, e3 = axes
    return magnitude * (np.cos(out_of_plane_angle) * np.cos(in_plane_angle) * e1
                        + np.cos(out_of_plane_angle) * np.sin(in_plane_angle) * e2
                        + np.sin(out_of_plane_angle) * e3)


def compute_departure_v_inf(body_state: np.ndarray, v_inf_mag: float,
                            in_plane_angle: float, out_of_plane_angle: float) -> np.ndarray:
    """
    Departure excess velocity from its magnitude and angles relative to the body's velocity direction.

    Args:
        body_state (np.ndarray): Heliocentric state of the departure body.
        v_inf_mag (float): Excess velocity magnitude [km/s].
        in_plane_angle (float): Angle from the body velocity in its orbital plane [rad].
        out_of_plane_angle (float): Angle out of the body's orbital plane [rad].

    Returns:
        np.ndarray: Excess velocity vector [km/s].
    """
    axes = body_fixed_axes(body_state, primary='velocity')
    return spherical_to_vector(v_inf_mag, in_plane_angle, out_of_plane_angle, axes)
