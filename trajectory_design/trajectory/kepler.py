import numpy as np
from scipy.optimize import brentq, newton

from trajectory_design.constants import KEPLER_MAX_ITER, KEPLER_TOLERANCE
from trajectory_design.trajectory.lambert import LambertSolver


def propagate_kepler(state: np.ndarray, mu: float, dt: float,
                     tol: float = KEPLER_TOLERANCE, max_iter: int = KEPLER_MAX_ITER) -> np.ndarray:
    """
    Propagates a two-body state by dt using universal variables (Lagrange f and g).
    Valid for elliptic, parabolic and hyperbolic orbits, forwards or backwards in time.

    Args:
        state (np.ndarray): Initial state [rx, ry, rz, vx, vy, vz] [km, km/s].
        mu (float): Gravitational parameter [km^3/s^2].
        dt (float): Propagation time [s].

    Returns:
        np.ndarray: State after dt.

    Raises:
        RuntimeError: If the universal anomaly iteration does not converge.
    """
    state = np.asarray(state, dtype=float)
    if dt == 0.0:
        return state.copy()

    r0 = state[0:3]
    v0 = state[3:6]
    r0_mag = np.linalg.norm(r0)
    v0_mag = np.linalg.norm(v0)
    sqrt_mu = np.sqrt(mu)
    vr0 = np.dot(r0, v0) / r0_mag

    # Reciprocal of the semi-major axis
    alpha = 2.0 / r0_mag - v0_mag**2 / mu

    def kepler_equation(chi):
        z = alpha * chi**2
        return (r0_mag * vr0 / sqrt_mu * chi**2 * LambertSolver.stumpC(z)
                + (1.0 - alpha * r0_mag) * chi**3 * LambertSolver.stumpS(z)
                + r0_mag * chi - sqrt_mu * dt)

    # The equation is monotonic in chi (its derivative is r), so widen from the
    # initial guess until the root is bracketed, then refine.
    direction = np.sign(dt)
    bound = direction * max(abs(_initial_universal_anomaly(r0, v0, mu, alpha, dt)), 1e-8)
    with np.errstate(over='ignore'):
        for _ in range(max_iter):
            if direction * kepler_equation(bound) >= 0.0:
                break
            bound *= 2.0
        else:
            raise RuntimeError(f"Kepler propagation failed to bracket the universal anomaly for dt={dt}.")

    try:
        chi = brentq(kepler_equation, min(0.0, bound), max(0.0, bound), xtol=tol, maxiter=max_iter)
    except (RuntimeError, ValueError) as e:
        raise RuntimeError(f"Kepler propagation failed to converge for dt={dt}: {e}") from e

    z = alpha * chi**2
    C = LambertSolver.stumpC(z)
    S = LambertSolver.stumpS(z)

    f = 1.0 - chi**2 / r0_mag * C
    g = dt - chi**3 * S / sqrt_mu
    r = f * r0 + g * v0
    r_mag = np.linalg.norm(r)

    f_dot = sqrt_mu / (r_mag * r0_mag) * (alpha * chi**3 * S - chi)
    g_dot = 1.0 - chi**2 / r_mag * C
    v = f_dot * r0 + g_dot * v0

    return np.concatenate((r, v))


def _initial_universal_anomaly(r0, v0, mu, alpha, dt):
    # Starting guesses after Vallado, Algorithm 8
    sqrt_mu = np.sqrt(mu)
    if alpha > 1e-12:
        return sqrt_mu * dt * alpha
    if alpha < -1e-12:
        a = 1.0 / alpha
        sign = np.sign(dt)
        numerator = -2.0 * mu * alpha * dt
        denominator = np.dot(r0, v0) + sign * np.sqrt(-mu * a) * (1.0 - np.linalg.norm(r0) * alpha)
        if denominator != 0.0 and numerator / denominator > 0.0:
            return sign * np.sqrt(-a) * np.log(numerator / denominator)
        return sqrt_mu * abs(alpha) * dt
    return sqrt_mu * dt / np.linalg.norm(r0)


def solve_kepler_equation(mean_anomaly: float, eccentricity: float) -> float:
    """
    Solves Kepler's equation M = E - e*sin(E) for the eccentric anomaly (elliptic orbits).
    """
    guess = mean_anomaly if eccentricity < 0.8 else np.pi
    return newton(lambda E: E - eccentricity * np.sin(E) - mean_anomaly, guess,
                  fprime=lambda E: 1.0 - eccentricity * np.cos(E),
                  tol=KEPLER_TOLERANCE, maxiter=KEPLER_MAX_ITER)


def elements_to_state(a: float, e: float, i: float, raan: float, arg_p: float, nu: float, mu: float) -> np.ndarray:
    """
    Converts Keplerian elements to a Cartesian state.

    Args:
        a (float): Semi-major axis [km].
        e (float): Eccentricity.
        i (float): Inclination [rad].
        raan (float): Right ascension of the ascending node [rad].
        arg_p (float): Argument of periapsis [rad].
        nu (float): True anomaly [rad].
        mu (float): Gravitational parameter [km^3/s^2].

    Returns:
        np.ndarray: [rx, ry, rz, vx, vy, vz] [km, km/s].
    """
    p = a * (1.0 - e**2)
    r_mag = p / (1.0 + e * np.cos(nu))

    # Perifocal frame
    r_pf = r_mag * np.array([np.cos(nu), np.sin(nu), 0.0])
    v_pf = np.sqrt(mu / p) * np.array([-np.sin(nu), e + np.cos(nu), 0.0])

    cos_O, sin_O = np.cos(raan), np.sin(raan)
    cos_w, sin_w = np.cos(arg_p), np.sin(arg_p)
    cos_i, sin_i = np.cos(i), np.sin(i)

    rotation = np.array([
        [cos_O * cos_w - sin_O * sin_w * cos_i, -cos_O * sin_w - sin_O * cos_w * cos_i, sin_O * sin_i],
        [sin_O * cos_w + cos_O * sin_w * cos_i, -sin_O * sin_w + cos_O * cos_w * cos_i, -cos_O * sin_i],
        [sin_w * sin_i, cos_w * sin_i, cos_i],
    ])

    return np.concatenate((rotation @ r_pf, rotation @ v_pf))


def state_to_orbital_elements(r: np.ndarray, v: np.ndarray, mu: float) -> dict:
    """
    Converts Cartesian state (r, v) to Keplerian Orbital Elements.

    Args:
        r (np.ndarray): Position vector [km].
        v (np.ndarray): Velocity vector [km/s].
        mu (float): Gravitational parameter [km^3/s^2].

    Returns:
        dict: Keplerian elements (a, e, i_deg, raan_deg, arg_p_deg, nu_deg).
    """
    h_vec = np.cross(r, v)
    h_mag = np.linalg.norm(h_vec)

    r_mag = np.linalg.norm(r)
    v_mag = np.linalg.norm(v)

    # Specific Energy
    E = (v_mag**2) / 2 - mu / r_mag

    if abs(E) < 1e-9:
        a = np.inf # Parabolic
    else:
        a = -mu / (2 * E)

    e_vec = (1/mu) * ((v_mag**2 - mu/r_mag) * r - np.dot(r, v) * v)
    e = np.linalg.norm(e_vec)

    i_rad = np.arccos(np.clip(h_vec[2] / h_mag, -1.0, 1.0))

    # Node vector n = k x h
    n_vec = np.array([-h_vec[1], h_vec[0], 0.0])
    n_mag = np.linalg.norm(n_vec)

    if n_mag < 1e-12:
        raan_rad = 0.0 # Equatorial
    else:
        raan_rad = np.arccos(np.clip(n_vec[0] / n_mag, -1.0, 1.0))
        if n_vec[1] < 0:
            raan_rad = 2 * np.pi - raan_rad

    if n_mag < 1e-12 or e < 1e-9:
        arg_p_rad = 0.0
    else:
        arg_p_rad = np.arccos(np.clip(np.dot(n_vec, e_vec) / (n_mag * e), -1.0, 1.0))
        if e_vec[2] < 0:
            arg_p_rad = 2 * np.pi - arg_p_rad

    if e < 1e-9:
        nu_rad = 0.0
    else:
        nu_rad = np.arccos(np.clip(np.dot(e_vec, r) / (e * r_mag), -1.0, 1.0))
        if np.dot(r, v) < 0:
            nu_rad = 2 * np.pi - nu_rad

    return {
        'a': a,
        'e': e,
        'i_deg': np.degrees(i_rad),
        'raan_deg': np.degrees(raan_rad),
        'arg_p_deg': np.degrees(arg_p_rad),
        'nu_deg': np.degrees(nu_rad)
    }
