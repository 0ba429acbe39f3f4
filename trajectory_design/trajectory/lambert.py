import numpy as np
from scipy.optimize import brentq

from trajectory_design.constants import LAMBERT_MAX_ITER, LAMBERT_TOLERANCE

class LambertSolver:
    """
    Single-revolution Lambert solver using Universal Variables.
    Solves the boundary value problem: finding the velocity vectors
    at two points (r1, r2) given the time of flight (dt).
    """

    @staticmethod
    def solve(r1: np.ndarray, r2: np.ndarray, dt: float, mu: float, prograde: bool = True,
              max_iter: int = LAMBERT_MAX_ITER, tol: float = LAMBERT_TOLERANCE) -> tuple[np.ndarray, np.ndarray]:
        """
        Solves Lambert's problem for the transfer between position vectors r1 and r2
        with time of flight dt.

        Args:
            r1 (np.ndarray): Initial position vector [km].
            r2 (np.ndarray): Final position vector [km].
            dt (float): Time of flight [seconds].
            mu (float): Gravitational parameter [km^3/s^2].
            prograde (bool): If True, solve for prograde orbit (inclination < 90).
                             If False, retrograde.
            max_iter (int): Maximum iterations for bracketing and root finding.
            tol (float): Tolerance on the universal variable z.

        Returns:
            tuple[np.ndarray, np.ndarray]: (v1, v2) - Velocity vectors at r1 and r2 [km/s].

        Raises:
            ValueError: If dt is not positive.
            RuntimeError: For the 180 degree case or if no solution can be bracketed.
        """
        if dt <= 0.0:
            raise ValueError(f"Lambert time of flight must be positive, got {dt}.")

        r1 = np.asarray(r1, dtype=float)
        r2 = np.asarray(r2, dtype=float)
        r1_mag = np.linalg.norm(r1)
        r2_mag = np.linalg.norm(r2)

        cross_12 = np.cross(r1, r2)
        cos_dnu = np.clip(np.dot(r1, r2) / (r1_mag * r2_mag), -1.0, 1.0)
        dnu = np.arccos(cos_dnu)

        # Transfer direction from the sign of the orbit normal
        if prograde:
            if cross_12[2] < 0:
                dnu = 2 * np.pi - dnu
        else:
            if cross_12[2] >= 0:
                dnu = 2 * np.pi - dnu

        if abs(1 - np.cos(dnu)) < 1e-14:
            raise RuntimeError("Limit case of 0 degree transfer angle not handled.")

        # "A" constant
        A = np.sin(dnu) * np.sqrt((r1_mag * r2_mag) / (1 - np.cos(dnu)))

        if abs(A) < 1e-12:
            raise RuntimeError("Limit case A=0 (180 degree transfer) not handled.")

        def y_of_z(z):
            return r1_mag + r2_mag + A * (z * LambertSolver.stumpS(z) - 1.0) / np.sqrt(LambertSolver.stumpC(z))

        def tof_equation(z):
            # Time of flight goes to zero at the y = 0 boundary, which keeps this monotonic in z
            y = y_of_z(z)
            if y <= 0:
                return -dt
            x = np.sqrt(y / LambertSolver.stumpC(z))
            t_flight = (x**3 * LambertSolver.stumpS(z) + A * np.sqrt(y)) / np.sqrt(mu)
            return t_flight - dt

        # Bracket the root: z -> 4 pi^2 gives unbounded time of flight for a single revolution
        z_max = 4.0 * np.pi**2
        z_low, z_up = -1.0, 1.0
        for _ in range(max_iter):
            if tof_equation(z_up) > 0:
                break
            z_up = z_up + 0.5 * (z_max - z_up)
        else:
            raise RuntimeError("Lambert solver failed to bracket the upper bound.")

        with np.errstate(over='ignore', invalid='ignore'):
            for _ in range(max_iter):
                value = tof_equation(z_low)
                if np.isfinite(value) and value < 0:
                    break
                z_low *= 2.0
            else:
                raise RuntimeError("Lambert solver failed to bracket the lower bound.")

        try:
            z = brentq(tof_equation, z_low, z_up, xtol=tol, maxiter=max_iter)
        except (RuntimeError, ValueError) as e:
            raise RuntimeError(f"Lambert solver failed to converge: {e}") from e

        y = y_of_z(z)

        f = 1 - (y / r1_mag)
        g = A * np.sqrt(y / mu)
        g_dot = 1 - (y / r2_mag)

        v1 = (r2 - f * r1) / g
        v2 = (g_dot * r2 - r1) / g

        return v1, v2

    @staticmethod
    def stumpS(z):
        if z > 1e-6:
            return (np.sqrt(z) - np.sin(np.sqrt(z))) / (np.sqrt(z))**3
        elif z < -1e-6:
            return (np.sinh(np.sqrt(-z)) - np.sqrt(-z)) / (np.sqrt(-z))**3
        else:
            return 1.0/6.0 - z/120.0

    @staticmethod
    def stumpC(z):
        if z > 1e-6:
            return (1 - np.cos(np.sqrt(z))) / z
        elif z < -1e-6:
            return (np.cosh(np.sqrt(-z)) - 1) / (-z)
        else:
            return 0.5 - z/24.0
