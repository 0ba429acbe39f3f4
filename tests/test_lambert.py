import pytest
import numpy as np
import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
from trajectory_design.trajectory.lambert import LambertSolver
from trajectory_design.trajectory.kepler import propagate_kepler

def test_lambert_circular_earth():
    """
    90 degree transfer along a circular orbit (1 AU) must recover the circular velocity.
    """
    mu_sun = 132712440041.9394  # km^3/s^2
    r_earth = 149597870.7  # km
    v_earth = np.sqrt(mu_sun / r_earth)

    r1 = np.array([r_earth, 0.0, 0.0])
    r2 = np.array([0.0, r_earth, 0.0])

    period = 2 * np.pi * np.sqrt(r_earth**3 / mu_sun)
    v1, v2 = LambertSolver.solve(r1, r2, period / 4.0, mu_sun)

    np.testing.assert_allclose(v1, [0.0, v_earth, 0.0], rtol=1e-6, atol=1e-6)
    np.testing.assert_allclose(v2, [-v_earth, 0.0, 0.0], rtol=1e-6, atol=1e-6)

def test_lambert_180_failure_case():
    """
    The 180 degree transfer plane is undefined; the solver must refuse it.
    """
    r1 = np.array([1.0, 0.0, 0.0])
    r2 = np.array([-1.0, 0.0, 0.0])

    with pytest.raises(RuntimeError):
        LambertSolver.solve(r1, r2, np.pi, 1.0)

def test_lambert_rejects_non_positive_time_of_flight():
    with pytest.raises(ValueError):
        LambertSolver.solve(np.array([7000.0, 0.0, 0.0]), np.array([0.0, 7000.0, 0.0]), 0.0, 398600.4418)

@pytest.mark.parametrize("dt", [2000.0, 600.0])
def test_lambert_solution_reaches_target(dt):
    """
    Propagating (r1, v1) for dt must land on (r2, v2); the short dt gives a hyperbolic arc.
    """
    mu = 3.986004418e5
    r1 = np.array([7000.0, 0.0, 0.0])
    r2 = np.array([0.0, 8000.0, 2000.0])

    v1, v2 = LambertSolver.solve(r1, r2, dt, mu, prograde=True)

    final_state = propagate_kepler(np.concatenate((r1, v1)), mu, dt)

    np.testing.assert_allclose(final_state[0:3], r2, rtol=1e-6, atol=1e-3, err_msg="Propagated position does not match r2")
    np.testing.assert_allclose(final_state[3:6], v2, rtol=1e-6, atol=1e-6, err_msg="Propagated velocity does not match v2")

    # Conservation of energy
    eps1 = 0.5 * np.linalg.norm(v1)**2 - mu / np.linalg.norm(r1)
    eps2 = 0.5 * np.linalg.norm(v2)**2 - mu / np.linalg.norm(r2)
    assert np.isclose(eps1, eps2, rtol=1e-8), "Energy not conserved in Lambert solution"

def test_lambert_long_way_prograde():
    """
    Target behind the start point: a prograde transfer sweeps more than 180 degrees.
    """
    mu = 3.986004418e5
    r1 = np.array([7000.0, 0.0, 0.0])
    r2 = np.array([7000.0 * np.cos(-0.5), 7000.0 * np.sin(-0.5), 0.0])
    period = 2 * np.pi * np.sqrt(7000.0**3 / mu)
    dt = period * (2 * np.pi - 0.5) / (2 * np.pi)

    v1, v2 = LambertSolver.solve(r1, r2, dt, mu)

    # Circular prograde solution
    assert v1[1] > 0
    np.testing.assert_allclose(np.linalg.norm(v1), np.sqrt(mu / 7000.0), rtol=1e-6)
