import pytest
import numpy as np
import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
from trajectory_design.trajectory.kepler import (
    elements_to_state,
    propagate_kepler,
    solve_kepler_equation,
    state_to_orbital_elements,
)

MU_EARTH = 398600.4418

def test_circular_quarter_period():
    r = 7000.0
    v = np.sqrt(MU_EARTH / r)
    period = 2 * np.pi * np.sqrt(r**3 / MU_EARTH)

    state = propagate_kepler(np.array([r, 0.0, 0.0, 0.0, v, 0.0]), MU_EARTH, period / 4.0)

    np.testing.assert_allclose(state, [0.0, r, 0.0, -v, 0.0, 0.0], atol=1e-6)

def test_zero_time_returns_copy():
    state0 = np.array([7000.0, 0.0, 0.0, 0.0, 7.5, 0.0])
    state = propagate_kepler(state0, MU_EARTH, 0.0)

    np.testing.assert_array_equal(state, state0)
    assert state is not state0

@pytest.mark.parametrize("speed", [8.0, 12.0])
def test_forward_then_backward_returns_to_start(speed):
    """
    Elliptic (8 km/s) and hyperbolic (12 km/s) orbits from 7000 km.
    """
    state0 = np.array([7000.0, 0.0, 0.0, 0.0, speed, 1.0])
    forward = propagate_kepler(state0, MU_EARTH, 5000.0)
    back = propagate_kepler(forward, MU_EARTH, -5000.0)

    np.testing.assert_allclose(back, state0, rtol=1e-8, atol=1e-6)

    # Energy and angular momentum are conserved
    energy = lambda s: 0.5 * np.dot(s[3:6], s[3:6]) - MU_EARTH / np.linalg.norm(s[0:3])
    assert np.isclose(energy(forward), energy(state0), rtol=1e-9)
    np.testing.assert_allclose(np.cross(forward[0:3], forward[3:6]), np.cross(state0[0:3], state0[3:6]), rtol=1e-9)

def test_solve_kepler_equation():
    E = solve_kepler_equation(1.0, 0.3)
    assert np.isclose(E - 0.3 * np.sin(E), 1.0, atol=1e-12)

def test_elements_to_state_matches_elements():
    a, e = 10000.0, 0.2
    i, raan, arg_p, nu = np.radians([30.0, 40.0, 50.0, 60.0])

    state = elements_to_state(a, e, i, raan, arg_p, nu, MU_EARTH)
    eles = state_to_orbital_elements(state[0:3], state[3:6], MU_EARTH)

    assert np.isclose(eles['a'], a, rtol=1e-9)
    assert np.isclose(eles['e'], e, atol=1e-9)
    assert np.isclose(eles['i_deg'], 30.0, atol=1e-8)
    assert np.isclose(eles['raan_deg'], 40.0, atol=1e-8)
    assert np.isclose(eles['arg_p_deg'], 50.0, atol=1e-8)
    assert np.isclose(eles['nu_deg'], 60.0, atol=1e-8)
