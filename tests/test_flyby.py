import numpy as np
import pytest
import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
from trajectory_design.trajectory.flyby import (
    compute_bending_angle,
    compute_outgoing_v_inf,
    compute_powered_swingby_delta_v,
    compute_required_periapsis,
    compute_turn_angle,
    rotate_vector,
)

MU_EARTH = 398600.4418

def test_compute_turn_angle():
    v_inf = 5.0 # km/s
    rp = 6378.137 + 500 # 500 km altitude

    delta = compute_turn_angle(v_inf, MU_EARTH, rp)

    e = 1 + rp * v_inf**2 / MU_EARTH
    assert np.isclose(delta, 2 * np.arcsin(1/e), atol=1e-12)
    assert 0 < delta < np.pi

def test_bending_angle_reduces_to_turn_angle():
    assert np.isclose(compute_bending_angle(4.0, 4.0, 7000.0, MU_EARTH), compute_turn_angle(4.0, MU_EARTH, 7000.0))

def test_rotate_vector_simple():
    # Rotate X around Z by 90 degrees -> Y
    rotated = rotate_vector(np.array([1.0, 0.0, 0.0]), np.pi / 2, np.array([0.0, 0.0, 1.0]))

    assert np.allclose(rotated, [0.0, 1.0, 0.0], atol=1e-12)

def test_compute_outgoing_v_inf_planar():
    v_inf_in = np.array([5.0, 0.0, 0.0])
    rp = 7000.0

    v_out, B_vec, S_vec = compute_outgoing_v_inf(v_inf_in, 0.0, rp, MU_EARTH)

    # Unpowered: magnitude conserved, turned by the turn angle
    assert np.isclose(np.linalg.norm(v_out), 5.0, atol=1e-10)
    delta = compute_turn_angle(5.0, MU_EARTH, rp)
    assert np.isclose(np.arccos(np.dot(v_inf_in, v_out) / 25.0), delta, atol=1e-8)
    assert np.isclose(np.dot(B_vec, S_vec), 0.0, atol=1e-8)

def test_compute_outgoing_v_inf_powered():
    v_inf_in = np.array([3.0, 4.0, 0.0])
    rp, dv = 8000.0, 0.5

    v_out, _, _ = compute_outgoing_v_inf(v_inf_in, 0.7, rp, MU_EARTH, delta_v=dv)

    vp_in = np.sqrt(25.0 + 2 * MU_EARTH / rp)
    expected = np.sqrt((vp_in + dv)**2 - 2 * MU_EARTH / rp)
    assert np.isclose(np.linalg.norm(v_out), expected, rtol=1e-12)

    # The periapsis burn is recovered from the two asymptotes
    assert np.isclose(compute_powered_swingby_delta_v(5.0, expected, rp, MU_EARTH), dv, rtol=1e-10)

def test_compute_outgoing_v_inf_rejects_capture_burn():
    with pytest.raises(ValueError):
        compute_outgoing_v_inf(np.array([1.0, 0.0, 0.0]), 0.0, 7000.0, MU_EARTH, delta_v=-5.0)

def test_required_periapsis_recovers_flyby_geometry():
    v_inf_in = np.array([5.0, 0.0, 0.0])
    v_out, _, _ = compute_outgoing_v_inf(v_inf_in, 1.1, 9000.0, MU_EARTH, delta_v=0.3)

    rp = compute_required_periapsis(v_inf_in, v_out, MU_EARTH, minimum_periapsis=6578.1)

    assert np.isclose(rp, 9000.0, rtol=1e-6)

def test_required_periapsis_below_minimum_is_none():
    v_inf_in = np.array([5.0, 0.0, 0.0])
    v_out, _, _ = compute_outgoing_v_inf(v_inf_in, 0.0, 7000.0, MU_EARTH)

    assert compute_required_periapsis(v_inf_in, v_out, MU_EARTH, minimum_periapsis=7500.0) is None

def test_required_periapsis_without_bending():
    v_inf = np.array([2.0, 1.0, 0.0])

    rp = compute_required_periapsis(v_inf, 1.5 * v_inf, MU_EARTH, minimum_periapsis=6578.1)

    assert np.isinf(rp)
    assert np.isclose(compute_powered_swingby_delta_v(np.linalg.norm(v_inf), 1.5 * np.linalg.norm(v_inf), rp, MU_EARTH),
                      0.5 * np.linalg.norm(v_inf))
