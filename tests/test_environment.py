import numpy as np
import pytest
from unittest.mock import MagicMock, patch

from trajectory_design.environment import (
    CelestialBody,
    ConstantEphemeris,
    KeplerEphemeris,
    SpiceEphemeris,
    SystemOfBodies,
    UnknownBodyError,
    create_spice_bodies,
)
from trajectory_design.spice.manager import SpiceLookupError, spice_manager

from conftest import AU, MU_SUN


def test_lookup_is_case_insensitive(solar_system):
    assert solar_system.get_body('earth').name == 'EARTH'
    assert 'Mars' in solar_system
    assert len(solar_system) == 5

def test_unknown_body_raises_key_error(solar_system):
    with pytest.raises(UnknownBodyError):
        solar_system.get_body('PLUTO')
    with pytest.raises(KeyError):
        solar_system.get_gravitational_parameter('PLUTO')

def test_body_without_ephemeris():
    body = CelestialBody('PROBE')
    with pytest.raises(ValueError):
        body.state(0.0)

def test_kepler_ephemeris_circular_orbit():
    ephemeris = KeplerEphemeris(AU, 0.0, MU_SUN)

    state0 = ephemeris(0.0)
    state_quarter = ephemeris(ephemeris.period / 4.0)

    np.testing.assert_allclose(state0[0:3], [AU, 0.0, 0.0], rtol=1e-12, atol=1e-3)
    np.testing.assert_allclose(state_quarter[0:3], [0.0, AU, 0.0], rtol=1e-9, atol=10.0)
    assert np.isclose(np.linalg.norm(state0[3:6]), np.sqrt(MU_SUN / AU), rtol=1e-12)

def test_kepler_ephemeris_rejects_open_orbit():
    with pytest.raises(ValueError):
        KeplerEphemeris(AU, 1.2, MU_SUN)

def test_constant_ephemeris_returns_copies():
    ephemeris = ConstantEphemeris([1.0, 2.0, 3.0, 0.0, 0.0, 0.0])
    state = ephemeris(10.0)
    state[0] = 99.0
    assert ephemeris(0.0)[0] == 1.0

@patch('trajectory_design.spice.manager.spice')
def test_spice_ephemeris_queries_spkezr(mock_spice):
    mock_spice.spkezr.return_value = ([1.0, 2.0, 3.0, 4.0, 5.0, 6.0], 0.0)

    state = SpiceEphemeris('MARS BARYCENTER', observer='SUN', frame='ECLIPJ2000')(100.0)

    mock_spice.spkezr.assert_called_once_with('MARS BARYCENTER', 100.0, 'ECLIPJ2000', 'NONE', 'SUN')
    np.testing.assert_array_equal(state, [1.0, 2.0, 3.0, 4.0, 5.0, 6.0])

@patch('trajectory_design.spice.manager.spice')
def test_spice_errors_are_wrapped(mock_spice):
    mock_spice.spkezr.side_effect = Exception("SPICE(SPKINSUFFDATA)")

    with pytest.raises(SpiceLookupError):
        spice_manager.get_body_state('MARS', 'SUN', 0.0)

@patch('trajectory_design.spice.manager.spice')
def test_get_mu_prefers_pool_variable(mock_spice):
    mock_spice.bodn2c.return_value = 399
    mock_spice.gdpool.return_value = (1, [398600.4418])

    assert spice_manager.get_mu('EARTH') == 398600.4418
    mock_spice.gdpool.assert_called_once_with('BODY399_GM', 0, 1)
    mock_spice.bodvrd.assert_not_called()

@patch('trajectory_design.spice.manager.spice')
def test_get_mu_falls_back_to_bodvrd(mock_spice):
    mock_spice.bodn2c.side_effect = Exception("not found")
    mock_spice.bodvrd.return_value = (1, [42828.37])

    assert spice_manager.get_mu('MARS BARYCENTER') == 42828.37

def test_create_spice_bodies():
    def get_mu(name):
        if name == 'CERES':
            raise SpiceLookupError("no GM")
        return {'SUN': MU_SUN, 'EARTH': 398600.4418}[name]

    with patch.object(type(spice_manager), 'kernels_loaded', new=True), \
            patch.object(spice_manager, 'get_mu', side_effect=get_mu), \
            patch.object(spice_manager, 'get_mean_radius', return_value=1000.0), \
            pytest.warns(UserWarning):
        bodies = create_spice_bodies(['EARTH', 'CERES'], central_body='SUN')

    assert bodies.list_of_bodies() == ['SUN', 'EARTH', 'CERES']
    assert bodies.get_gravitational_parameter('CERES') is None
    assert isinstance(bodies.get_body('EARTH').ephemeris, SpiceEphemeris)
    np.testing.assert_array_equal(bodies.get_state('SUN', 0.0), np.zeros(6))
