"""
Translates leg/node settings plus the system of bodies into evaluable leg and node models.
No numerics happen here: references are resolved and required environment data is checked.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

from trajectory_design.constants import default_minimum_periapsis
from trajectory_design.environment.bodies import CelestialBody, SystemOfBodies, UnknownBodyError
from trajectory_design.transfer.exceptions import ConfigurationError, MissingEnvironmentData
from trajectory_design.transfer.settings import (
    TransferLegSettings,
    TransferLegTypes,
    TransferNodeSettings,
    TransferNodeTypes,
    leg_parameter_names,
    node_computes_outgoing_velocity,
    node_parameter_names,
)


@dataclass(frozen=True)
class TransferLeg:
    """Leg model bound to its end bodies and the central body's gravitational parameter."""
    leg_type: TransferLegTypes
    departure_body: CelestialBody
    arrival_body: CelestialBody
    central_body_gravitational_parameter: float

    @property
    def parameter_names(self) -> Tuple[str, ...]:
        return leg_parameter_names(self.leg_type)

    @property
    def number_of_parameters(self) -> int:
        return len(self.parameter_names)


@dataclass(frozen=True)
class TransferNode:
    """
    Node model bound to its body. For swingby nodes minimum_periapsis is resolved
    (explicit value or the body's default); for departure/capture nodes the orbit
    fields are None when no orbit is imposed.
    """
    node_type: TransferNodeTypes
    body: CelestialBody
    outgoing_leg_type: Optional[TransferLegTypes]
    semi_major_axis: Optional[float] = None
    eccentricity: Optional[float] = None
    minimum_periapsis: Optional[float] = None

    @property
    def computes_outgoing_velocity(self) -> bool:
        return node_computes_outgoing_velocity(self.outgoing_leg_type)

    @property
    def parameter_names(self) -> Tuple[str, ...]:
        return node_parameter_names(self.node_type, self.outgoing_leg_type)

    @property
    def number_of_parameters(self) -> int:
        return len(self.parameter_names)

    @property
    def gravitational_parameter(self) -> float:
        return self.body.gravitational_parameter


def _get_body(bodies: SystemOfBodies, name: str) -> CelestialBody:
    try:
        return bodies.get_body(name)
    except UnknownBodyError as e:
        raise MissingEnvironmentData(f"Body '{name}' is not defined in the system of bodies.") from e


def _require_ephemeris(body: CelestialBody):
    if body.ephemeris is None:
        raise MissingEnvironmentData(f"Body '{body.name}' has no ephemeris.")


def _require_gravitational_parameter(body: CelestialBody, role: str) -> float:
    mu = body.gravitational_parameter
    if mu is None or not mu > 0.0:
        raise MissingEnvironmentData(f"Gravitational parameter of {role} '{body.name}' is not available.")
    return mu


def expected_node_type(node_index: int, number_of_nodes: int) -> TransferNodeTypes:
    if node_index == 0:
        return TransferNodeTypes.escape_and_departure
    elif node_index == number_of_nodes - 1:
        return TransferNodeTypes.capture_and_insertion
    return TransferNodeTypes.swingby


def create_transfer_leg(bodies: SystemOfBodies, leg_settings: TransferLegSettings, leg_index: int,
                        node_names: List[str], central_body: str) -> TransferLeg:
    """
    Creates the model of leg leg_index, connecting node_names[leg_index] to node_names[leg_index + 1].
    """
    if not isinstance(leg_settings, TransferLegSettings):
        raise ConfigurationError(f"Leg {leg_index}: expected TransferLegSettings, got {type(leg_settings).__name__}.")

    central = _get_body(bodies, central_body)
    mu_central = _require_gravitational_parameter(central, 'central body')

    departure_body = _get_body(bodies, node_names[leg_index])
    arrival_body = _get_body(bodies, node_names[leg_index + 1])
    _require_ephemeris(departure_body)
    _require_ephemeris(arrival_body)

    leg_type = leg_settings.leg_type
    if leg_type in (TransferLegTypes.unpowered_unperturbed_leg,
                    TransferLegTypes.dsm_position_based_leg,
                    TransferLegTypes.dsm_velocity_based_leg):
        return TransferLeg(leg_type, departure_body, arrival_body, mu_central)
    raise ConfigurationError(f"Leg {leg_index}: unsupported leg type {leg_type!r}.")


def create_transfer_node(bodies: SystemOfBodies, node_settings: TransferNodeSettings, node_index: int,
                         node_names: List[str], outgoing_leg_settings: Optional[TransferLegSettings]) -> TransferNode:
    """
    Creates the model of node node_index at body node_names[node_index].

    Args:
        outgoing_leg_settings: Settings of the leg leaving this node (None for the final node).
            A node fixes the departure velocity of a DSM velocity-based leg, which changes its
            free parameters.
    """
    if not isinstance(node_settings, TransferNodeSettings):
        raise ConfigurationError(f"Node {node_index}: expected TransferNodeSettings, got {type(node_settings).__name__}.")

    node_type = node_settings.node_type
    expected = expected_node_type(node_index, len(node_names))
    if node_type != expected:
        raise ConfigurationError(
            f"Node {node_index} ({node_names[node_index]}) must be of type {expected.value}, got {node_type.value}.")

    body = _get_body(bodies, node_names[node_index])
    _require_ephemeris(body)
    _require_gravitational_parameter(body, f'node {node_index} body')
    outgoing_leg_type = outgoing_leg_settings.leg_type if outgoing_leg_settings is not None else None

    if node_type == TransferNodeTypes.escape_and_departure or node_type == TransferNodeTypes.capture_and_insertion:
        return TransferNode(node_type, body, outgoing_leg_type,
                            semi_major_axis=node_settings.semi_major_axis,
                            eccentricity=node_settings.eccentricity)
    elif node_type == TransferNodeTypes.swingby:
        minimum_periapsis = node_settings.minimum_periapsis
        if minimum_periapsis is None:
            minimum_periapsis = default_minimum_periapsis(body.name)
        if minimum_periapsis is None:
            raise MissingEnvironmentData(
                f"Node {node_index}: no minimum periapsis given and no default known for '{body.name}'.")
        return TransferNode(node_type, body, outgoing_leg_type, minimum_periapsis=minimum_periapsis)
    raise ConfigurationError(f"Node {node_index}: unsupported node type {node_type!r}.")
