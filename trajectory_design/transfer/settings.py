"""
Leg and node settings: immutable, type-tagged descriptions of how each element of a
transfer trajectory behaves. Free parameters are supplied at evaluation time, not here.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from trajectory_design.constants import default_minimum_periapsis
from trajectory_design.transfer.exceptions import ConfigurationError, StructuralMismatchError


class TransferLegTypes(Enum):
    unpowered_unperturbed_leg = 'unpowered_unperturbed_leg'
    dsm_position_based_leg = 'dsm_position_based_leg'
    dsm_velocity_based_leg = 'dsm_velocity_based_leg'


class TransferNodeTypes(Enum):
    escape_and_departure = 'escape_and_departure'
    swingby = 'swingby'
    capture_and_insertion = 'capture_and_insertion'


@dataclass(frozen=True)
class TransferLegSettings:
    leg_type: TransferLegTypes

    def __post_init__(self):
        if not isinstance(self.leg_type, TransferLegTypes):
            raise ConfigurationError(f"Unknown transfer leg type {self.leg_type!r}.")


@dataclass(frozen=True)
class TransferNodeSettings:
    """
    Node settings. Orbit fields apply to departure and capture nodes only, and are
    either both set or both None (no orbit imposed). minimum_periapsis applies to
    swingby nodes only; None defers to DEFAULT_MINIMUM_PERICENTERS.
    """
    node_type: TransferNodeTypes
    semi_major_axis: Optional[float] = None
    eccentricity: Optional[float] = None
    minimum_periapsis: Optional[float] = None

    def __post_init__(self):
        if not isinstance(self.node_type, TransferNodeTypes):
            raise ConfigurationError(f"Unknown transfer node type {self.node_type!r}.")

        if self.node_type == TransferNodeTypes.swingby:
            if self.semi_major_axis is not None or self.eccentricity is not None:
                raise ConfigurationError("Swingby nodes do not take a departure/capture orbit.")
            if self.minimum_periapsis is not None and not self.minimum_periapsis > 0.0:
                raise ConfigurationError(f"Minimum periapsis must be positive, got {self.minimum_periapsis}.")
            return

        if self.minimum_periapsis is not None:
            raise ConfigurationError(f"{self.node_type.value} nodes do not take a minimum periapsis.")
        if (self.semi_major_axis is None) != (self.eccentricity is None):
            raise ConfigurationError("Semi-major axis and eccentricity must be given together.")
        if self.semi_major_axis is not None:
            if not self.semi_major_axis > 0.0:
                raise ConfigurationError(f"Semi-major axis must be positive, got {self.semi_major_axis}.")
            if not 0.0 <= self.eccentricity < 1.0:
                raise ConfigurationError(f"Eccentricity must lie in [0, 1), got {self.eccentricity}.")

    @property
    def has_orbit_constraint(self) -> bool:
        return self.semi_major_axis is not None


def unpowered_leg() -> TransferLegSettings:
    """Ballistic leg: a single Lambert arc between the node bodies."""
    return TransferLegSettings(TransferLegTypes.unpowered_unperturbed_leg)


def dsm_position_based_leg() -> TransferLegSettings:
    """Leg with one deep-space maneuver placed by position: two Lambert arcs joined at the DSM."""
    return TransferLegSettings(TransferLegTypes.dsm_position_based_leg)


def dsm_velocity_based_leg() -> TransferLegSettings:
    """Leg with one deep-space maneuver: coast from the node-given departure velocity, then a Lambert arc."""
    return TransferLegSettings(TransferLegTypes.dsm_velocity_based_leg)


def departure_node(departure_semi_major_axis: Optional[float] = None,
                   departure_eccentricity: Optional[float] = None) -> TransferNodeSettings:
    return TransferNodeSettings(TransferNodeTypes.escape_and_departure,
                                semi_major_axis=departure_semi_major_axis,
                                eccentricity=departure_eccentricity)


def swingby_node(minimum_periapsis: Optional[float] = None) -> TransferNodeSettings:
    return TransferNodeSettings(TransferNodeTypes.swingby, minimum_periapsis=minimum_periapsis)


def capture_node(capture_semi_major_axis: Optional[float] = None,
                 capture_eccentricity: Optional[float] = None) -> TransferNodeSettings:
    return TransferNodeSettings(TransferNodeTypes.capture_and_insertion,
                                semi_major_axis=capture_semi_major_axis,
                                eccentricity=capture_eccentricity)


def leg_settings_for_type(leg_type: TransferLegTypes) -> TransferLegSettings:
    if leg_type == TransferLegTypes.unpowered_unperturbed_leg:
        return unpowered_leg()
    elif leg_type == TransferLegTypes.dsm_position_based_leg:
        return dsm_position_based_leg()
    elif leg_type == TransferLegTypes.dsm_velocity_based_leg:
        return dsm_velocity_based_leg()
    raise ConfigurationError(f"Unknown transfer leg type {leg_type!r}.")


def mga_transfer_settings(body_order: List[str],
                          leg_type: TransferLegTypes,
                          departure_orbit: Tuple[Optional[float], Optional[float]] = (None, None),
                          arrival_orbit: Tuple[Optional[float], Optional[float]] = (None, None),
                          minimum_pericenters: Dict[str, float] = None
                          ) -> Tuple[List[TransferLegSettings], List[TransferNodeSettings]]:
    """
    Settings for a multiple gravity assist transfer with identical legs.

    Args:
        body_order (list[str]): Node bodies, departure first and arrival last.
        leg_type (TransferLegTypes): Type used for every leg.
        departure_orbit (tuple): (semi-major axis [km], eccentricity) of the departure orbit, or (None, None).
        arrival_orbit (tuple): (semi-major axis [km], eccentricity) of the capture orbit, or (None, None).
        minimum_pericenters (dict): Per-body minimum swingby periapsis [km]. Bodies missing
                                    from it fall back to DEFAULT_MINIMUM_PERICENTERS.

    Returns:
        tuple: (leg_settings, node_settings)
    """
    if len(body_order) < 2:
        raise StructuralMismatchError("A transfer needs at least a departure and an arrival body.")

    leg_settings = [leg_settings_for_type(leg_type) for _ in range(len(body_order) - 1)]

    node_settings = [departure_node(*departure_orbit)]
    for body in body_order[1:-1]:
        minimum_periapsis = None
        if minimum_pericenters is not None:
            minimum_periapsis = default_minimum_periapsis(body, minimum_pericenters)
        node_settings.append(swingby_node(minimum_periapsis))
    node_settings.append(capture_node(*arrival_orbit))

    return leg_settings, node_settings


def mga_settings_unpowered_unperturbed_legs(body_order, departure_orbit=(None, None),
                                            arrival_orbit=(None, None), minimum_pericenters=None):
    return mga_transfer_settings(body_order, TransferLegTypes.unpowered_unperturbed_leg,
                                 departure_orbit, arrival_orbit, minimum_pericenters)


def mga_settings_dsm_position_based_legs(body_order, departure_orbit=(None, None),
                                         arrival_orbit=(None, None), minimum_pericenters=None):
    return mga_transfer_settings(body_order, TransferLegTypes.dsm_position_based_leg,
                                 departure_orbit, arrival_orbit, minimum_pericenters)


def mga_settings_dsm_velocity_based_legs(body_order, departure_orbit=(None, None),
                                         arrival_orbit=(None, None), minimum_pericenters=None):
    return mga_transfer_settings(body_order, TransferLegTypes.dsm_velocity_based_leg,
                                 departure_orbit, arrival_orbit, minimum_pericenters)


# Free-parameter layout

DSM_POSITION_PARAMETERS = (
    'time-of-flight fraction [-]',
    'dimensionless DSM radius [-]',
    'DSM in-plane angle [rad]',
    'DSM out-of-plane angle [rad]',
)
DSM_VELOCITY_PARAMETERS = (
    'time-of-flight fraction [-]',
)
DEPARTURE_VELOCITY_PARAMETERS = (
    'excess velocity magnitude [km/s]',
    'excess velocity in-plane angle [rad]',
    'excess velocity out-of-plane angle [rad]',
)
SWINGBY_VELOCITY_PARAMETERS = (
    'periapsis radius [km]',
    'B-plane rotation angle [rad]',
    'periapsis delta-V [km/s]',
)


def leg_parameter_names(leg_type: TransferLegTypes) -> Tuple[str, ...]:
    if leg_type == TransferLegTypes.unpowered_unperturbed_leg:
        return ()
    elif leg_type == TransferLegTypes.dsm_position_based_leg:
        return DSM_POSITION_PARAMETERS
    elif leg_type == TransferLegTypes.dsm_velocity_based_leg:
        return DSM_VELOCITY_PARAMETERS
    raise ConfigurationError(f"Unknown transfer leg type {leg_type!r}.")


def node_computes_outgoing_velocity(outgoing_leg_type: Optional[TransferLegTypes]) -> bool:
    """
    True when the node, not the leg after it, fixes the departure velocity of that leg.
    """
    return outgoing_leg_type == TransferLegTypes.dsm_velocity_based_leg


def node_parameter_names(node_type: TransferNodeTypes,
                         outgoing_leg_type: Optional[TransferLegTypes]) -> Tuple[str, ...]:
    computes_velocity = node_computes_outgoing_velocity(outgoing_leg_type)
    if node_type == TransferNodeTypes.escape_and_departure:
        return DEPARTURE_VELOCITY_PARAMETERS if computes_velocity else ()
    elif node_type == TransferNodeTypes.swingby:
        return SWINGBY_VELOCITY_PARAMETERS if computes_velocity else ()
    elif node_type == TransferNodeTypes.capture_and_insertion:
        return ()
    raise ConfigurationError(f"Unknown transfer node type {node_type!r}.")


def parameter_definitions(leg_settings: List[TransferLegSettings],
                          node_settings: List[TransferNodeSettings]) -> List[str]:
    """
    Human-readable layout of the node times and free-parameter vectors expected by evaluate().
    """
    if len(leg_settings) + 1 != len(node_settings):
        raise StructuralMismatchError(
            f"Expected {len(leg_settings) + 1} node settings for {len(leg_settings)} legs, "
            f"got {len(node_settings)}.")

    lines = ["Transfer parameter definition:", "  Node times:"]
    for i, node in enumerate(node_settings):
        lines.append(f"    node_times[{i}]: epoch of node {i} ({node.node_type.value}) [s]")

    lines.append("  Leg parameters:")
    for i, leg in enumerate(leg_settings):
        names = leg_parameter_names(leg.leg_type)
        lines.append(f"    leg_parameters[{i}] ({leg.leg_type.value}): {len(names)} value(s)")
        for j, name in enumerate(names):
            lines.append(f"      [{j}] {name}")

    lines.append("  Node parameters:")
    for i, node in enumerate(node_settings):
        outgoing = leg_settings[i].leg_type if i < len(leg_settings) else None
        names = node_parameter_names(node.node_type, outgoing)
        lines.append(f"    node_parameters[{i}] ({node.node_type.value}): {len(names)} value(s)")
        for j, name in enumerate(names):
            lines.append(f"      [{j}] {name}")

    return lines


def print_parameter_definitions(leg_settings: List[TransferLegSettings],
                                node_settings: List[TransferNodeSettings]):
    print("\n".join(parameter_definitions(leg_settings, node_settings)))
