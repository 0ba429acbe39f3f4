"""
Evaluation of an assembled transfer: node epochs and free parameters in, per-node and
per-leg Delta-V out. Nodes and legs are processed strictly from departure to arrival,
since each node's incoming correction depends on the velocity delivered by the leg before it.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from trajectory_design.mission.departure import (
    body_fixed_axes,
    compute_departure_v_inf,
    compute_escape_or_capture_delta_v,
    spherical_to_vector,
)
from trajectory_design.trajectory.flyby import (
    compute_outgoing_v_inf,
    compute_powered_swingby_delta_v,
    compute_required_periapsis,
)
from trajectory_design.trajectory.kepler import propagate_kepler
from trajectory_design.trajectory.lambert import LambertSolver
from trajectory_design.transfer.exceptions import (
    ConfigurationError,
    InfeasibleLegError,
    InfeasibleNodeError,
    InvalidParameterValueError,
    ParameterDimensionError,
)
from trajectory_design.transfer.factory import TransferLeg, TransferNode
from trajectory_design.transfer.settings import TransferLegTypes, TransferNodeTypes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LegSolution:
    """
    Kinematics of one evaluated leg.

    Attributes:
        departure_state (np.ndarray): Spacecraft state right after leaving the departure node.
        arrival_velocity (np.ndarray): Spacecraft velocity delivered at the arrival node.
        delta_v (float): Delta-V spent inside the leg [km/s].
        dsm_epoch (float, optional): Epoch of the deep-space maneuver.
        dsm_state (np.ndarray, optional): Spacecraft state right after the deep-space maneuver.
    """
    leg_type: TransferLegTypes
    departure_epoch: float
    arrival_epoch: float
    departure_state: np.ndarray
    arrival_velocity: np.ndarray
    delta_v: float
    dsm_epoch: Optional[float] = None
    dsm_state: Optional[np.ndarray] = None

    @property
    def time_of_flight(self) -> float:
        return self.arrival_epoch - self.departure_epoch


@dataclass(frozen=True)
class TransferEvaluation:
    """Outputs of one successful evaluation, kept by the trajectory until the next one."""
    node_times: np.ndarray
    delta_v_per_node: np.ndarray
    delta_v_per_leg: np.ndarray
    leg_solutions: Tuple[LegSolution, ...]
    delta_v: float
    time_of_flight: float


def check_evaluation_inputs(nodes: Sequence[TransferNode], legs: Sequence[TransferLeg],
                            node_times, leg_parameters, node_parameters
                            ) -> Tuple[np.ndarray, List[np.ndarray], List[np.ndarray]]:
    """
    Validates counts, vector lengths and epoch ordering.

    Returns:
        tuple: (node_times, leg_parameters, node_parameters) as float arrays.

    Raises:
        ParameterDimensionError: Wrong number of epochs or vectors, or a vector of the wrong length.
        InvalidParameterValueError: Epochs not finite or not strictly increasing.
    """
    number_of_nodes = len(nodes)

    times = np.asarray(node_times, dtype=float)
    if times.ndim != 1 or times.shape[0] != number_of_nodes:
        raise ParameterDimensionError(
            f"Expected {number_of_nodes} node times, got shape {times.shape}.")
    if not np.all(np.isfinite(times)):
        raise InvalidParameterValueError("Node times must be finite.")
    if np.any(np.diff(times) <= 0.0):
        raise InvalidParameterValueError(f"Node times must be strictly increasing, got {times.tolist()}.")

    if len(leg_parameters) != len(legs):
        raise ParameterDimensionError(
            f"Expected {len(legs)} leg parameter vectors, got {len(leg_parameters)}.")
    if len(node_parameters) != number_of_nodes:
        raise ParameterDimensionError(
            f"Expected {number_of_nodes} node parameter vectors, got {len(node_parameters)}.")

    checked_legs = [_check_vector(parameters, leg.number_of_parameters, f"Leg {i} ({leg.leg_type.value})")
                    for i, (leg, parameters) in enumerate(zip(legs, leg_parameters))]
    checked_nodes = [_check_vector(parameters, node.number_of_parameters, f"Node {i} ({node.node_type.value})")
                     for i, (node, parameters) in enumerate(zip(nodes, node_parameters))]

    return times, checked_legs, checked_nodes


def _check_vector(parameters, expected_size: int, label: str) -> np.ndarray:
    vector = np.asarray(parameters, dtype=float)
    if vector.ndim != 1 or vector.shape[0] != expected_size:
        raise ParameterDimensionError(
            f"{label} expects {expected_size} free parameters, got shape {vector.shape}.")
    if not np.all(np.isfinite(vector)):
        raise InvalidParameterValueError(f"{label} free parameters must be finite, got {vector.tolist()}.")
    return vector


def evaluate_transfer(nodes: Sequence[TransferNode], legs: Sequence[TransferLeg],
                      node_times, leg_parameters, node_parameters) -> TransferEvaluation:
    """
    Computes all node and leg Delta-V contributions of a transfer.

    Args:
        nodes (list[TransferNode]): N node models, departure first.
        legs (list[TransferLeg]): N-1 leg models; leg i joins node i and node i+1.
        node_times (array-like): N strictly increasing epochs [s].
        leg_parameters (list): N-1 free-parameter vectors.
        node_parameters (list): N free-parameter vectors.

    Returns:
        TransferEvaluation: Per-element and total results.
    """
    times, leg_parameters, node_parameters = check_evaluation_inputs(
        nodes, legs, node_times, leg_parameters, node_parameters)

    body_states = [node.body.state(epoch) for node, epoch in zip(nodes, times)]

    delta_v_per_node = np.zeros(len(nodes))
    delta_v_per_leg = np.zeros(len(legs))
    solutions = []
    incoming_velocity = None

    for i, leg in enumerate(legs):
        node = nodes[i]
        if node.computes_outgoing_velocity:
            departure_velocity, delta_v_per_node[i] = compute_node_outgoing_velocity(
                node, i, body_states[i], node_parameters[i], incoming_velocity)
            solution = _solve_leg_at_index(i, leg, times, body_states, leg_parameters[i], departure_velocity)
        else:
            solution = _solve_leg_at_index(i, leg, times, body_states, leg_parameters[i])
            delta_v_per_node[i] = compute_node_departure_delta_v(
                node, i, body_states[i], solution.departure_state[3:6], incoming_velocity)

        delta_v_per_leg[i] = solution.delta_v
        solutions.append(solution)
        incoming_velocity = solution.arrival_velocity
        logger.debug("Node %d (%s): dV = %.6f km/s; leg %d (%s): dV = %.6f km/s",
                     i, node.body.name, delta_v_per_node[i], i, leg.leg_type.value, delta_v_per_leg[i])

    last = len(nodes) - 1
    delta_v_per_node[last] = compute_node_arrival_delta_v(nodes[last], last, body_states[last], incoming_velocity)
    logger.debug("Node %d (%s): dV = %.6f km/s", last, nodes[last].body.name, delta_v_per_node[last])

    return TransferEvaluation(
        node_times=times,
        delta_v_per_node=delta_v_per_node,
        delta_v_per_leg=delta_v_per_leg,
        leg_solutions=tuple(solutions),
        delta_v=float(np.sum(delta_v_per_node) + np.sum(delta_v_per_leg)),
        time_of_flight=float(times[-1] - times[0]),
    )


# Legs

def _solve_leg_at_index(leg_index, leg, times, body_states, parameters, departure_velocity=None) -> LegSolution:
    try:
        return solve_leg(leg, times[leg_index], times[leg_index + 1], body_states[leg_index],
                         body_states[leg_index + 1], parameters, departure_velocity)
    except RuntimeError as e:
        raise InfeasibleLegError(leg_index, str(e)) from e


def solve_leg(leg: TransferLeg, departure_epoch: float, arrival_epoch: float,
              departure_body_state: np.ndarray, arrival_body_state: np.ndarray,
              parameters: np.ndarray, departure_velocity: np.ndarray = None) -> LegSolution:
    """
    Solves the kinematics of one leg between its node bodies.

    Args:
        departure_velocity (np.ndarray): Spacecraft velocity fixed by the departure node,
                                         required by DSM velocity-based legs only.
    """
    if leg.leg_type == TransferLegTypes.unpowered_unperturbed_leg:
        return _solve_unpowered_leg(leg, departure_epoch, arrival_epoch, departure_body_state, arrival_body_state)
    elif leg.leg_type == TransferLegTypes.dsm_position_based_leg:
        return _solve_dsm_position_based_leg(leg, departure_epoch, arrival_epoch, departure_body_state,
                                             arrival_body_state, parameters)
    elif leg.leg_type == TransferLegTypes.dsm_velocity_based_leg:
        if departure_velocity is None:
            raise ConfigurationError("DSM velocity-based legs need the departure velocity from their node.")
        return _solve_dsm_velocity_based_leg(leg, departure_epoch, arrival_epoch, departure_body_state,
                                             arrival_body_state, parameters, departure_velocity)
    raise ConfigurationError(f"Unsupported leg type {leg.leg_type!r}.")


def _solve_unpowered_leg(leg, t0, t1, departure_body_state, arrival_body_state) -> LegSolution:
    r0 = departure_body_state[0:3]
    r1 = arrival_body_state[0:3]
    v0, v1 = LambertSolver.solve(r0, r1, t1 - t0, leg.central_body_gravitational_parameter)
    return LegSolution(leg.leg_type, t0, t1, np.concatenate((r0, v0)), v1, 0.0)


def _check_time_of_flight_fraction(fraction: float):
    if not 0.0 < fraction < 1.0:
        raise InvalidParameterValueError(f"DSM time-of-flight fraction must lie in (0, 1), got {fraction}.")


def _solve_dsm_position_based_leg(leg, t0, t1, departure_body_state, arrival_body_state, parameters) -> LegSolution:
    fraction, dimensionless_radius, in_plane_angle, out_of_plane_angle = parameters
    _check_time_of_flight_fraction(fraction)
    if not dimensionless_radius > 0.0:
        raise InvalidParameterValueError(f"Dimensionless DSM radius must be positive, got {dimensionless_radius}.")

    mu = leg.central_body_gravitational_parameter
    r0 = departure_body_state[0:3]
    r1 = arrival_body_state[0:3]
    tof = t1 - t0

    # DSM position in the departure body's radial / along-track / normal axes
    axes = body_fixed_axes(departure_body_state, primary='position')
    r_dsm = spherical_to_vector(dimensionless_radius * np.linalg.norm(r0), in_plane_angle, out_of_plane_angle, axes)

    v0, v_dsm_before = LambertSolver.solve(r0, r_dsm, fraction * tof, mu)
    v_dsm_after, v1 = LambertSolver.solve(r_dsm, r1, (1.0 - fraction) * tof, mu)

    return LegSolution(leg.leg_type, t0, t1,
                       departure_state=np.concatenate((r0, v0)),
                       arrival_velocity=v1,
                       delta_v=float(np.linalg.norm(v_dsm_after - v_dsm_before)),
                       dsm_epoch=t0 + fraction * tof,
                       dsm_state=np.concatenate((r_dsm, v_dsm_after)))


def _solve_dsm_velocity_based_leg(leg, t0, t1, departure_body_state, arrival_body_state, parameters,
                                  departure_velocity) -> LegSolution:
    fraction = parameters[0]
    _check_time_of_flight_fraction(fraction)

    mu = leg.central_body_gravitational_parameter
    tof = t1 - t0
    departure_state = np.concatenate((departure_body_state[0:3], departure_velocity))

    # Coast to the DSM, then Lambert arc to the arrival body
    dsm_state_before = propagate_kepler(departure_state, mu, fraction * tof)
    r_dsm = dsm_state_before[0:3]
    v_dsm_after, v1 = LambertSolver.solve(r_dsm, arrival_body_state[0:3], (1.0 - fraction) * tof, mu)

    return LegSolution(leg.leg_type, t0, t1,
                       departure_state=departure_state,
                       arrival_velocity=v1,
                       delta_v=float(np.linalg.norm(v_dsm_after - dsm_state_before[3:6])),
                       dsm_epoch=t0 + fraction * tof,
                       dsm_state=np.concatenate((r_dsm, v_dsm_after)))


# Nodes

def compute_node_outgoing_velocity(node: TransferNode, node_index: int, body_state: np.ndarray,
                                   parameters: np.ndarray, incoming_velocity: Optional[np.ndarray]
                                   ) -> Tuple[np.ndarray, float]:
    """
    Outgoing spacecraft velocity of a node that fixes it from its own free parameters.

    Returns:
        tuple: (outgoing velocity [km/s], node Delta-V [km/s])
    """
    body_velocity = body_state[3:6]
    mu = node.gravitational_parameter

    if node.node_type == TransferNodeTypes.escape_and_departure:
        v_inf_mag, in_plane_angle, out_of_plane_angle = parameters
        if v_inf_mag < 0.0:
            raise InvalidParameterValueError(f"Node {node_index}: excess velocity magnitude must be non-negative.")
        v_inf = compute_departure_v_inf(body_state, v_inf_mag, in_plane_angle, out_of_plane_angle)
        delta_v = compute_escape_or_capture_delta_v(mu, node.semi_major_axis, node.eccentricity, v_inf_mag)
        return body_velocity + v_inf, delta_v

    elif node.node_type == TransferNodeTypes.swingby:
        rp, rotation_angle, periapsis_delta_v = parameters
        if rp < node.minimum_periapsis:
            raise InfeasibleNodeError(
                node_index, f"periapsis radius {rp:.3f} km is below the minimum {node.minimum_periapsis:.3f} km.")
        v_inf_in = incoming_velocity - body_velocity
        if np.linalg.norm(v_inf_in) == 0.0:
            raise InfeasibleNodeError(node_index, "incoming excess velocity is zero.")
        try:
            v_inf_out, _, _ = compute_outgoing_v_inf(v_inf_in, rotation_angle, rp, mu, periapsis_delta_v)
        except ValueError as e:
            raise InfeasibleNodeError(node_index, str(e)) from e
        return body_velocity + v_inf_out, abs(periapsis_delta_v)

    raise ConfigurationError(f"Node {node_index}: {node.node_type.value} nodes do not fix an outgoing velocity.")


def compute_node_departure_delta_v(node: TransferNode, node_index: int, body_state: np.ndarray,
                                   outgoing_velocity: np.ndarray, incoming_velocity: Optional[np.ndarray]) -> float:
    """
    Delta-V of a node whose outgoing velocity was fixed by the leg after it.
    """
    body_velocity = body_state[3:6]
    mu = node.gravitational_parameter
    v_inf_out = outgoing_velocity - body_velocity

    if node.node_type == TransferNodeTypes.escape_and_departure:
        return compute_escape_or_capture_delta_v(mu, node.semi_major_axis, node.eccentricity,
                                                 np.linalg.norm(v_inf_out))

    elif node.node_type == TransferNodeTypes.swingby:
        v_inf_in = incoming_velocity - body_velocity
        try:
            rp = compute_required_periapsis(v_inf_in, v_inf_out, mu, node.minimum_periapsis)
        except (RuntimeError, ValueError) as e:
            raise InfeasibleNodeError(node_index, str(e)) from e
        if rp is None:
            raise InfeasibleNodeError(
                node_index, f"required swingby periapsis is below the minimum {node.minimum_periapsis:.3f} km.")
        return compute_powered_swingby_delta_v(np.linalg.norm(v_inf_in), np.linalg.norm(v_inf_out), rp, mu)

    raise ConfigurationError(f"Node {node_index}: {node.node_type.value} nodes have no outgoing leg.")


def compute_node_arrival_delta_v(node: TransferNode, node_index: int, body_state: np.ndarray,
                                 incoming_velocity: np.ndarray) -> float:
    """Capture Delta-V of the final node."""
    if node.node_type != TransferNodeTypes.capture_and_insertion:
        raise ConfigurationError(f"Node {node_index}: final node must be a capture node.")
    v_inf_in = np.linalg.norm(incoming_velocity - body_state[3:6])
    return compute_escape_or_capture_delta_v(node.gravitational_parameter, node.semi_major_axis,
                                             node.eccentricity, v_inf_in)
