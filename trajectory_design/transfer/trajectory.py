import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from trajectory_design.environment.bodies import SystemOfBodies
from trajectory_design.transfer.evaluation import TransferEvaluation, evaluate_transfer
from trajectory_design.transfer.exceptions import NotYetEvaluatedError, StructuralMismatchError
from trajectory_design.transfer.factory import TransferLeg, TransferNode, create_transfer_leg, create_transfer_node
from trajectory_design.transfer.sampling import sample_states
from trajectory_design.transfer.settings import TransferLegSettings, TransferNodeSettings

logger = logging.getLogger(__name__)


class TransferTrajectory:
    """
    A sequence of N nodes joined by N-1 legs; leg i runs from node i to node i+1.

    Build it with create_transfer_trajectory(), then call evaluate() as often as needed.
    Result readers return the outputs of the last successful evaluation. An instance is
    not meant to be evaluated from several threads at once, since each evaluation replaces
    the stored results; use one instance per caller instead.
    """
    def __init__(self, nodes: Sequence[TransferNode], legs: Sequence[TransferLeg],
                 body_order: Sequence[str], central_body: str):
        if len(legs) + 1 != len(nodes):
            raise StructuralMismatchError(f"{len(nodes)} nodes cannot be joined by {len(legs)} legs.")
        if len(body_order) != len(nodes):
            raise StructuralMismatchError(f"{len(body_order)} body names given for {len(nodes)} nodes.")

        self._nodes = tuple(nodes)
        self._legs = tuple(legs)
        self._body_order = tuple(body_order)
        self._central_body = central_body
        self._last_evaluation: Optional[TransferEvaluation] = None

    def evaluate(self, node_times, leg_parameters, node_parameters):
        """
        Evaluates the transfer for the given epochs and free parameters.

        Args:
            node_times (array-like): One epoch per node [s], strictly increasing.
            leg_parameters (list): One free-parameter vector per leg.
            node_parameters (list): One free-parameter vector per node.

        Raises:
            ParameterDimensionError: Wrong number or length of inputs.
            InvalidParameterValueError: Non-increasing epochs or out-of-range parameters.
            InfeasibleNodeError: A node constraint cannot be met.
            InfeasibleLegError: A leg has no two-body solution (e.g. a 180 degree Lambert arc).

        On failure, the results of the previous evaluation are kept.
        """
        self._last_evaluation = evaluate_transfer(self._nodes, self._legs, node_times,
                                                  leg_parameters, node_parameters)

    def _evaluation(self) -> TransferEvaluation:
        if self._last_evaluation is None:
            raise NotYetEvaluatedError("Transfer trajectory has not been evaluated yet; call evaluate() first.")
        return self._last_evaluation

    @property
    def has_been_evaluated(self) -> bool:
        return self._last_evaluation is not None

    @property
    def number_of_nodes(self) -> int:
        return len(self._nodes)

    @property
    def number_of_legs(self) -> int:
        return len(self._legs)

    @property
    def body_order(self) -> Tuple[str, ...]:
        return self._body_order

    @property
    def central_body(self) -> str:
        return self._central_body

    @property
    def node_types(self) -> list:
        return [node.node_type for node in self._nodes]

    @property
    def leg_types(self) -> list:
        return [leg.leg_type for leg in self._legs]

    @property
    def delta_v(self) -> float:
        """Total Delta-V of nodes and legs [km/s]."""
        return self._evaluation().delta_v

    @property
    def time_of_flight(self) -> float:
        """Arrival epoch minus departure epoch [s]."""
        return self._evaluation().time_of_flight

    @property
    def node_times(self) -> np.ndarray:
        return self._evaluation().node_times.copy()

    @property
    def delta_v_per_node(self) -> np.ndarray:
        return self._evaluation().delta_v_per_node.copy()

    @property
    def delta_v_per_leg(self) -> np.ndarray:
        return self._evaluation().delta_v_per_leg.copy()

    @property
    def legs_time_of_flight(self) -> np.ndarray:
        return np.diff(self._evaluation().node_times)

    def single_node_delta_v(self, node_index: int) -> float:
        return float(_element(self._evaluation().delta_v_per_node, node_index, "node"))

    def single_leg_delta_v(self, leg_index: int) -> float:
        return float(_element(self._evaluation().delta_v_per_leg, leg_index, "leg"))

    def states_along_trajectory(self, samples_per_leg: int) -> List[Tuple[float, np.ndarray]]:
        """
        Spacecraft states sampled uniformly along each leg of the last evaluation.

        Returns:
            list[tuple[float, np.ndarray]]: (epoch, state) pairs, epochs strictly increasing,
                                            number_of_legs * samples_per_leg entries.
        """
        evaluation = self._evaluation()
        return sample_states(self._legs, evaluation.leg_solutions, samples_per_leg)

    def state_history(self, samples_per_leg: int) -> Dict[float, np.ndarray]:
        """states_along_trajectory() as an ordered {epoch: state} dict."""
        return dict(self.states_along_trajectory(samples_per_leg))


def _element(values: np.ndarray, index: int, kind: str):
    # Negative indices would silently wrap to the end of the chain
    if not 0 <= index < len(values):
        raise IndexError(f"{kind} index {index} out of range for {len(values)} {kind}s.")
    return values[index]


def create_transfer_trajectory(bodies: SystemOfBodies,
                               leg_settings: List[TransferLegSettings],
                               node_settings: List[TransferNodeSettings],
                               node_names: List[str],
                               central_body: str) -> TransferTrajectory:
    """
    Builds a TransferTrajectory from leg/node settings.

    Args:
        bodies (SystemOfBodies): Bodies providing ephemerides and gravitational parameters.
        leg_settings (list): N-1 leg settings.
        node_settings (list): N node settings, departure first and capture last.
        node_names (list[str]): N body names, one per node.
        central_body (str): Body the transfer legs are computed about (e.g. 'SUN').

    Returns:
        TransferTrajectory

    Raises:
        StructuralMismatchError: Inconsistent numbers of legs, nodes and names.
        ConfigurationError: Unsupported settings or node types out of place.
        MissingEnvironmentData: Missing body, ephemeris or gravitational parameter.
    """
    if not len(leg_settings) + 1 == len(node_settings) == len(node_names):
        raise StructuralMismatchError(
            f"Expected len(leg_settings) + 1 == len(node_settings) == len(node_names), got "
            f"{len(leg_settings)} legs, {len(node_settings)} nodes and {len(node_names)} names.")
    if len(node_names) < 2:
        raise StructuralMismatchError("A transfer needs at least two nodes.")

    nodes = []
    legs = []
    for i, settings in enumerate(node_settings):
        outgoing = leg_settings[i] if i < len(leg_settings) else None
        # The outgoing leg is checked first since it shapes the node's free parameters
        if outgoing is not None:
            legs.append(create_transfer_leg(bodies, outgoing, i, node_names, central_body))
        nodes.append(create_transfer_node(bodies, settings, i, node_names, outgoing))

    logger.debug("Created transfer %s about %s with %d legs", " -> ".join(node_names), central_body, len(legs))
    return TransferTrajectory(nodes, legs, node_names, central_body)
